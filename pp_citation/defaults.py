from pathlib import Path

# Base asset locations within the package
PACKAGE_DIR = Path(__file__).resolve().parent
ASSETS_DIR = PACKAGE_DIR / "assets"
FONTS_DIR = ASSETS_DIR / "fonts"
IMAGES_DIR = ASSETS_DIR / "images"

# Default asset paths
STAMP_IMAGE = IMAGES_DIR / "stamp.png"
BARCODE_IMAGE = IMAGES_DIR / "barcode.png"
FONT_PATH = FONTS_DIR / "SourceCodePro-Regular.ttf"

# Canvas
WIDTH = 366
HEIGHT = 160
FONT_SIZE = 16.0

# Default colours (r, g, b, a)
BG_COLOUR = (243, 215, 230, 255)
FG_COLOUR = (90, 85, 89, 255)
DECORATION_COLOUR = (191, 168, 168, 255)

# Default citation content
HEADER_TEXT = "M.O.A. CITATION"
VIOLATION_TEXT = ("Protocol Violated", "Entry Permit: Invalid Name", None, None)
PUNISHMENT_TEXT = "LAST WARNING - NO PENALTY"
MAX_VIOLATION_LINES = 4
