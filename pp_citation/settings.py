import os
from pathlib import Path

from . import defaults

# Basic settings helper to read environment configuration.


def _as_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return val.lower() in ("1", "true", "yes", "on")


class Settings:
    def __init__(self) -> None:
        self.LOG_LEVEL: str = os.getenv("PP_CITATION_LOG_LEVEL", "INFO")
        # Measure the punishment line at the drawing size instead of the 2.0 reference size.
        self.MEASURE_AT_DRAW_SIZE: bool = _as_bool(os.getenv("PP_CITATION_MEASURE_AT_DRAW_SIZE"), False)
        self.ASSETS_DIR: Path = Path(os.getenv("PP_CITATION_ASSETS_DIR", str(defaults.ASSETS_DIR)))


settings = Settings()
