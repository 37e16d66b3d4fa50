"""
Slide-up reveal animation for a rendered citation.

Each frame is a transparent canvas of the citation's size whose bottom rows show
the bottom rows of the citation. The revealed height grows from 30 px to the full
height over the first 92 frames and then holds for the rest of the 153 frames.

Pillow's multi-frame GIF writer folds identical consecutive frames into one, which
would collapse the held tail of the animation. Frames are therefore encoded one at
a time by Pillow and joined into a single looping GIF89a stream here.
"""
import io
import logging
import math
import struct
from typing import List, NamedTuple, Optional, Sequence

from PIL import Image

from .renderer import CitationData, CitationRenderer

logger = logging.getLogger(__name__)

FRAME_COUNT = 153
# 152 - 60: frames past this index show the whole citation.
REVEAL_FRAMES = 152.0 - 60.0
REVEAL_START_HEIGHT = 30
FRAME_DURATION_MS = 30

_GIF_EXTENSION = 0x21
_GIF_IMAGE = 0x2C
_GIF_TRAILER = 0x3B
_GIF_GRAPHIC_CONTROL = 0xF9
_LOOP_FOREVER = b"!\xff\x0bNETSCAPE2.0\x03\x01" + struct.pack("<H", 0) + b"\x00"


class AnimationEncodeError(RuntimeError):
    """The reveal frames could not be encoded into a GIF."""


class RevealFrame(NamedTuple):
    image: Image.Image
    left: int
    top: int
    duration_ms: int


def reveal_height(index: int, full_height: int) -> int:
    """Rows of the citation visible in frame ``index``, clamped to [1, full_height]."""
    ratio = index / REVEAL_FRAMES
    height = REVEAL_START_HEIGHT + math.floor(ratio * (full_height - REVEAL_START_HEIGHT) + 0.5)
    return min(max(height, 1), full_height)


def build_reveal_frames(image: Image.Image, frame_count: int = FRAME_COUNT) -> List[RevealFrame]:
    width, height = image.size
    source = image.convert("RGBA")
    frames: List[RevealFrame] = []
    for index in range(frame_count):
        shown = reveal_height(index, height)
        frame = Image.new("RGBA", (width, height), (0, 0, 0, 0))
        strip = source.crop((0, height - shown, width, height))
        frame.paste(strip, (0, height - shown))
        frames.append(RevealFrame(frame, 0, 0, FRAME_DURATION_MS))
    return frames


def _skip_sub_blocks(data: bytes, pos: int) -> int:
    while True:
        size = data[pos]
        pos += 1
        if size == 0:
            return pos
        pos += size


def _frame_blocks(gif: bytes, left: int, top: int) -> bytes:
    """
    Pull the graphic control extension and image block out of a single-frame GIF.

    The file's global colour table becomes the frame's local colour table so that
    frames with different palettes can share one stream.
    """
    if gif[:6] not in (b"GIF87a", b"GIF89a"):
        raise AnimationEncodeError("encoder did not produce a GIF")
    packed = gif[10]
    pos = 13
    palette = b""
    palette_bits = 0
    if packed & 0x80:
        palette_bits = packed & 0x07
        size = 3 * (2 << palette_bits)
        palette = gif[pos:pos + size]
        pos += size

    out = bytearray()
    while True:
        marker = gif[pos]
        if marker == _GIF_TRAILER:
            break
        if marker == _GIF_EXTENSION:
            end = _skip_sub_blocks(gif, pos + 2)
            if gif[pos + 1] == _GIF_GRAPHIC_CONTROL:
                out += gif[pos:end]
            pos = end
        elif marker == _GIF_IMAGE:
            descriptor = bytearray(gif[pos:pos + 10])
            pos += 10
            struct.pack_into("<HH", descriptor, 1, left, top)
            if descriptor[9] & 0x80:
                table_size = 3 * (2 << (descriptor[9] & 0x07))
                table = gif[pos:pos + table_size]
                pos += table_size
            elif palette:
                table = palette
                descriptor[9] = (descriptor[9] & 0x60) | 0x80 | palette_bits
            else:
                raise AnimationEncodeError("frame has no colour table")
            # LZW minimum code size byte, then the data sub-blocks
            end = _skip_sub_blocks(gif, pos + 1)
            out += descriptor + table + gif[pos:end]
            pos = end
        else:
            raise AnimationEncodeError(f"unexpected GIF block 0x{marker:02x}")
    return bytes(out)


def encode_gif(frames: Sequence[RevealFrame]) -> bytes:
    """Encode every frame, in order, into one infinitely looping GIF."""
    if not frames:
        raise AnimationEncodeError("no frames to encode")
    size = frames[0].image.size
    for idx, frame in enumerate(frames):
        if frame.image.size != size:
            raise AnimationEncodeError(
                f"frame {idx} is {frame.image.size[0]}x{frame.image.size[1]}, expected {size[0]}x{size[1]}"
            )

    width, height = size
    out = io.BytesIO()
    out.write(b"GIF89a")
    # No global colour table; 8-bit colour resolution
    out.write(struct.pack("<HHBBB", width, height, 0x70, 0, 0))
    out.write(_LOOP_FOREVER)
    for idx, frame in enumerate(frames):
        buf = io.BytesIO()
        try:
            frame.image.save(
                buf,
                format="GIF",
                duration=frame.duration_ms,
                disposal=2,
                interlace=False,
            )
            out.write(_frame_blocks(buf.getvalue(), frame.left, frame.top))
        except AnimationEncodeError:
            raise
        except (OSError, ValueError, IndexError) as exc:
            raise AnimationEncodeError(f"failed to encode frame {idx}: {exc}") from exc
    out.write(bytes([_GIF_TRAILER]))
    data = out.getvalue()
    logger.debug("Encoded %s frames (%sx%s) into %s bytes", len(frames), width, height, len(data))
    return data


def render_gif(config: CitationData, renderer: Optional[CitationRenderer] = None) -> bytes:
    """Render ``config`` once and return the encoded slide-up animation."""
    renderer = renderer if renderer is not None else CitationRenderer()
    image = renderer.render(config)
    return encode_gif(build_reveal_frames(image))


def generate_gif(config: Optional[CitationData] = None) -> bytes:
    return render_gif(config if config is not None else CitationData())
