"""Image discovery, decoding and PNG encoding.

All pixel data crosses this module as ``RawImage`` values backed by
``numpy.uint8`` arrays of shape ``(height, width, channels)``.
"""

from __future__ import annotations

import io
import struct
from enum import Enum
from pathlib import Path

import numpy as np
from PIL import Image

from vrdiff.errors import DecodeError
from vrdiff.normalize import RawImage

IMAGE_SUFFIXES = frozenset({".png", ".jpg", ".jpeg"})

# Pillow modes decoded without conversion.
_NATIVE_MODES = {"RGB", "RGBA"}

# Pillow surfaces bad input through several exception types.
# UnidentifiedImageError is an OSError.
_DECODE_FAILURES = (
    Image.DecompressionBombError,
    OSError,
    ValueError,
    SyntaxError,
    EOFError,
    struct.error,
)


class ImageFormat(str, Enum):
    """Decoder selected for an image path."""

    PNG = "PNG"
    JPEG = "JPEG"


def classify(path: str) -> ImageFormat:
    """Pick the decoder for *path* from its extension alone."""
    if path.lower().endswith(".png"):
        return ImageFormat.PNG
    return ImageFormat.JPEG


def list_images(root: Path) -> list[str]:
    """Return sorted POSIX-style paths of all images below *root*.

    Raises:
        FileNotFoundError: If *root* does not exist.
        NotADirectoryError: If *root* is not a directory.
    """
    if not root.exists():
        raise FileNotFoundError(f"image root not found: {root}")
    if not root.is_dir():
        raise NotADirectoryError(f"image root is not a directory: {root}")
    found = [
        p.relative_to(root).as_posix()
        for p in root.rglob("*")
        if p.suffix.lower() in IMAGE_SUFFIXES and p.is_file()
    ]
    return sorted(found)


def decode(data: bytes, fmt: ImageFormat) -> RawImage:
    """Decode PNG or JPEG bytes into a 3- or 4-channel RawImage.

    Args:
        data: Encoded file contents.
        fmt: Decoder to use; other formats are rejected.

    Returns:
        RawImage whose pixels keep the source channel count (RGB or RGBA).

    Raises:
        DecodeError: On corrupt data, a format mismatch, or an unconvertible mode.
    """
    try:
        with Image.open(io.BytesIO(data), formats=[fmt.value]) as img:
            if img.mode not in _NATIVE_MODES:
                has_alpha = "A" in img.getbands() or "transparency" in img.info
                img = img.convert("RGBA" if has_alpha else "RGB")
            pixels = np.asarray(img, dtype=np.uint8)
    except _DECODE_FAILURES as exc:
        raise DecodeError(f"cannot decode {fmt.value} image: {exc}") from exc

    if pixels.ndim != 3 or pixels.shape[2] not in (3, 4):
        raise DecodeError(f"unsupported pixel layout {pixels.shape}")
    height, width = pixels.shape[:2]
    return RawImage(width=width, height=height, pixels=pixels)


def encode_png(image: RawImage) -> bytes:
    """Encode an RGBA RawImage as PNG bytes."""
    image.validate_rgba()
    buf = io.BytesIO()
    Image.fromarray(image.pixels).save(buf, format="PNG")
    return buf.getvalue()
