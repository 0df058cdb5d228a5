"""Channel canonicalization and dimension matching for decoded images."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from vrdiff.errors import DimensionInvariantError


@dataclass(frozen=True)
class RawImage:
    """Decoded pixels as a ``(height, width, channels)`` uint8 array."""

    width: int
    height: int
    pixels: np.ndarray

    @property
    def channels(self) -> int:
        return int(self.pixels.shape[2]) if self.pixels.ndim == 3 else 1

    def validate_rgba(self) -> None:
        """Raise DimensionInvariantError unless the buffer holds width*height*4 bytes."""
        expected = (self.height, self.width, 4)
        if self.pixels.shape != expected or self.pixels.size != self.width * self.height * 4:
            raise DimensionInvariantError(
                f"RGBA buffer shape {self.pixels.shape} does not match {expected}"
            )


def to_rgba(image: RawImage) -> RawImage:
    """Return *image* with four channels, synthesizing opaque alpha for RGB input.

    RGBA input is returned unchanged. Channel counts other than 3 and 4 are
    rejected by the decoder before reaching this point.
    """
    if image.channels == 4:
        return image
    rgba = np.empty((image.height, image.width, 4), dtype=np.uint8)
    rgba[:, :, :3] = image.pixels[:, :, :3]
    rgba[:, :, 3] = 255
    return RawImage(width=image.width, height=image.height, pixels=rgba)


def pad_to(image: RawImage, width: int, height: int) -> RawImage:
    """Copy *image* into a fresh zeroed ``width`` x ``height`` RGBA canvas.

    Source rows land at the same row index starting at column 0. Bytes the
    source does not cover stay transparent black. Never crops.
    """
    if width < image.width or height < image.height:
        raise DimensionInvariantError(
            f"cannot pad {image.width}x{image.height} down to {width}x{height}"
        )
    dest = np.zeros((height, width, 4), dtype=np.uint8)
    dest[: image.height, : image.width, :] = image.pixels
    return RawImage(width=width, height=height, pixels=dest)


def pad_to_match(a: RawImage, b: RawImage) -> tuple[RawImage, RawImage]:
    """Pad two RGBA images to ``(max(w1, w2), max(h1, h2))``.

    Both outputs are freshly allocated, even when a source already has the
    target size.
    """
    width = max(a.width, b.width)
    height = max(a.height, b.height)
    return pad_to(a, width, height), pad_to(b, width, height)


def normalize_pair(baseline: RawImage, candidate: RawImage) -> tuple[RawImage, RawImage]:
    """Canonicalize both images to RGBA and pad them to a shared size.

    Raises:
        DimensionInvariantError: If the padded images still disagree in size
            or violate the RGBA buffer invariant.
    """
    a, b = pad_to_match(to_rgba(baseline), to_rgba(candidate))
    if (a.width, a.height) != (b.width, b.height):
        raise DimensionInvariantError(
            f"normalized sizes differ: {a.width}x{a.height} vs {b.width}x{b.height}"
        )
    a.validate_rgba()
    b.validate_rgba()
    return a, b
