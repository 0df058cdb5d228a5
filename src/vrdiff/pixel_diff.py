"""Plain per-pixel comparison of two equal-sized RGBA buffers."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any

import numpy as np


@dataclass(frozen=True)
class DiffOptions:
    """Tuning knobs for ``pixel_diff``.

    Attributes:
        threshold: Largest per-channel delta (0-255) still counted as equal.
        fade: Opacity of the grayscale baseline drawn under the diff overlay.
        diff_color: RGBA color painted over changed pixels.
    """

    threshold: int = 0
    fade: float = 0.1
    diff_color: tuple[int, int, int, int] = (255, 0, 0, 255)

    @classmethod
    def coerce(cls, value: DiffOptions | Mapping[str, Any] | None) -> DiffOptions:
        """Accept a DiffOptions, a mapping of its field names, or None."""
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        known = {f.name for f in fields(cls)}
        unknown = set(value) - known
        if unknown:
            raise ValueError(f"unknown diff options: {', '.join(sorted(unknown))}")
        opts = dict(value)
        if "diff_color" in opts:
            opts["diff_color"] = tuple(opts["diff_color"])
        return cls(**opts)


@dataclass(frozen=True)
class PixelDiffResult:
    changed: int
    total: int


def _faded_gray(rgba: np.ndarray, fade: float) -> np.ndarray:
    """Blend a luma rendition of *rgba* over white at opacity *fade*."""
    rgb = rgba[:, :, :3].astype(np.float32)
    alpha = rgba[:, :, 3:4].astype(np.float32) / 255.0
    luma = rgb @ np.array([0.299, 0.587, 0.114], dtype=np.float32)
    blended = 255.0 + (luma[:, :, None] - 255.0) * alpha * fade
    out = np.empty(rgba.shape, dtype=np.uint8)
    out[:, :, :3] = np.clip(blended, 0, 255).astype(np.uint8)
    out[:, :, 3] = 255
    return out


def pixel_diff(
    a: np.ndarray,
    b: np.ndarray,
    canvas: np.ndarray,
    width: int,
    height: int,
    options: DiffOptions | Mapping[str, Any] | None = None,
) -> PixelDiffResult:
    """Count pixels that differ between *a* and *b* and render the diff into *canvas*.

    Args:
        a: Baseline RGBA pixels, shape ``(height, width, 4)``.
        b: Candidate RGBA pixels, same shape as *a*.
        canvas: Output RGBA array, either one panel (``width`` wide) or three
            panels (``3 * width`` wide: baseline | diff | candidate).
        width: Image width in pixels.
        height: Image height in pixels.
        options: DiffOptions or a mapping of its fields.

    Returns:
        PixelDiffResult with the changed pixel count.

    Raises:
        ValueError: On mismatched buffer or canvas shapes, or bad options.
    """
    opts = DiffOptions.coerce(options)
    shape = (height, width, 4)
    if a.shape != shape or b.shape != shape:
        raise ValueError(f"buffers must be {shape}, got {a.shape} and {b.shape}")
    if canvas.shape not in ((height, width, 4), (height, width * 3, 4)):
        raise ValueError(f"canvas shape {canvas.shape} fits neither layout for {width}x{height}")

    delta = np.abs(a.astype(np.int16) - b.astype(np.int16)).max(axis=2)
    mask = delta > opts.threshold
    changed = int(np.count_nonzero(mask))

    panel = _faded_gray(a, opts.fade)
    panel[mask] = opts.diff_color

    if canvas.shape[1] == width:
        canvas[:] = panel
    else:
        canvas[:, :width] = a
        canvas[:, width : 2 * width] = panel
        canvas[:, 2 * width :] = b

    return PixelDiffResult(changed=changed, total=width * height)
