"""Shared helpers for unit tests."""

from __future__ import annotations

import struct
import zlib
from pathlib import Path

import numpy as np
import pytest
from PIL import Image


def save_image(
    root: Path,
    rel: str,
    color: tuple[int, ...] | int = (0, 0, 0, 255),
    size: tuple[int, int] = (10, 10),
    mode: str = "RGBA",
    *,
    fmt: str | None = None,
) -> Path:
    """Write a solid-color image at *root*/*rel*, creating parent dirs."""
    p = root / rel
    p.parent.mkdir(parents=True, exist_ok=True)
    Image.new(mode, size, color).save(p, format=fmt)
    return p


def save_pixels(root: Path, rel: str, pixels: np.ndarray) -> Path:
    """Write an RGBA array as PNG at *root*/*rel*."""
    p = root / rel
    p.parent.mkdir(parents=True, exist_ok=True)
    Image.fromarray(pixels.astype(np.uint8)).save(p, format="PNG")
    return p


def _chunk(kind: bytes, body: bytes) -> bytes:
    crc = zlib.crc32(kind + body) & 0xFFFFFFFF
    return struct.pack(">I", len(body)) + kind + body + struct.pack(">I", crc)


def save_oversized_png(root: Path, rel: str, width: int = 30000, height: int = 30000) -> Path:
    """Write a header-only PNG whose IHDR claims *width* x *height* pixels."""
    p = root / rel
    p.parent.mkdir(parents=True, exist_ok=True)
    ihdr = struct.pack(">IIBBBBB", width, height, 8, 6, 0, 0, 0)
    p.write_bytes(b"\x89PNG\r\n\x1a\n" + _chunk(b"IHDR", ihdr) + _chunk(b"IEND", b""))
    return p


def rgba(width: int, height: int, color: tuple[int, int, int, int]) -> np.ndarray:
    arr = np.empty((height, width, 4), dtype=np.uint8)
    arr[:, :] = color
    return arr


@pytest.fixture
def trees(tmp_path: Path) -> tuple[Path, Path, Path]:
    """Return (baseline, candidate, diff) directories under tmp_path."""
    baseline = tmp_path / "baseline"
    candidate = tmp_path / "candidate"
    baseline.mkdir()
    candidate.mkdir()
    return baseline, candidate, tmp_path / "diff"
