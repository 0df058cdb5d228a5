"""Exception hierarchy for vrdiff."""

from __future__ import annotations


class VrdiffError(Exception):
    """Base class for all vrdiff errors."""


class JobError(VrdiffError):
    """Failure confined to a single image pair; becomes an Errored outcome."""


class ImageIOError(JobError):
    """An image file could not be read, or a diff image could not be written."""


class DecodeError(JobError):
    """Image bytes are corrupt or use an unsupported pixel layout."""


class DimensionInvariantError(JobError):
    """Normalized buffers do not satisfy the RGBA size invariant."""


class DiffComputeError(JobError):
    """The pixel diff function raised."""


class ReportInvariantError(VrdiffError):
    """The finished report does not account for every common path."""
