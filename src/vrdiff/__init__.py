"""vrdiff package."""

from importlib.metadata import PackageNotFoundError, version

from vrdiff.orchestrator import diff_folders
from vrdiff.report import Report

__all__ = ["Report", "__version__", "diff_folders"]

try:
    __version__ = version("vrdiff")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"
