"""Host platform helpers: detection, subprocesses, files."""

from .detection import Platform, detect_platform
from .files import atomic_copy
from .process import ProcessError, run

__all__ = [
    "Platform",
    "ProcessError",
    "atomic_copy",
    "detect_platform",
    "run",
]
