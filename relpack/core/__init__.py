"""Core domain types: results, exit codes, release manifest."""

from .errors import ErrorCode
from .manifest import (
    BuildSpec,
    DependencyPin,
    ManifestError,
    ReleaseManifest,
    load_manifest,
)
from .result import Err, Ok, Result, is_err, is_ok

__all__ = [
    # errors
    "ErrorCode",
    # manifest
    "BuildSpec",
    "DependencyPin",
    "ManifestError",
    "ReleaseManifest",
    "load_manifest",
    # result
    "Err",
    "Ok",
    "Result",
    "is_err",
    "is_ok",
]
