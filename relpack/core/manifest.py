"""Typed release manifest loading.

A manifest is a TOML file describing one release bundle: which binaries to
build, which pinned dependency to fetch, and where to put the result. The
dependency URL, checksum and archive path live here rather than in code so
that upgrading the dependency is a config change.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path, PurePosixPath
from urllib.parse import urlparse

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_number, get_str, get_str_list, get_table

__all__ = [
    "BuildSpec",
    "DependencyPin",
    "ManifestError",
    "ReleaseManifest",
    "DEFAULT_MANIFEST_NAME",
    "bundled_manifest_path",
    "load_manifest",
]

DEFAULT_MANIFEST_NAME = "release.toml"

DEFAULT_BUILD_COMMAND = ("cargo", "build", "--release")
DEFAULT_TARGET_ARGS = ("--bin", "{target}")
DEFAULT_BUILD_OUTPUT_DIR = "target/release"
DEFAULT_OUT_DIR = "release"
DEFAULT_DOWNLOAD_TIMEOUT = 60.0


@dataclass(frozen=True, slots=True)
class ManifestError:
    """Error when a manifest cannot be loaded or is invalid."""

    message: str
    path: Path | None = None

    def __str__(self) -> str:
        if self.path is not None:
            return f"{self.message} ({self.path})"
        return self.message


@dataclass(frozen=True, slots=True)
class DependencyPin:
    """A third-party archive pinned by checksum.

    Attributes:
        url: Archive URL.
        sha256: Expected SHA-256 of the archive, lowercase hex.
        member: Path of the file to extract, inside the archive (POSIX).
        timeout: Download timeout in seconds.
    """

    url: str
    sha256: str
    member: str
    timeout: float = DEFAULT_DOWNLOAD_TIMEOUT

    @property
    def filename(self) -> str:
        """Name the extracted file gets in the bundle."""
        return PurePosixPath(self.member).name

    @property
    def archive_name(self) -> str:
        return PurePosixPath(urlparse(self.url).path).name or "dependency.zip"


@dataclass(frozen=True, slots=True)
class BuildSpec:
    """How to invoke the build tool.

    The tool runs once as ``command + target_args(t1) + target_args(t2) ...``
    where every ``{target}`` in ``target_args`` is replaced by the target
    name. Built binaries are expected at ``output_dir/<target><suffix>``.
    """

    command: tuple[str, ...] = DEFAULT_BUILD_COMMAND
    target_args: tuple[str, ...] = DEFAULT_TARGET_ARGS
    output_dir: str = DEFAULT_BUILD_OUTPUT_DIR
    binary_suffix: str | None = None
    timeout: float | None = None

    def argv(self, targets: tuple[str, ...]) -> list[str]:
        args = list(self.command)
        for target in targets:
            args.extend(arg.replace("{target}", target) for arg in self.target_args)
        return args

    def binary_name(self, target: str, default_suffix: str) -> str:
        suffix = self.binary_suffix if self.binary_suffix is not None else default_suffix
        return f"{target}{suffix}"


@dataclass(frozen=True, slots=True)
class ReleaseManifest:
    """Everything needed to assemble one release bundle.

    Attributes:
        targets: Build-target names, in build and copy order.
        dependency: The pinned archive and the file to take from it.
        out_dir: Bundle directory (absolute once loaded from a file).
        root: Directory the build tool runs in.
        build: Build tool invocation.
    """

    targets: tuple[str, ...]
    dependency: DependencyPin
    out_dir: Path
    root: Path
    build: BuildSpec = field(default_factory=BuildSpec)

    def with_out_dir(self, out_dir: Path) -> ReleaseManifest:
        """Return a copy writing the bundle to out_dir."""
        return replace(self, out_dir=out_dir)

    @classmethod
    def from_dict(cls, data: Mapping[str, object], *, base_dir: Path) -> ReleaseManifest:
        """Create a manifest from parsed TOML.

        Relative ``root`` resolves against base_dir; relative ``out_dir``
        resolves against root.

        Raises:
            KeyError: A required key is missing.
            TypeError: A value has the wrong type.
            ValueError: A value is malformed.
        """
        release: StrDict = get_table(data, "release") or {}
        build: StrDict = get_table(data, "build") or {}
        dependency = get_table(data, "dependency")
        if dependency is None:
            raise KeyError("[dependency] table is required")

        root_str = get_str(release, "root")
        root = (base_dir / root_str) if root_str else base_dir
        root = root.resolve()

        targets = tuple(get_str_list(release, "targets") or [])
        _check_targets(targets)

        out_dir = root / (get_str(release, "out_dir") or DEFAULT_OUT_DIR)

        command = get_str_list(build, "command")
        if command is not None and not command:
            raise ValueError("build.command must not be empty")
        target_args = get_str_list(build, "target_args")
        suffix = build.get("binary_suffix")
        if suffix is not None and not isinstance(suffix, str):
            raise TypeError("build.binary_suffix must be a string")

        return cls(
            targets=targets,
            dependency=_parse_dependency(dependency),
            out_dir=out_dir,
            root=root,
            build=BuildSpec(
                command=tuple(command) if command else DEFAULT_BUILD_COMMAND,
                target_args=tuple(target_args) if target_args is not None else DEFAULT_TARGET_ARGS,
                output_dir=get_str(build, "output_dir") or DEFAULT_BUILD_OUTPUT_DIR,
                binary_suffix=suffix,
                timeout=get_number(build, "timeout"),
            ),
        )


def _check_targets(targets: tuple[str, ...]) -> None:
    seen: set[str] = set()
    for target in targets:
        name = target.strip()
        if not name:
            raise ValueError("release.targets must not contain empty names")
        if name != target or "/" in name or "\\" in name:
            raise ValueError(f"invalid target name: {target!r}")
        if name in seen:
            raise ValueError(f"duplicate target: {name}")
        seen.add(name)


def _parse_dependency(table: StrDict) -> DependencyPin:
    url = get_str(table, "url")
    if url is None:
        raise KeyError("dependency.url is required")
    if urlparse(url).scheme not in ("https", "http"):
        raise ValueError(f"dependency.url must be http(s): {url}")

    raw_sha = get_str(table, "sha256")
    if raw_sha is None:
        raise KeyError("dependency.sha256 is required")
    digest = raw_sha.lower()
    if not is_sha256(digest):
        raise ValueError("dependency.sha256: expected 64-char SHA256 hex")

    member = get_str(table, "member")
    if member is None:
        raise KeyError("dependency.member is required")
    posix = PurePosixPath(member.replace("\\", "/"))
    if posix.is_absolute() or any(part in ("", ".", "..") for part in posix.parts):
        raise ValueError(f"dependency.member must be a relative archive path: {member}")

    timeout = get_number(table, "timeout")
    return DependencyPin(
        url=url,
        sha256=digest,
        member=posix.as_posix(),
        timeout=timeout if timeout is not None else DEFAULT_DOWNLOAD_TIMEOUT,
    )


def is_sha256(value: str) -> bool:
    if len(value) != 64:
        return False
    return all(ch in "0123456789abcdef" for ch in value)


def _parse_toml(path: Path) -> Result[StrDict, ManifestError]:
    """Parse a TOML file, handling read and syntax errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ManifestError("Manifest root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ManifestError("Manifest file not found", path=path))
    except PermissionError:
        return Err(ManifestError("Permission denied reading manifest", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ManifestError(f"Invalid TOML syntax: {e}", path=path))
    except (UnicodeDecodeError, OSError) as e:
        return Err(ManifestError(f"Error reading manifest: {e}", path=path))


def load_manifest(
    path: Path, *, base_dir: Path | None = None
) -> Result[ReleaseManifest, ManifestError]:
    """Load and validate a release manifest.

    Args:
        path: Path to the manifest TOML file.
        base_dir: Directory relative paths resolve against. Defaults to the
            directory holding the manifest.

    Returns:
        Ok(ReleaseManifest) on success, Err(ManifestError) on failure.
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    base = base_dir if base_dir is not None else path.parent
    try:
        manifest = ReleaseManifest.from_dict(result.value, base_dir=base.resolve())
        return Ok(manifest)
    except KeyError as e:
        return Err(ManifestError(f"Missing manifest key: {e.args[0]}", path=path))
    except (TypeError, ValueError) as e:
        return Err(ManifestError(f"Invalid manifest: {e}", path=path))


def bundled_manifest_path() -> Path:
    """Path of the manifest shipped with relpack (Quincy client + WinTun)."""
    return Path(__file__).parent.parent / "data" / DEFAULT_MANIFEST_NAME
