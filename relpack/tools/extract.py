"""Archive extraction.

This module provides an Extractor that:
- Extracts zip, tar.gz and tar.xz archives (detected from content)
- Refuses entries that would land outside the extraction directory
- Locates one member of the archive after extraction
"""

from __future__ import annotations

import shutil
import stat
import tarfile
import zipfile
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from relpack.core.result import Err, Ok, Result

__all__ = ["Extractor", "ExtractResult", "ExtractError"]


@dataclass(frozen=True, slots=True)
class ExtractError:
    """Extraction error details.

    Attributes:
        archive: Path to the archive that failed
        message: Human-readable error message
    """

    archive: Path
    message: str

    def __str__(self) -> str:
        return f"{self.message}: {self.archive.name}"


@dataclass(frozen=True, slots=True)
class ExtractResult:
    """Result of an extraction.

    Attributes:
        extract_dir: Directory the archive was extracted into
        members: Archive paths of the regular files written, in archive order
    """

    extract_dir: Path
    members: tuple[str, ...]


class Extractor:
    """Safe archive extractor.

    Usage:
        extractor = Extractor()
        result = extractor.extract_member(archive, "wintun/bin/amd64/wintun.dll", work_dir)
        if is_ok(result):
            print(f"Extracted: {result.value}")
    """

    def extract_member(
        self, archive: Path, member: str, extract_dir: Path
    ) -> Result[Path, ExtractError]:
        """Extract archive into extract_dir and return the path of member.

        Returns:
            Ok with the extracted file path, or Err if the archive is
            unreadable or does not contain member as a regular file.
        """
        result = self.extract(archive, extract_dir)
        if isinstance(result, Err):
            return result

        wanted = PurePosixPath(member.replace("\\", "/")).as_posix()
        if wanted not in result.value.members:
            return Err(ExtractError(archive=archive, message=f"Member not found: {wanted}"))

        path = extract_dir / Path(*PurePosixPath(wanted).parts)
        if not path.is_file():
            return Err(ExtractError(archive=archive, message=f"Member not a file: {wanted}"))
        return Ok(path)

    def extract(self, archive: Path, extract_dir: Path) -> Result[ExtractResult, ExtractError]:
        """Extract every regular file of archive into extract_dir.

        extract_dir is emptied first. Unsafe entries (absolute paths, ``..``,
        drive letters, links, devices) are skipped.
        """
        if not archive.is_file():
            return Err(ExtractError(archive=archive, message="Archive not found"))

        try:
            if zipfile.is_zipfile(archive):
                return self._extract_zip(archive, extract_dir)
            if tarfile.is_tarfile(archive):
                return self._extract_tar(archive, extract_dir)
        except OSError as e:
            return Err(ExtractError(archive=archive, message=f"IO error: {e}"))

        return Err(ExtractError(archive=archive, message="Unsupported or corrupt archive"))

    def _safe_relative_path(self, member_name: str) -> PurePosixPath | None:
        """Return a sanitized relative archive path, or None if unsafe."""
        normalized = member_name.replace("\\", "/")
        if normalized.startswith("/"):
            return None

        posix = PurePosixPath(normalized)
        parts = posix.parts
        if not parts:
            return None
        if any(part in {"", ".", ".."} for part in parts):
            return None
        if parts[0].endswith(":"):
            return None
        return posix

    def _is_within_root(self, root: Path, target: Path) -> bool:
        try:
            return target.resolve().is_relative_to(root.resolve())
        except OSError:
            return False

    def _prepare(self, extract_dir: Path) -> Path:
        if extract_dir.exists():
            shutil.rmtree(extract_dir)
        extract_dir.mkdir(parents=True)
        return extract_dir.resolve()

    def _extract_tar(self, archive: Path, extract_dir: Path) -> Result[ExtractResult, ExtractError]:
        try:
            root = self._prepare(extract_dir)
            members: list[str] = []

            with tarfile.open(archive, "r:*") as tar:
                for info in tar.getmembers():
                    # Regular files only: no dirs, links, devices or fifos
                    if not info.isreg():
                        continue

                    rel = self._safe_relative_path(info.name)
                    if rel is None:
                        continue

                    full_path = extract_dir / Path(*rel.parts)
                    if not self._is_within_root(root, full_path):
                        continue

                    src = tar.extractfile(info)
                    if src is None:
                        continue

                    full_path.parent.mkdir(parents=True, exist_ok=True)
                    with src, open(full_path, "wb") as dst:
                        shutil.copyfileobj(src, dst)
                    members.append(rel.as_posix())

            return Ok(ExtractResult(extract_dir=extract_dir, members=tuple(members)))

        except (tarfile.TarError, EOFError) as e:
            return Err(ExtractError(archive=archive, message=f"Tar extraction failed: {e}"))
        except OSError as e:
            return Err(ExtractError(archive=archive, message=f"IO error: {e}"))

    def _extract_zip(self, archive: Path, extract_dir: Path) -> Result[ExtractResult, ExtractError]:
        try:
            root = self._prepare(extract_dir)
            members: list[str] = []

            with zipfile.ZipFile(archive, "r") as zf:
                for info in zf.infolist():
                    if info.is_dir():
                        continue

                    rel = self._safe_relative_path(info.filename)
                    if rel is None:
                        continue

                    file_type_bits = (info.external_attr >> 16) & 0o170000
                    if file_type_bits == stat.S_IFLNK:
                        continue

                    full_path = extract_dir / Path(*rel.parts)
                    if not self._is_within_root(root, full_path):
                        continue

                    full_path.parent.mkdir(parents=True, exist_ok=True)
                    with zf.open(info) as src, open(full_path, "wb") as dst:
                        shutil.copyfileobj(src, dst)
                    members.append(rel.as_posix())

            return Ok(ExtractResult(extract_dir=extract_dir, members=tuple(members)))

        except (zipfile.BadZipFile, zipfile.LargeZipFile, EOFError) as e:
            return Err(ExtractError(archive=archive, message=f"Invalid zip file: {e}"))
        except OSError as e:
            return Err(ExtractError(archive=archive, message=f"IO error: {e}"))
