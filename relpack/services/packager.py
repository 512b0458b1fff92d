"""Release bundle assembly.

Pipeline, strictly in order, stopping at the first failure:

1. build   - run the build tool once for every target
2. download - fetch the pinned dependency archive into a scratch directory
3. verify  - compare its SHA-256 with the pinned value
4. extract - unpack the archive in the scratch directory, locate the member
5. copy    - write binaries and the extracted file into the output directory

The build runs before any network access, so a broken build never fetches.
The scratch directory is a TemporaryDirectory, removed on every exit path
including KeyboardInterrupt. Nothing is written to the output directory
before step 5, and each file there is renamed into place once complete.
Files already copied when step 5 fails are left as they are.
"""

from __future__ import annotations

import tempfile
from dataclasses import dataclass
from pathlib import Path

from relpack.core.manifest import ReleaseManifest
from relpack.core.result import Err, Ok, Result
from relpack.output.console import ConsoleProtocol, Style
from relpack.platform.detection import Platform, detect_platform
from relpack.platform.files import atomic_copy
from relpack.services.build import build_targets
from relpack.services.errors import (
    CopyError,
    DownloadError,
    ExtractionError,
    IntegrityError,
    PackagingError,
)
from relpack.tools.checksum import sha256_file, verify_sha256
from relpack.tools.download import Downloader
from relpack.tools.extract import Extractor
from relpack.tools.http import HttpClient

__all__ = ["Bundle", "BundleFile", "Packager"]


@dataclass(frozen=True, slots=True)
class BundleFile:
    name: str
    size: int
    sha256: str


@dataclass(frozen=True, slots=True)
class Bundle:
    """A completed release bundle.

    Attributes:
        out_dir: The output directory.
        files: One entry per file written, binaries first in target order,
            then the dependency file.
    """

    out_dir: Path
    files: tuple[BundleFile, ...]

    @property
    def names(self) -> list[str]:
        return [f.name for f in self.files]


class Packager:
    """Builds, fetches, verifies and assembles a release bundle.

    Collaborators are passed in so tests can run the whole pipeline without
    network access:

        packager = Packager(http=MockHttpClient(), console=MockConsole(), temp_root=tmp)
        result = packager.package(manifest)
    """

    def __init__(
        self,
        *,
        http: HttpClient,
        console: ConsoleProtocol,
        temp_root: Path | None = None,
        platform: Platform | None = None,
        extractor: Extractor | None = None,
    ) -> None:
        self._http = http
        self._console = console
        self._temp_root = temp_root
        self._platform = platform or detect_platform()
        self._extractor = extractor or Extractor()

    def package(
        self, manifest: ReleaseManifest, *, skip_verify: bool = False
    ) -> Result[Bundle, PackagingError]:
        """Run the pipeline for manifest.

        Args:
            manifest: What to build and bundle.
            skip_verify: Accept the archive without comparing checksums.
                For debugging only; the actual digest is still reported.

        Returns:
            Ok(Bundle) on success, Err with the error of the failing step.
        """
        self._console.header("build")
        if manifest.targets:
            self._console.print(" ".join(manifest.build.argv(manifest.targets)), Style.DIM)
        else:
            self._console.print("no targets, skipping build tool", Style.DIM)
        built = build_targets(manifest, self._platform)
        if isinstance(built, Err):
            return built
        binaries = built.value

        names = [p.name for p in binaries] + [manifest.dependency.filename]
        # Case-insensitive: the bundle targets Windows filesystems
        folded = [n.casefold() for n in names]
        duplicates = sorted({n for n in names if folded.count(n.casefold()) > 1})
        if duplicates:
            return Err(CopyError(message=f"bundle file name collision: {', '.join(duplicates)}"))

        if self._temp_root is not None:
            try:
                self._temp_root.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                return Err(
                    DownloadError(message=f"cannot create temp directory {self._temp_root}: {e}")
                )

        with tempfile.TemporaryDirectory(prefix="relpack-", dir=self._temp_root) as scratch:
            scratch_dir = Path(scratch)

            dependency = self._fetch_dependency(manifest, scratch_dir, skip_verify=skip_verify)
            if isinstance(dependency, Err):
                return dependency

            return self._copy(manifest.out_dir, [*binaries, dependency.value])

    def _fetch_dependency(
        self, manifest: ReleaseManifest, scratch_dir: Path, *, skip_verify: bool
    ) -> Result[Path, PackagingError]:
        pin = manifest.dependency

        self._console.header("download")
        self._console.print(pin.url, Style.DIM)
        downloader = Downloader(self._http, scratch_dir / "download")
        downloaded = downloader.download(pin.url)
        if isinstance(downloaded, Err):
            return Err(DownloadError(message=str(downloaded.error), cause=downloaded.error))
        archive = downloaded.value.path
        self._console.print(f"{downloaded.value.size} bytes", Style.DIM)

        self._console.header("verify")
        if skip_verify:
            actual = sha256_file(archive)
            self._console.warning(f"checksum verification skipped (sha256 {actual})")
        else:
            verified = verify_sha256(archive, pin.sha256)
            if isinstance(verified, Err):
                mismatch = verified.error
                return Err(
                    IntegrityError(
                        message=f"checksum mismatch for {pin.archive_name}",
                        expected=mismatch.expected,
                        actual=mismatch.actual,
                    )
                )
            self._console.print(f"sha256 {verified.value}", Style.DIM)

        self._console.header("extract")
        extracted = self._extractor.extract_member(archive, pin.member, scratch_dir / "extract")
        if isinstance(extracted, Err):
            return Err(ExtractionError(message=str(extracted.error), cause=extracted.error))
        self._console.print(pin.member, Style.DIM)
        return Ok(extracted.value)

    def _copy(self, out_dir: Path, sources: list[Path]) -> Result[Bundle, PackagingError]:
        self._console.header("copy")
        written: list[BundleFile] = []
        for src in sources:
            dest = out_dir / src.name
            try:
                atomic_copy(src, dest)
                written.append(
                    BundleFile(name=dest.name, size=dest.stat().st_size, sha256=sha256_file(dest))
                )
            except OSError as e:
                return Err(
                    CopyError(
                        message=f"cannot write {dest}",
                        path=dest,
                        cause=str(e),
                        written=tuple(f.name for f in written),
                    )
                )
            self._console.print(f"{src} -> {dest}", Style.DIM)

        return Ok(Bundle(out_dir=out_dir, files=tuple(written)))
