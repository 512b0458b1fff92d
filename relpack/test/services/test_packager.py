"""Tests for services/packager.py - the whole pipeline with a fake build tool."""

from __future__ import annotations

import hashlib
from pathlib import Path

import pytest

from relpack.core.result import Err, Ok, Result
from relpack.output.console import MockConsole
from relpack.platform.detection import Platform
from relpack.services.errors import (
    BuildError,
    CopyError,
    DownloadError,
    ExtractionError,
    IntegrityError,
)
from relpack.services.packager import Packager
from relpack.test._fixtures import (
    DEP_CONTENT,
    DEP_URL,
    dependency_zip,
    make_manifest,
)
from relpack.tools.http import HttpError, MockHttpClient


def _packager(tmp_path: Path, client: MockHttpClient | None = None) -> tuple[Packager, MockHttpClient]:
    if client is None:
        client = MockHttpClient()
        client.set_download(DEP_URL, dependency_zip())
    packager = Packager(
        http=client,
        console=MockConsole(),
        temp_root=tmp_path / "scratch",
        platform=Platform.LINUX,
    )
    return packager, client


def _listing(directory: Path) -> dict[str, bytes]:
    return {p.name: p.read_bytes() for p in sorted(directory.iterdir())}


class TestSuccess:
    def test_bundle_contains_exactly_binaries_and_dependency(self, tmp_path: Path) -> None:
        manifest = make_manifest(tmp_path)
        packager, _ = _packager(tmp_path)

        result = packager.package(manifest)

        assert isinstance(result, Ok)
        assert sorted(p.name for p in manifest.out_dir.iterdir()) == [
            "quincy-client-daemon",
            "quincy-client-gui",
            "wintun.dll",
        ]
        assert (manifest.out_dir / "wintun.dll").read_bytes() == DEP_CONTENT
        assert result.value.names == ["quincy-client-gui", "quincy-client-daemon", "wintun.dll"]
        dll = result.value.files[-1]
        assert dll.sha256 == hashlib.sha256(DEP_CONTENT).hexdigest()
        assert dll.size == len(DEP_CONTENT)

    def test_rerun_is_byte_identical(self, tmp_path: Path) -> None:
        manifest = make_manifest(tmp_path)
        packager, _ = _packager(tmp_path)

        assert isinstance(packager.package(manifest), Ok)
        first = _listing(manifest.out_dir)
        assert isinstance(packager.package(manifest), Ok)

        assert _listing(manifest.out_dir) == first

    def test_overwrites_existing_files(self, tmp_path: Path) -> None:
        manifest = make_manifest(tmp_path)
        manifest.out_dir.mkdir()
        (manifest.out_dir / "wintun.dll").write_bytes(b"stale")
        packager, _ = _packager(tmp_path)

        assert isinstance(packager.package(manifest), Ok)
        assert (manifest.out_dir / "wintun.dll").read_bytes() == DEP_CONTENT

    def test_empty_targets_still_fetches_dependency(self, tmp_path: Path) -> None:
        manifest = make_manifest(tmp_path, targets=())
        packager, client = _packager(tmp_path)

        result = packager.package(manifest)

        assert isinstance(result, Ok)
        assert client.calls == [("download", DEP_URL)]
        assert result.value.names == ["wintun.dll"]
        assert not (tmp_path / "build.log").exists()

    def test_scratch_directory_is_removed(self, tmp_path: Path) -> None:
        manifest = make_manifest(tmp_path)
        packager, _ = _packager(tmp_path)

        packager.package(manifest)

        assert list((tmp_path / "scratch").iterdir()) == []

    def test_steps_reported_in_order(self, tmp_path: Path) -> None:
        manifest = make_manifest(tmp_path)
        console = MockConsole()
        client = MockHttpClient()
        client.set_download(DEP_URL, dependency_zip())
        packager = Packager(http=client, console=console, temp_root=tmp_path / "s")

        packager.package(manifest)

        assert console.headers == ["build", "download", "verify", "extract", "copy"]


class TestFailures:
    def test_build_failure_skips_fetch(self, tmp_path: Path) -> None:
        manifest = make_manifest(tmp_path, targets=("quincy-client-gui", "broken"))
        packager, client = _packager(tmp_path)

        result = packager.package(manifest)

        assert isinstance(result, Err)
        assert isinstance(result.error, BuildError)
        assert client.calls == []
        assert not manifest.out_dir.exists()

    def test_download_failure(self, tmp_path: Path) -> None:
        manifest = make_manifest(tmp_path)
        client = MockHttpClient()
        client.set_download(DEP_URL, HttpError(url=DEP_URL, status=503, message="Unavailable"))
        packager, _ = _packager(tmp_path, client)

        result = packager.package(manifest)

        assert isinstance(result, Err)
        assert isinstance(result.error, DownloadError)
        assert result.error.cause is not None and result.error.cause.status == 503
        assert not manifest.out_dir.exists()

    def test_checksum_mismatch_never_writes_dependency(self, tmp_path: Path) -> None:
        manifest = make_manifest(tmp_path, sha256="f" * 64)
        packager, _ = _packager(tmp_path)

        result = packager.package(manifest)

        assert isinstance(result, Err)
        assert isinstance(result.error, IntegrityError)
        assert result.error.expected == "f" * 64
        assert result.error.actual == hashlib.sha256(dependency_zip()).hexdigest()
        assert not (manifest.out_dir / "wintun.dll").exists()

    def test_skip_verify_accepts_mismatch_with_warning(self, tmp_path: Path) -> None:
        manifest = make_manifest(tmp_path, sha256="f" * 64)
        console = MockConsole()
        client = MockHttpClient()
        client.set_download(DEP_URL, dependency_zip())
        packager = Packager(http=client, console=console, temp_root=tmp_path / "s")

        result = packager.package(manifest, skip_verify=True)

        assert isinstance(result, Ok)
        assert console.has_warning()
        assert console.find(hashlib.sha256(dependency_zip()).hexdigest())

    def test_member_missing(self, tmp_path: Path) -> None:
        manifest = make_manifest(tmp_path, member="wintun/bin/x86/wintun.dll")
        packager, _ = _packager(tmp_path)

        result = packager.package(manifest)

        assert isinstance(result, Err)
        assert isinstance(result.error, ExtractionError)
        assert not manifest.out_dir.exists()

    def test_malformed_archive(self, tmp_path: Path) -> None:
        payload = b"not an archive"
        manifest = make_manifest(tmp_path, sha256=hashlib.sha256(payload).hexdigest())
        client = MockHttpClient()
        client.set_download(DEP_URL, payload)
        packager, _ = _packager(tmp_path, client)

        result = packager.package(manifest)

        assert isinstance(result, Err)
        assert isinstance(result.error, ExtractionError)

    def test_name_collision(self, tmp_path: Path) -> None:
        manifest = make_manifest(tmp_path, targets=("wintun.dll",))
        packager, client = _packager(tmp_path)

        result = packager.package(manifest)

        assert isinstance(result, Err)
        assert isinstance(result.error, CopyError)
        assert client.calls == []

    def test_name_collision_ignores_case(self, tmp_path: Path) -> None:
        manifest = make_manifest(tmp_path, targets=("Wintun.dll",))
        packager, client = _packager(tmp_path)

        result = packager.package(manifest)

        assert isinstance(result, Err)
        assert isinstance(result.error, CopyError)
        assert "Wintun.dll" in result.error.message
        assert client.calls == []
        assert not manifest.out_dir.exists()

    def test_copy_failure(self, tmp_path: Path) -> None:
        blocker = tmp_path / "release"
        blocker.write_text("a file where the bundle directory should be")
        manifest = make_manifest(tmp_path, out_dir=blocker)
        packager, _ = _packager(tmp_path)

        result = packager.package(manifest)

        assert isinstance(result, Err)
        assert isinstance(result.error, CopyError)
        assert result.error.written == ()


class _InterruptingClient:
    def download(self, url: str, dest: Path) -> Result[Path, HttpError]:
        dest.write_bytes(b"half an archive")
        raise KeyboardInterrupt


def test_interrupt_mid_download_leaves_nothing_behind(tmp_path: Path) -> None:
    manifest = make_manifest(tmp_path)
    packager = Packager(
        http=_InterruptingClient(),
        console=MockConsole(),
        temp_root=tmp_path / "scratch",
        platform=Platform.LINUX,
    )

    with pytest.raises(KeyboardInterrupt):
        packager.package(manifest)

    assert not manifest.out_dir.exists()
    assert list((tmp_path / "scratch").iterdir()) == []
