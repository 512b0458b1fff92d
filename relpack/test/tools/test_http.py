"""Tests for tools/http.py - HTTP client abstraction."""

from __future__ import annotations

import http.client
import urllib.error
from pathlib import Path

import pytest

from relpack.core.result import Err, Ok
from relpack.tools.http import HttpClient, HttpError, MockHttpClient, RealHttpClient


class TestHttpError:
    def test_str_with_status(self) -> None:
        error = HttpError(url="https://example.com/a.zip", status=503, message="Unavailable")
        assert str(error) == "HTTP 503: Unavailable (https://example.com/a.zip)"

    def test_str_without_status(self) -> None:
        error = HttpError(url="https://example.com", status=0, message="Download timed out")
        assert str(error) == "Download timed out (https://example.com)"


class TestMockHttpClient:
    def test_is_http_client(self) -> None:
        assert isinstance(MockHttpClient(), HttpClient)

    def test_download_writes_content(self, tmp_path: Path) -> None:
        client = MockHttpClient()
        client.set_download("https://example.com/a.zip", b"data")

        result = client.download("https://example.com/a.zip", tmp_path / "a.zip")

        assert result == Ok(tmp_path / "a.zip")
        assert (tmp_path / "a.zip").read_bytes() == b"data"
        assert client.calls == [("download", "https://example.com/a.zip")]

    def test_unknown_url_is_404(self, tmp_path: Path) -> None:
        result = MockHttpClient().download("https://example.com/x", tmp_path / "x")

        assert isinstance(result, Err)
        assert result.error.status == 404


class _FakeResponse:
    def __init__(self, body: bytes, *, status: int = 200, length: int | None = None) -> None:
        self._body = body
        self.status = status
        self.headers = {"Content-Length": str(len(body) if length is None else length)}

    def read(self, size: int = -1) -> bytes:
        chunk, self._body = self._body[:size], self._body[size:]
        return chunk

    def __enter__(self) -> _FakeResponse:
        return self

    def __exit__(self, *args: object) -> None:
        return None


class TestRealHttpClient:
    def test_download(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(
            "urllib.request.urlopen", lambda *a, **kw: _FakeResponse(b"x" * 100_000)
        )

        result = RealHttpClient().download("https://example.com/a.zip", tmp_path / "a.zip")

        assert isinstance(result, Ok)
        assert (tmp_path / "a.zip").stat().st_size == 100_000

    def test_non_2xx_status(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(
            "urllib.request.urlopen", lambda *a, **kw: _FakeResponse(b"", status=304)
        )

        result = RealHttpClient().download("https://example.com/a.zip", tmp_path / "a.zip")

        assert isinstance(result, Err)
        assert result.error.status == 304

    def test_truncated_body(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(
            "urllib.request.urlopen", lambda *a, **kw: _FakeResponse(b"abc", length=10)
        )

        result = RealHttpClient().download("https://example.com/a.zip", tmp_path / "a.zip")

        assert isinstance(result, Err)
        assert "Truncated" in result.error.message

    def test_http_error(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        def _raise(*_: object, **__: object) -> None:
            raise urllib.error.HTTPError(
                "https://example.com/a.zip", 404, "Not Found", {}, None  # type: ignore[arg-type]
            )

        monkeypatch.setattr("urllib.request.urlopen", _raise)

        result = RealHttpClient().download("https://example.com/a.zip", tmp_path / "a.zip")

        assert isinstance(result, Err)
        assert result.error.status == 404

    def test_timeout(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        def _raise(*_: object, **__: object) -> None:
            raise TimeoutError()

        monkeypatch.setattr("urllib.request.urlopen", _raise)

        result = RealHttpClient(timeout=0.1).download("https://example.com/a.zip", tmp_path / "a.zip")

        assert isinstance(result, Err)
        assert result.error.message == "Download timed out"

    @pytest.mark.parametrize(
        "exc",
        [
            http.client.IncompleteRead(b"abc", 13),
            http.client.BadStatusLine("garbage"),
            http.client.RemoteDisconnected(),
        ],
    )
    def test_protocol_errors_are_results(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, exc: http.client.HTTPException
    ) -> None:
        def _raise(*_: object, **__: object) -> None:
            raise exc

        monkeypatch.setattr("urllib.request.urlopen", _raise)

        result = RealHttpClient().download("https://example.com/a.zip", tmp_path / "a.zip")

        assert isinstance(result, Err)
        assert result.error.status == 0
        assert result.error.message

    def test_broken_body_mid_read(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        class _BrokenChunked(_FakeResponse):
            def read(self, size: int = -1) -> bytes:
                raise http.client.IncompleteRead(b"abc", 13)

        monkeypatch.setattr("urllib.request.urlopen", lambda *a, **kw: _BrokenChunked(b""))

        result = RealHttpClient().download("https://example.com/a.zip", tmp_path / "a.zip")

        assert isinstance(result, Err)
        assert "IncompleteRead" in result.error.message or "bytes read" in result.error.message
