"""
Global test configuration with support for different test types.
"""

from collections.abc import Callable, Iterable
import dataclasses
import logging
import os
from pathlib import Path

import fitz  # PyMuPDF
import httpx
import pytest

from docbound.config import FrozenConfig


# --- Environment Isolation (Autouse) ---
@pytest.fixture(autouse=True)
def isolate_docbound_env(request, monkeypatch):
    """Ensure a clean DOCBOUND_* environment for each test.

    - Removes all DOCBOUND_* variables and the DEBUG toggle before each test
    - Leaves other variables intact for stability

    Escape hatch: @pytest.mark.allow_env_pollution keeps the env unchanged.
    """
    if request.node.get_closest_marker("allow_env_pollution"):
        return

    for key in list(os.environ.keys()):
        if key.startswith("DOCBOUND_"):
            monkeypatch.delenv(key, raising=False)
    # Avoid DEBUG toggles enabling telemetry
    monkeypatch.delenv("DEBUG", raising=False)


# --- Logging Fixtures ---
@pytest.fixture(scope="session", autouse=True)
def quiet_noisy_libraries():
    """Sets the log level for noisy external libraries to WARNING."""
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


# --- Test Environment Markers ---
def pytest_configure(config):
    """Configure custom markers for test organization."""
    markers = [
        "unit: Fast, isolated unit tests",
        "integration: Component integration tests with mocked HTTP",
        "allow_env_pollution: Keep DOCBOUND_* variables for this test",
    ]
    for marker in markers:
        config.addinivalue_line("markers", marker)


# --- Core Fixtures ---


@pytest.fixture
def cache_dir(tmp_path) -> Path:
    return tmp_path / "cache"


@pytest.fixture
def config(cache_dir) -> FrozenConfig:
    """Default configuration rooted in a per-test cache directory."""
    return FrozenConfig(cache_dir=cache_dir)


@pytest.fixture
def make_pdf() -> Callable[[Path, Iterable[str]], Path]:
    """Write a PDF whose pages carry the given texts, one text per page."""

    def _make(path: Path, page_texts: Iterable[str]) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        doc = fitz.open()
        for text in page_texts:
            page = doc.new_page()
            page.insert_text((72, 72), text)
        doc.save(str(path))
        doc.close()
        return path

    return _make


@dataclasses.dataclass
class FakeServer:
    """Routes for `httpx.MockTransport`, with a record of every request."""

    routes: dict[str, httpx.Response | Callable[[httpx.Request], httpx.Response]]
    requests: list[httpx.Request] = dataclasses.field(default_factory=list)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(str(request.url))
        if route is None:
            return httpx.Response(404)
        if callable(route):
            return route(request)
        # Fresh copy so a route can be served more than once
        return httpx.Response(
            route.status_code, headers=route.headers, content=route.content
        )

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def count(self, url: str) -> int:
        return sum(1 for r in self.requests if str(r.url) == url)


@pytest.fixture
def fake_server() -> Callable[..., FakeServer]:
    """Build a fake HTTP server from a mapping of URL to response."""

    def _create(routes=None) -> FakeServer:
        return FakeServer(routes=dict(routes or {}))

    return _create
