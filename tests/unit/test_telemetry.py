"""Opt-in telemetry scopes and reporters."""

import logging

import httpx
import pytest

from docbound.config import FrozenConfig
from docbound.files.fetcher import Fetcher
from docbound.telemetry import SimpleReporter, TelemetryContext


class _BrokenReporter:
    def record_timing(self, scope, duration, **metadata):
        raise RuntimeError("reporter down")

    def record_metric(self, scope, value, **metadata):
        raise RuntimeError("reporter down")


@pytest.mark.unit
class TestTelemetryContext:
    def test_disabled_without_flag(self):
        tele = TelemetryContext(SimpleReporter())
        assert tele is TelemetryContext()
        with tele("anything") as scope:
            scope.metric("words", 10)

    def test_nested_scopes_are_recorded(self, monkeypatch):
        monkeypatch.setenv("DOCBOUND_TELEMETRY", "1")
        reporter = SimpleReporter()
        tele = TelemetryContext(reporter)

        with tele("govern"):
            tele.metric("words", 42)
            with tele("inner"):
                pass

        assert set(reporter.timings) == {"govern", "govern.inner"}
        assert reporter.metrics["govern.words"][0][0] == 42
        assert "govern.inner" in reporter.get_report()

    def test_debug_flag_enables_telemetry(self, monkeypatch):
        monkeypatch.setenv("DEBUG", "1")
        reporter = SimpleReporter()
        with TelemetryContext(reporter)("scope"):
            pass
        assert "scope" in reporter.timings

    def test_reporter_failures_are_logged_not_raised(self, monkeypatch, caplog):
        monkeypatch.setenv("DOCBOUND_TELEMETRY", "1")
        tele = TelemetryContext(_BrokenReporter())

        with caplog.at_level(logging.ERROR), tele("fetch"):
            tele.count("retries")

        assert "Telemetry reporter '_BrokenReporter' failed" in caplog.text

    def test_fetch_reports_bytes(self, monkeypatch, tmp_path):
        monkeypatch.setenv("DOCBOUND_TELEMETRY", "1")
        reporter = SimpleReporter()
        url = "https://x.example/a.txt"
        transport = httpx.MockTransport(lambda request: httpx.Response(200, content=b"abc"))
        fetcher = Fetcher(
            FrozenConfig(), transport=transport, telemetry=TelemetryContext(reporter)
        )

        fetcher.fetch(url, tmp_path / "a.txt")

        assert "fetch" in reporter.timings
        assert reporter.metrics["fetch.bytes_downloaded"][0][0] == 3
