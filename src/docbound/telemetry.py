"""Opt-in timing and metrics for retrieval and governing.

Telemetry is off unless DOCBOUND_TELEMETRY=1 (or DEBUG=1) is set and at least
one reporter is supplied; otherwise every component shares a stateless no-op
context. Scopes nest through a context variable, so `extract.pdf` opened
inside an archive scope is reported as `extract.zip.extract.pdf`.
"""

from collections import defaultdict
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
import logging
import os
import time
from types import TracebackType
from typing import Any, Protocol, Self, runtime_checkable

log = logging.getLogger(__name__)

_active_scopes: ContextVar[tuple[str, ...]] = ContextVar(
    "docbound_active_scopes", default=()
)


def telemetry_enabled() -> bool:
    return os.getenv("DOCBOUND_TELEMETRY") == "1" or os.getenv("DEBUG") == "1"


@runtime_checkable
class TelemetryReporter(Protocol):
    """Receives finished scopes and recorded metrics."""

    def record_timing(self, scope: str, duration: float, **metadata: Any) -> None: ...
    def record_metric(self, scope: str, value: Any, **metadata: Any) -> None: ...


@dataclass(frozen=True, slots=True)
class _NoOpTelemetryContext:
    def __call__(self, name: str, **metadata: Any) -> Self:
        return self

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        return None

    def metric(self, name: str, value: Any, **metadata: Any) -> None:
        pass

    def count(self, name: str, increment: int = 1, **metadata: Any) -> None:
        pass


class _EnabledTelemetryContext:
    """Forwards scopes and metrics to every reporter.

    A failing reporter is logged and skipped; it never breaks the operation
    being measured.
    """

    __slots__ = ("reporters",)

    def __init__(self, *reporters: TelemetryReporter):
        self.reporters = reporters

    def __call__(
        self, name: str, **metadata: Any
    ) -> AbstractContextManager["_EnabledTelemetryContext"]:
        if not name:
            raise ValueError("Scope name must be a non-empty string")
        return self._scope(name, metadata)

    @contextmanager
    def _scope(
        self, name: str, metadata: dict[str, Any]
    ) -> Iterator["_EnabledTelemetryContext"]:
        parents = _active_scopes.get()
        token = _active_scopes.set((*parents, name))
        started = time.perf_counter()
        outcome = "ok"
        try:
            yield self
        except BaseException as e:
            outcome = type(e).__name__
            raise
        finally:
            elapsed = time.perf_counter() - started
            _active_scopes.reset(token)
            self._fan_out(
                "record_timing",
                ".".join((*parents, name)),
                elapsed,
                depth=len(parents),
                outcome=outcome,
                **metadata,
            )

    def metric(self, name: str, value: Any, **metadata: Any) -> None:
        scope = ".".join((*_active_scopes.get(), name))
        self._fan_out("record_metric", scope, value, **metadata)

    def count(self, name: str, increment: int = 1, **metadata: Any) -> None:
        self.metric(name, increment, metric_type="counter", **metadata)

    def _fan_out(self, method: str, scope: str, value: Any, **metadata: Any) -> None:
        for reporter in self.reporters:
            try:
                getattr(reporter, method)(scope, value, **metadata)
            except Exception as e:
                log.error(
                    "Telemetry reporter '%s' failed: %s",
                    type(reporter).__name__,
                    e,
                    exc_info=True,
                )


_NO_OP = _NoOpTelemetryContext()

type TelemetryContextProtocol = _EnabledTelemetryContext | _NoOpTelemetryContext


def TelemetryContext(*reporters: TelemetryReporter) -> TelemetryContextProtocol:  # noqa: N802
    """Return an enabled context, or the shared no-op one."""
    if reporters and telemetry_enabled():
        return _EnabledTelemetryContext(*reporters)
    return _NO_OP


@dataclass
class SimpleReporter:
    """Keeps the most recent entries per scope in memory."""

    max_entries_per_scope: int = 1000
    timings: dict[str, list[tuple[float, dict[str, Any]]]] = field(
        default_factory=lambda: defaultdict(list)
    )
    metrics: dict[str, list[tuple[Any, dict[str, Any]]]] = field(
        default_factory=lambda: defaultdict(list)
    )

    def record_timing(self, scope: str, duration: float, **metadata: Any) -> None:
        self._append(self.timings[scope], (duration, metadata))

    def record_metric(self, scope: str, value: Any, **metadata: Any) -> None:
        self._append(self.metrics[scope], (value, metadata))

    def _append(self, entries: list, entry: tuple) -> None:
        entries.append(entry)
        if len(entries) > self.max_entries_per_scope:
            del entries[0]

    def get_report(self) -> str:
        lines = ["docbound telemetry", "", "Timings:"]
        for scope in sorted(self.timings):
            entries = self.timings[scope]
            total = sum(d for d, _ in entries)
            failures = sum(1 for _, meta in entries if meta.get("outcome", "ok") != "ok")
            lines.append(
                f"  {scope}: {len(entries)} call(s), {total:.4f}s total, "
                f"{failures} failed"
            )
        if self.metrics:
            lines.extend(["", "Metrics:"])
            for scope in sorted(self.metrics):
                values = [v for v, _ in self.metrics[scope] if isinstance(v, int | float)]
                lines.append(f"  {scope}: {sum(values):,.0f} over {len(values)} sample(s)")
        return "\n".join(lines)
