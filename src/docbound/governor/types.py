"""Value types produced and consumed by the response governor."""

from __future__ import annotations

import dataclasses
from enum import Enum
from typing import Any


class ValueKind(Enum):
    """Shape of a JSON-like value, as far as the governor cares."""

    LIST = "list"
    RECORD = "record"
    SCALAR = "scalar"


def classify_value(value: Any) -> ValueKind:
    if isinstance(value, list | tuple):
        return ValueKind.LIST
    if isinstance(value, dict):
        return ValueKind.RECORD
    return ValueKind.SCALAR


@dataclasses.dataclass(frozen=True, slots=True)
class LimitOptions:
    """Caller-supplied filters for oversized responses."""

    max_items: int | None = None
    fields: tuple[str, ...] | None = None
    summary: bool = False

    def __post_init__(self) -> None:
        if self.fields is not None:
            object.__setattr__(self, "fields", tuple(self.fields))

    @property
    def has_filters(self) -> bool:
        return bool(self.max_items) or self.fields is not None or self.summary

    @classmethod
    def from_args(cls, args: dict[str, Any]) -> LimitOptions:
        """Read `max_items`, `fields` and `summary` from tool arguments."""
        fields = args.get("fields")
        return cls(
            max_items=args.get("max_items"),
            fields=tuple(fields) if fields is not None else None,
            summary=bool(args.get("summary", False)),
        )


@dataclasses.dataclass(frozen=True, slots=True)
class ResponseMetadata:
    """Structural description of a response too large to return as is."""

    total_words: int
    estimated_tokens: int
    exceeds_limit: bool
    total_items: int | None = None
    available_fields: tuple[str, ...] | None = None
    schema: dict[str, Any] | None = None
    sample_data: Any = None
    recommended_max_items: int | None = None
    recommended_fields: tuple[str, ...] | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            data[f.name] = list(value) if isinstance(value, tuple) else value
        return data


@dataclasses.dataclass(frozen=True, slots=True)
class GovernedResponse:
    """What the caller receives.

    `payload` is the rendered text; `data` is the governed value before
    rendering, which is the caller's original object when it fit.
    """

    payload: str
    data: Any = None
    was_truncated: bool = False
    advisory_message: str | None = None
    metadata: ResponseMetadata | None = None
    is_error: bool = False

    def to_tool_result(self) -> dict[str, Any]:
        """Tool-call envelope: a single text content block."""
        result: dict[str, Any] = {"content": [{"type": "text", "text": self.payload}]}
        if self.is_error:
            result["isError"] = True
        return result
