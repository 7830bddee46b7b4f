"""Schema inference, sampling and filter recommendations."""

import math
from typing import Any

from docbound import constants

from .sizing import SizeAccountant
from .types import ResponseMetadata, ValueKind, classify_value


def type_name(value: Any) -> str:
    """JSON type name of a value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int | float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list | tuple):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def extract_schema(value: Any) -> dict[str, Any] | None:
    """Per-field types of the first list element, or per-key types of a record."""
    kind = classify_value(value)
    if kind is ValueKind.LIST:
        if value and isinstance(value[0], dict):
            return {key: type_name(v) for key, v in value[0].items()}
        return None
    if kind is ValueKind.RECORD:
        schema: dict[str, Any] = {}
        for key, v in value.items():
            if isinstance(v, list | tuple):
                schema[key] = {"type": "array", "length": len(v)}
            else:
                schema[key] = type_name(v)
        return schema
    return None


def available_fields(value: Any) -> tuple[str, ...] | None:
    kind = classify_value(value)
    if kind is ValueKind.LIST:
        if value and isinstance(value[0], dict):
            return tuple(value[0])
        return None
    if kind is ValueKind.RECORD:
        return tuple(value)
    return None


def clip_strings(value: Any, limit: int) -> Any:
    """Copy of `value` with every string longer than `limit` shortened."""
    if isinstance(value, str) and len(value) > limit:
        return value[:limit] + f"... [{len(value) - limit} more characters]"
    if isinstance(value, list | tuple):
        return [clip_strings(v, limit) for v in value]
    if isinstance(value, dict):
        return {k: clip_strings(v, limit) for k, v in value.items()}
    return value


def sample_data(value: Any, text_limit: int = constants.SAMPLE_TEXT_CHARS) -> Any:
    """First few list items, or the first few record fields."""
    kind = classify_value(value)
    if kind is ValueKind.LIST:
        return clip_strings(list(value[: constants.ITEM_SAMPLE_SIZE]), text_limit)
    if kind is ValueKind.RECORD:
        keys = list(value)[: constants.RECORD_SAMPLE_FIELDS]
        return clip_strings({k: value[k] for k in keys}, text_limit)
    return None


def recommend_max_items(items: list[Any], accountant: SizeAccountant) -> int:
    """How many items would fit under the ceiling, never fewer than 10."""
    per_item = accountant.words_per_item(items, constants.ITEM_SAMPLE_SIZE)
    if per_item <= 0:
        return max(constants.MIN_RECOMMENDED_ITEMS, len(items))
    return max(
        constants.MIN_RECOMMENDED_ITEMS,
        math.floor(accountant.max_words / per_item),
    )


def build_metadata(
    value: Any,
    words: int,
    accountant: SizeAccountant,
    *,
    text_limit: int = constants.SAMPLE_TEXT_CHARS,
) -> ResponseMetadata:
    """Describe `value` well enough for the caller to pick filters."""
    exceeds = accountant.exceeds_limit(words)
    fields = available_fields(value)
    is_list = classify_value(value) is ValueKind.LIST

    recommended_items = None
    recommended_fields = None
    if exceeds and is_list and len(value) > 0:
        recommended_items = recommend_max_items(list(value), accountant)
        if fields:
            recommended_fields = fields[: constants.RECOMMENDED_FIELD_COUNT]

    return ResponseMetadata(
        total_words=words,
        estimated_tokens=accountant.estimated_tokens(words),
        exceeds_limit=exceeds,
        total_items=len(value) if is_list else None,
        available_fields=fields,
        schema=extract_schema(value),
        sample_data=sample_data(value, text_limit),
        recommended_max_items=recommended_items,
        recommended_fields=recommended_fields,
    )
