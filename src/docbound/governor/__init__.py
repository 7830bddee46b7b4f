"""
Response governing: size accounting, metadata substitution and filtering
"""

from .formatting import metadata_banner, render
from .governor import (
    ResponseGovernor,
    cap_nested_lists,
    limit_items,
    summarize_items,
)
from .schema import build_metadata, extract_schema, recommend_max_items
from .sizing import SizeAccountant, SizeEstimate, count_words, serialize
from .types import (
    GovernedResponse,
    LimitOptions,
    ResponseMetadata,
    ValueKind,
    classify_value,
)

__all__ = [
    "GovernedResponse",
    "LimitOptions",
    "ResponseGovernor",
    "ResponseMetadata",
    "SizeAccountant",
    "SizeEstimate",
    "ValueKind",
    "build_metadata",
    "cap_nested_lists",
    "classify_value",
    "count_words",
    "extract_schema",
    "limit_items",
    "metadata_banner",
    "recommend_max_items",
    "render",
    "serialize",
    "summarize_items",
]
