"""Text rendering of governed responses."""

import json
from typing import Any

from .sizing import serialize
from .types import ResponseMetadata

_RULE = "-" * 40


def render_body(data: Any) -> str:
    """Strings are emitted verbatim, everything else as indented JSON."""
    if isinstance(data, str):
        return data
    return serialize(data)


def metadata_banner(meta: ResponseMetadata) -> str:
    lines = ["RESPONSE METADATA:", _RULE]
    if meta.total_items:
        lines.append(f"Total Items: {meta.total_items}")
    lines.append(f"Total Words: {meta.total_words}")
    lines.append(f"Estimated Tokens: {meta.estimated_tokens}")
    if meta.available_fields:
        lines.append(f"Available Fields: {', '.join(meta.available_fields)}")
    if meta.recommended_max_items or meta.recommended_fields:
        lines.append("")
        lines.append("RECOMMENDED FILTERS:")
        if meta.recommended_max_items:
            lines.append(f"  max_items: {meta.recommended_max_items}")
        if meta.recommended_fields:
            lines.append(f"  fields: {json.dumps(list(meta.recommended_fields))}")
    lines.append(_RULE)
    return "\n".join(lines)


def render(
    data: Any,
    *,
    metadata: ResponseMetadata | None = None,
    message: str | None = None,
    truncated: bool = False,
) -> str:
    """Build the payload text, prefixing a banner whenever data was cut."""
    body = render_body(data)
    if metadata is not None:
        return f"{metadata_banner(metadata)}\n\n{body}"
    if truncated and message:
        return f"WARNING: {message}\n\n{body}"
    return body
