"""Response governor: keeps every outgoing payload under the word ceiling.

When a value is too large and the caller gave no filters, the governor does
not guess a cut point. It returns a structural description (schema, sample,
recommended filters) so the caller can retry with better parameters. When
filters are given it applies them, and a final hard truncation bounds the
payload under every combination of options.
"""

import json
import logging
from typing import Any

from docbound.config import FrozenConfig
from docbound.telemetry import TelemetryContext, TelemetryContextProtocol

from . import formatting
from .schema import build_metadata, recommend_max_items
from .sizing import SizeAccountant, count_words, serialize
from .types import GovernedResponse, LimitOptions, ValueKind, classify_value

log = logging.getLogger(__name__)


def limit_items(
    items: list[Any],
    max_items: int | None = None,
    fields: tuple[str, ...] | None = None,
) -> list[Any]:
    """Apply an item cap, then keep only `fields` on each record element."""
    result = list(items)
    if max_items and max_items > 0:
        result = result[:max_items]
    if fields:
        result = [
            {f: item[f] for f in fields if f in item}
            if isinstance(item, dict)
            else item
            for item in result
        ]
    return result


def summarize_items(items: list[Any], sample_size: int = 3) -> str:
    """Fixed textual summary: item count, field names, first few items."""
    if not items:
        return "No data available"
    first = items[0]
    fields = ", ".join(first) if isinstance(first, dict) else "N/A"
    return (
        f"Total items: {len(items)}\n"
        f"Available fields: {fields}\n\n"
        f"First {sample_size} items:\n{serialize(items[:sample_size])}"
    )


def cap_nested_lists(
    record: dict[str, Any], limit: int
) -> tuple[dict[str, Any], list[str]]:
    """Cut every top-level list longer than `limit`, recording its length.

    Returns the capped copy and the names of the keys that were cut.
    """
    capped = dict(record)
    truncated_keys = []
    for key, value in record.items():
        if isinstance(value, list | tuple) and len(value) > limit:
            capped[key] = list(value[:limit])
            capped[f"{key}_truncated"] = f"Showing {limit} of {len(value)} items"
            truncated_keys.append(key)
    return capped, truncated_keys


class ResponseGovernor:
    """Decides whether and how to shrink a value before it leaves the system."""

    def __init__(
        self,
        config: FrozenConfig | None = None,
        *,
        telemetry: TelemetryContextProtocol | None = None,
    ) -> None:
        self.config = config or FrozenConfig()
        self.accountant = SizeAccountant(
            max_words=self.config.max_words,
            tokens_per_word=self.config.tokens_per_word,
            chars_per_word=self.config.chars_per_word,
        )
        self.tele = telemetry or TelemetryContext()

    def govern(
        self, value: Any, options: LimitOptions | None = None
    ) -> GovernedResponse:
        """Return `value` as is when it fits, otherwise a bounded rendition."""
        options = options or LimitOptions()

        if value is None:
            return GovernedResponse(payload=formatting.render_body(None), data=None)

        with self.tele("govern"):
            words = self.accountant.estimate(value).words
            self.tele.metric("words", words)

            if not self.accountant.exceeds_limit(words):
                return GovernedResponse(
                    payload=formatting.render_body(value), data=value
                )

            log.debug(
                "Response of %d words exceeds the %d-word ceiling",
                words,
                self.accountant.max_words,
            )
            kind = classify_value(value)

            capped: dict[str, Any] | None = None
            capped_message = None
            if kind is ValueKind.RECORD:
                capped, keys = cap_nested_lists(value, self.config.nested_list_limit)
                if keys:
                    capped_message = (
                        f"Large arrays truncated: {', '.join(keys)}. "
                        "Use specific queries to get complete data."
                    )
                    if not self.accountant.exceeds_limit(
                        self.accountant.estimate(capped).words
                    ):
                        return self._truncated(capped, capped_message)

            if not options.has_filters:
                return self._metadata_response(value, words)

            if kind is ValueKind.LIST:
                if options.summary:
                    message = (
                        f"Response too large ({words} words). Showing summary. "
                        "Use max_items and fields filters to get specific data."
                    )
                    return self._truncated(summarize_items(list(value)), message)
                filtered, message = self._filter_list(list(value), options)
            elif kind is ValueKind.RECORD:
                filtered, message = capped, capped_message
            else:
                filtered, message = value, None

            return self._enforce_ceiling(filtered, message)

    # ------------------------------
    # Internal helpers
    # ------------------------------
    def _filter_list(
        self, items: list[Any], options: LimitOptions
    ) -> tuple[list[Any], str]:
        max_items = options.max_items or recommend_max_items(items, self.accountant)
        limited = limit_items(items, max_items, options.fields)

        message = f"Response limited: Showing {len(limited)} of {len(items)} items. "
        if options.fields:
            message += f"Fields: {', '.join(options.fields)}. "
        message += "Use max_items and fields parameters to customize."
        return limited, message

    def _enforce_ceiling(self, data: Any, message: str | None) -> GovernedResponse:
        text = data if isinstance(data, str) else serialize(data)
        if self.accountant.exceeds_limit(count_words(text)):
            return self._truncated(
                self.accountant.truncate_words(text),
                message
                or (
                    f"Response truncated to {self.accountant.max_words} words. "
                    "Use filters to get specific data."
                ),
            )
        return self._truncated(
            data, message or "Response limited to prevent data overflow"
        )

    def _truncated(self, data: Any, message: str) -> GovernedResponse:
        return GovernedResponse(
            payload=formatting.render(data, message=message, truncated=True),
            data=data,
            was_truncated=True,
            advisory_message=message,
        )

    def _metadata_response(self, value: Any, words: int) -> GovernedResponse:
        meta = build_metadata(
            value,
            words,
            self.accountant,
            text_limit=self.config.sample_text_chars,
        )
        overage = words - self.accountant.max_words
        if meta.recommended_max_items:
            instructions = (
                f"Recommended: Use max_items={meta.recommended_max_items} "
                f"or fields={json.dumps(list(meta.recommended_fields or ()))}"
            )
        else:
            instructions = (
                "Use max_items, fields, or summary parameters to filter the response."
            )
        data = {
            "_metadata": meta.to_dict(),
            "_message": (
                f"Response is too large ({words} words, "
                f"~{meta.estimated_tokens} tokens). "
                "Please apply filters to get specific data."
            ),
            "_instructions": instructions,
        }
        message = (
            f"Response too large. Returning metadata. "
            f"Total: {meta.total_items or 'N/A'} items, {words} words "
            f"({overage} over the {self.accountant.max_words}-word limit). "
            f"{instructions}"
        )
        return GovernedResponse(
            payload=formatting.render(data, metadata=meta),
            data=data,
            was_truncated=True,
            advisory_message=message,
            metadata=meta,
        )
