"""Word and character accounting for governed responses."""

from dataclasses import dataclass
import json
import math
from typing import Any

from docbound import constants


def serialize(value: Any) -> str:
    """Canonical text form used for every size estimate."""
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)


def count_words(text: str) -> int:
    """Count whitespace-delimited tokens."""
    return len(text.split())


@dataclass(frozen=True, slots=True)
class SizeEstimate:
    words: int
    chars: int


class SizeAccountant:
    """Estimates serialized size and classifies it against the word ceiling."""

    def __init__(
        self,
        max_words: int = constants.MAX_WORDS,
        tokens_per_word: float = constants.TOKENS_PER_WORD,
        chars_per_word: int = constants.CHARS_PER_WORD,
    ) -> None:
        self.max_words = max_words
        self.tokens_per_word = tokens_per_word
        self.chars_per_word = chars_per_word

    @property
    def max_chars(self) -> int:
        """Approximate character budget implied by the word ceiling."""
        return self.max_words * self.chars_per_word

    def estimate(self, value: Any) -> SizeEstimate:
        text = serialize(value)
        return SizeEstimate(words=count_words(text), chars=len(text))

    def exceeds_limit(self, words: int) -> bool:
        return words > self.max_words

    def estimated_tokens(self, words: int) -> int:
        return math.ceil(words * self.tokens_per_word)

    def words_per_item(self, items: list[Any], sample_size: int) -> float:
        """Average serialized words per element, from the first `sample_size`."""
        sample = items[:sample_size]
        if not sample:
            return 0.0
        return count_words(serialize(sample)) / len(sample)

    def truncate_words(self, text: str, limit: int | None = None) -> str:
        """Cut `text` to `limit` words and name how many were dropped."""
        limit = self.max_words if limit is None else limit
        words = text.split()
        if len(words) <= limit:
            return text
        remaining = len(words) - limit
        return (
            " ".join(words[:limit])
            + f"\n\n[... {remaining} more words truncated. "
            "Use filters to get specific data.]"
        )
