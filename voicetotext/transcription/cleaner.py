"""Post-processing of recognized text."""

import re
import logging
from typing import Iterable, List

from ..models.history import ReplacementRule

logger = logging.getLogger(__name__)

_BRACKETED_TAG = re.compile(r"\[.*?\]")
_PARENTHESIZED_TAG = re.compile(r"\(.*?\)")
_REPEATED_WHITESPACE = re.compile(r"\s{2,}")


def clean_transcription(raw: str) -> str:
    """Remove non-speech hallucination tags like [BLANK_AUDIO] or (music).

    Also collapses repeated whitespace and trims the result.
    """
    text = _BRACKETED_TAG.sub("", raw)
    text = _PARENTHESIZED_TAG.sub("", text)
    text = _REPEATED_WHITESPACE.sub(" ", text)
    return text.strip()


class TextReplacer:
    """Applies enabled replacement rules, case-insensitively, in order."""

    def __init__(self, rules: Iterable[ReplacementRule]):
        self.rules: List[ReplacementRule] = [
            rule for rule in rules if rule.enabled and rule.find
        ]
        self._patterns = [
            (re.compile(re.escape(rule.find), re.IGNORECASE), rule.replace)
            for rule in self.rules
        ]

    def apply(self, text: str) -> str:
        for pattern, replacement in self._patterns:
            # Callable replacement keeps backslashes in `replace` literal
            text = pattern.sub(lambda _match, value=replacement: value, text)
        return text
