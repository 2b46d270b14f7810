"""
Text extraction from generated output.

Implements:
- ClarificationExtractor: embedded `questions` / `gaps` JSON arrays
- merge_questions / merge_gaps: combine two candidates' clarification output
- DraftExtractor: the plain document body out of JSON, fenced JSON, or text

Generated text is model-shaped and often only partly valid JSON, so every
extractor has a safe default instead of raising.
"""

from __future__ import annotations

import json
import re
from typing import Any

from stageguard.domain.interfaces import (
    ClarificationExtractorInterface,
    DraftExtractorInterface,
)
from stageguard.domain.models import ClarificationQuestion
from stageguard.domain.pipeline import DEFAULT_WORKFLOW

# =============================================================================
# EMBEDDED ARRAYS
# =============================================================================


def _array_anchor(field_name: str) -> re.Pattern[str]:
    return re.compile(rf'"{re.escape(field_name)}"\s*:\s*(?=\[)')


def find_json_array(text: str, field_name: str) -> list[Any] | None:
    """Decode the first JSON array named `field_name` anywhere in the text.

    Only the array itself must be valid JSON; the surrounding text may be
    anything. Anchors whose array fails to decode are skipped.

    Returns:
        The decoded list, or None if no decodable array was found.
    """
    decoder = json.JSONDecoder()
    for match in _array_anchor(field_name).finditer(text or ""):
        try:
            value, _end = decoder.raw_decode(text, match.end())
        except json.JSONDecodeError:
            continue
        if isinstance(value, list):
            return value
    return None


def _to_question(item: Any, index: int) -> ClarificationQuestion | None:
    default_id = f"q{index}"
    if isinstance(item, dict):
        question = item.get("question")
        if question is None:
            return None
        context = item.get("context")
        return ClarificationQuestion(
            id=str(item.get("id") or default_id),
            question=str(question),
            context=None if context is None else str(context),
        )
    if isinstance(item, str) and item.strip():
        return ClarificationQuestion(id=default_id, question=item)
    return None


class ClarificationExtractor(ClarificationExtractorInterface):
    """Locates `"questions": [...]` and `"gaps": [...]` by field anchor."""

    def extract_questions(self, text: str) -> list[ClarificationQuestion]:
        items = find_json_array(text, "questions")
        if not items:
            return []
        questions = []
        for index, item in enumerate(items, start=1):
            question = _to_question(item, index)
            if question is not None:
                questions.append(question)
        return questions

    def extract_gaps(self, text: str) -> list[str]:
        items = find_json_array(text, "gaps")
        if not items:
            return []
        return [str(item) for item in items if item is not None]


def merge_questions(
    first: list[ClarificationQuestion], second: list[ClarificationQuestion]
) -> list[ClarificationQuestion]:
    """Keep `first` verbatim, then append unseen questions from `second`.

    Questions are compared by case-folded text.
    """
    merged = list(first)
    seen = {q.question.casefold() for q in first}
    for question in second:
        key = question.question.casefold()
        if key not in seen:
            merged.append(question)
            seen.add(key)
    return merged


def merge_gaps(first: list[str], second: list[str]) -> list[str]:
    """Ordered set union."""
    return list(dict.fromkeys([*first, *second]))


# =============================================================================
# DRAFT EXTRACTION
# =============================================================================

FENCED_JSON_PATTERN = re.compile(r"```json\s*([\s\S]*?)\s*```", re.IGNORECASE)

_UNESCAPES = (("\\n", "\n"), ("\\r", "\r"), ("\\t", "\t"), ('\\"', '"'))


def _lookup(data: Any, fields: tuple[str, ...]) -> str | None:
    if not isinstance(data, dict):
        return None
    for name in fields:
        value = data.get(name)
        if isinstance(value, str):
            return value
    return None


def _unescape(value: str) -> str:
    for escaped, plain in _UNESCAPES:
        value = value.replace(escaped, plain)
    return value


class DraftExtractor(DraftExtractorInterface):
    """
    Recovers the document body, trying in order:

    (a) the whole text as JSON, (b) a fenced ```json block, (c) a quoted
    field value found by regex, (d) the text unchanged.

    Field names are tried stage-specific first, generic ("draft", "result",
    "content") last.
    """

    def __init__(self, fields: tuple[str, ...] | None = None):
        """
        Args:
            fields: Prioritized field names (defaults to the default
                pipeline's content fields)
        """
        self._fields = fields or DEFAULT_WORKFLOW.content_fields()
        alternatives = "|".join(re.escape(name) for name in self._fields)
        self._field_pattern = re.compile(
            rf'"(?:{alternatives})"\s*:\s*"((?:[^"\\]|\\.)*)"'
        )

    @property
    def fields(self) -> tuple[str, ...]:
        return self._fields

    def extract_draft(self, text: str) -> str:
        """Extract to a fixed point, so the result is stable under reapplication."""
        current = text or ""
        # Every successful step returns a strictly shorter string
        while True:
            extracted = self._extract_once(current)
            if extracted == current:
                return current
            current = extracted

    def _extract_once(self, text: str) -> str:
        value = self._from_json(text)
        if value is not None:
            return value

        fenced = FENCED_JSON_PATTERN.search(text)
        if fenced:
            value = self._from_json(fenced.group(1))
            if value is not None:
                return value

        match = self._field_pattern.search(text)
        if match:
            return _unescape(match.group(1))

        return text

    def _from_json(self, text: str) -> str | None:
        try:
            data = json.loads(text)
        except (json.JSONDecodeError, TypeError):
            return None
        return _lookup(data, self._fields)
