"""
Quality scoring for generated documents.

Implements:
- ScoreExtractor: self-reported score lookup with a section-completeness
  fallback that can never reach the advancement gate on its own
- GapAnalyzer: itemized improvement guidance for drafts that were already
  clarified but still score below the gate
"""

import re
from dataclasses import dataclass

from stageguard.domain.interfaces import GapAnalyzerInterface, ScoreExtractorInterface

PASS_THRESHOLD = 90

# =============================================================================
# SCORE EXTRACTION
# =============================================================================

STRUCTURED_SCORE_PATTERN = re.compile(r'"quality_score"\s*:\s*(\d+)')
LABELED_SCORE_PATTERN = re.compile(r"Quality Score:\s*(\d+)/100", re.IGNORECASE)
QUANTITATIVE_PATTERN = re.compile(r"\d+%|<\s*\d+ms|>\s*\d+")

REQUIRED_SECTIONS: tuple[str, ...] = (
    "Executive Summary",
    "Business Goals",
    "User Stories",
    "Functional Requirements",
    "Technical Requirements",
    "Success Metrics",
)
ACCEPTANCE_MARKERS: tuple[str, ...] = ("Acceptance Criteria", "验收标准")

FALLBACK_BASE = 60
FALLBACK_STEP = 5
FALLBACK_CAP = 85


def _in_range(value: int) -> bool:
    return 0 <= value <= 100


class ScoreExtractor(ScoreExtractorInterface):
    """
    Derives a score with strict precedence, stopping at the first match:

    1. last `"quality_score": <n>` field (earlier ones are usually examples)
    2. `Quality Score: <n>/100` label
    3. section-completeness heuristic, capped at 85
    """

    def extract_score(self, text: str) -> int:
        text = text or ""

        matches = STRUCTURED_SCORE_PATTERN.findall(text)
        if matches:
            score = int(matches[-1])
            if _in_range(score):
                return score

        labeled = LABELED_SCORE_PATTERN.search(text)
        if labeled:
            score = int(labeled.group(1))
            if _in_range(score):
                return score

        return self.estimate_by_content(text)

    def estimate_by_content(self, text: str) -> int:
        """Fallback heuristic; always below the advancement gate."""
        score = FALLBACK_BASE
        for section in REQUIRED_SECTIONS:
            if section in text:
                score += FALLBACK_STEP
        if QUANTITATIVE_PATTERN.search(text):
            score += FALLBACK_STEP
        if any(marker in text for marker in ACCEPTANCE_MARKERS):
            score += FALLBACK_STEP
        return min(score, FALLBACK_CAP)


# =============================================================================
# GAP ANALYSIS
# =============================================================================


@dataclass(frozen=True)
class GapCheck:
    """One checklist item: present if any marker occurs in the text."""

    markers: tuple[str, ...]
    points: int
    message: str
    pattern: re.Pattern[str] | None = None

    def is_present(self, lowered: str) -> bool:
        if self.pattern is not None:
            return self.pattern.search(lowered) is not None
        return any(marker in lowered for marker in self.markers)


SECTION_POINTS: tuple[tuple[str, int], ...] = (
    ("Executive Summary", 5),
    ("Business Goals", 5),
    ("User Stories", 10),
    ("Functional Requirements", 10),
    ("Technical Requirements", 8),
    ("Success Metrics", 7),
    ("Scope & Priorities", 5),
)

SIGNAL_CHECKS: tuple[GapCheck, ...] = (
    GapCheck(
        markers=(),
        points=10,
        message=(
            "Missing quantified success metrics (concrete numbers such as "
            "latency <100ms, success rate >95%, coverage ≥80%)"
        ),
        pattern=re.compile(r"\d+%|<\s*\d+ms|>\s*\d+|≥\s*\d+"),
    ),
    GapCheck(
        markers=("acceptance criteria", "验收标准", "ac"),
        points=10,
        message=(
            "User stories lack acceptance criteria (each story needs 3-5 "
            "testable criteria)"
        ),
    ),
    GapCheck(
        markers=("dependencies", "dependency", "依赖"),
        points=5,
        message=(
            "Technical requirements do not list dependencies and version "
            "constraints"
        ),
    ),
    GapCheck(
        markers=("error", "edge case", "错误"),
        points=8,
        message=(
            "Missing error handling and edge cases (at least 3-5 failure "
            "scenarios per feature)"
        ),
    ),
    GapCheck(
        markers=("timeline", "milestone", "时间线", "里程碑"),
        points=5,
        message="Missing timeline and milestone planning",
    ),
)


class GapAnalyzer(GapAnalyzerInterface):
    """Purely diagnostic: explains a low score, never changes it."""

    def __init__(self, threshold: int = PASS_THRESHOLD):
        self._threshold = threshold

    def analyze(self, text: str, score: int) -> list[str]:
        lowered = (text or "").lower()
        gaps: list[str] = []

        for section, points in SECTION_POINTS:
            if section.lower() not in lowered:
                gaps.append(f'Missing "{section}" section (-{points} points)')

        for check in SIGNAL_CHECKS:
            if not check.is_present(lowered):
                gaps.append(f"{check.message} (-{check.points} points)")

        if not gaps:
            deficit = self._threshold - score
            gaps.append(
                f"Current score {score}/100 is {deficit} points short of "
                f"{self._threshold}"
            )
            gaps.append(
                "Suggestion: add technical detail, quantified metrics, "
                "acceptance criteria for user stories, and error scenarios"
            )

        return gaps
