"""
Engine configuration.

The keyword lists below are specific to the university's outline format
(non-teaching week names, calendar column headings, relative-deadline phrases).
They live in one dataclass so a caller can swap them without touching the
parsers. Every parser takes an optional ``config`` argument and falls back to
``DEFAULT_CONFIG``.
"""

import os
import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import List, Optional, Pattern, Tuple


# Program-calendar keyword table, most specific first. The second element is
# the canonical title; None means "use the matched text".
DEFAULT_ASSESSMENT_KEYWORDS: Tuple[Tuple[str, Optional[str]], ...] = (
    (r"Mid[\s-]+Sem(?:ester)?\s*[\s-]*Test", "Mid-Semester Test"),
    (r"Workshop[\s-]*Quiz", "Workshop Quiz"),
    (r"eTest\b", "eTest"),
    (r"Practical\s+Test|Prac\s*Test", "Practical Test"),
    (r"Assignment\b", "Assignment"),
    (r"Lab\s+[A-Z]\s*Report", None),
    (r"Lab\s+Report", "Lab Report"),
    (r"Worksheet\b", "Worksheet"),
    (r"\bQuiz\b", "Quiz"),
    (r"\bExam\b", "Exam"),
)


@dataclass
class EngineConfig:
    """Locale-specific keywords and scan limits used by the parsers."""
    # HTML calendar rows whose date cell names one of these are skipped
    break_week_keywords: List[str] = field(default_factory=lambda: [
        r"tuition\s+free", r"study\s+week", r"examination", r"mid[- ]semester\s+break",
    ])
    # PDF program-calendar rows naming one of these are non-teaching weeks
    calendar_break_keywords: List[str] = field(default_factory=lambda: [
        r"tuition[\s-]*free", r"study\s*week", r"orientation\s*week", r"examinations?\b",
    ])
    # A column holding one of these (without a content keyword) lists assessed work
    session_column_keywords: List[str] = field(default_factory=lambda: ["workshop", "lab", "quiz"])
    content_column_keywords: List[str] = field(default_factory=lambda: ["lecture", "tutorial"])
    # Week/Day values that describe a deadline instead of dating it
    tba_phrases: List[str] = field(default_factory=lambda: [
        r"TBA", r"TBC", r"exam(?:ination)? (?:week|period)", r"teaching week", r"study week",
        r"flexible", r"as per", r"schedule", r"after your", r"hours after", r"centrally",
        r"one week after", r"during", r"fortnightly", r"weekly", r"bi-?weekly",
    ])
    assessment_keywords: Tuple[Tuple[str, Optional[str]], ...] = DEFAULT_ASSESSMENT_KEYWORDS
    # Schedule scan windows (in lines)
    title_lookback: int = 12
    title_fallback_window: int = 5
    title_fallback_lines: int = 3
    forward_window: int = 40
    day_continuation_lines: int = 5
    # Export / cache settings
    timezone: str = "Australia/Perth"
    cache_dir: Optional[Path] = None

    def break_week_pattern(self) -> Pattern:
        return _alternation(self.break_week_keywords)

    def calendar_break_pattern(self) -> Pattern:
        return _alternation(self.calendar_break_keywords)

    def tba_pattern(self) -> Pattern:
        return re.compile(r"\b(?:" + "|".join(self.tba_phrases) + r")\b", re.IGNORECASE)

    def compiled_assessment_keywords(self) -> List[Tuple[Pattern, Optional[str]]]:
        return [(re.compile(regex, re.IGNORECASE), title) for regex, title in self.assessment_keywords]


def _alternation(keywords: List[str]) -> Pattern:
    return re.compile("|".join(keywords), re.IGNORECASE)


DEFAULT_CONFIG = EngineConfig()


def load_config() -> EngineConfig:
    """Build a config from the defaults plus environment overrides.

    Recognised variables:
        OUTLINE_DEADLINES_TIMEZONE: IANA timezone used for calendar export
        OUTLINE_DEADLINES_CACHE_DIR: directory for the extraction cache
        OUTLINE_DEADLINES_BREAK_KEYWORDS: comma-separated extra non-teaching
            week keywords, added to both the HTML and PDF calendar lists

    Returns:
        EngineConfig instance
    """
    config = replace(DEFAULT_CONFIG)

    timezone = os.getenv("OUTLINE_DEADLINES_TIMEZONE")
    if timezone:
        config.timezone = timezone

    cache_dir = os.getenv("OUTLINE_DEADLINES_CACHE_DIR")
    if cache_dir:
        config.cache_dir = Path(cache_dir)

    extra = os.getenv("OUTLINE_DEADLINES_BREAK_KEYWORDS")
    if extra:
        keywords = [re.escape(k.strip()) for k in extra.split(",") if k.strip()]
        config.break_week_keywords = list(config.break_week_keywords) + keywords
        config.calendar_break_keywords = list(config.calendar_break_keywords) + keywords

    return config
