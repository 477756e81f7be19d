"""Offline text analysis tools: basic statistics, pattern extraction and
character-class breakdown.

The analysis functions are plain functions so that ``analyze_url`` can run
them over fetched page text as well.
"""
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Mapping

from toolrelay.tools.base import ParameterType, ToolDefinition, ToolParameter

READING_SPEED_CHARS_PER_MINUTE = 400

_LINE_BREAK_RE = re.compile(r"\r\n|\n|\r")
_WHITESPACE_RE = re.compile(r"\s+")
_URL_RE = re.compile(r"https?://[\w/:%#$&?()~.=+\-]+")
_EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
_HASHTAG_RE = re.compile(r"#[\w\u3040-\u309F\u30A0-\u30FF\u4E00-\u9FAF]+")
_NUMBER_RE = re.compile(r"[0-9]+")
_JAPANESE_RE = re.compile(r"[\u3040-\u309F\u30A0-\u30FF\u4E00-\u9FAF]")
_ENGLISH_WORD_RE = re.compile(r"\b[a-zA-Z]+\b", re.ASCII)


@dataclass(frozen=True)
class TextStats:
    char_count: int
    char_count_no_spaces: int
    line_count: int
    word_count: int


@dataclass(frozen=True)
class PatternMatches:
    urls: list[str]
    emails: list[str]
    hashtags: list[str]
    numbers: list[str]

    @property
    def is_empty(self) -> bool:
        return not (self.urls or self.emails or self.hashtags or self.numbers)


@dataclass(frozen=True)
class CharacterBreakdown:
    total: int
    hiragana: int
    katakana: int
    kanji: int
    alphabet: int
    digit: int
    space: int
    has_japanese: bool
    english_words: int

    @property
    def other(self) -> int:
        return (
            self.total - self.hiragana - self.katakana - self.kanji
            - self.alphabet - self.digit - self.space
        )

    @property
    def reading_minutes(self) -> float:
        return self.total / READING_SPEED_CHARS_PER_MINUTE


def percentage(count: int, total: int) -> float:
    """Share of ``count`` in ``total`` as a percentage; 0.0 for empty text."""
    if total == 0:
        return 0.0
    return count * 100.0 / total


def text_stats(text: str) -> TextStats:
    words = [w for w in _WHITESPACE_RE.split(text) if w.strip()]
    return TextStats(
        char_count=len(text),
        char_count_no_spaces=len(_WHITESPACE_RE.sub("", text)),
        line_count=len(_LINE_BREAK_RE.split(text)),
        word_count=len(words),
    )


def extract_patterns(text: str) -> PatternMatches:
    return PatternMatches(
        urls=_URL_RE.findall(text),
        emails=_EMAIL_RE.findall(text),
        hashtags=_HASHTAG_RE.findall(text),
        numbers=_NUMBER_RE.findall(text),
    )


def character_types(text: str) -> CharacterBreakdown:
    return CharacterBreakdown(
        total=len(text),
        hiragana=sum(1 for c in text if "\u3040" <= c <= "\u309F"),
        katakana=sum(1 for c in text if "\u30A0" <= c <= "\u30FF"),
        kanji=sum(1 for c in text if "\u4E00" <= c <= "\u9FAF"),
        alphabet=sum(1 for c in text if "a" <= c <= "z" or "A" <= c <= "Z"),
        digit=sum(1 for c in text if c.isdecimal()),
        space=sum(1 for c in text if c.isspace()),
        has_japanese=_JAPANESE_RE.search(text) is not None,
        english_words=len(_ENGLISH_WORD_RE.findall(text)),
    )


def format_text_stats(stats: TextStats) -> str:
    return "\n".join([
        "[Text analysis]",
        "Basic statistics:",
        f"- Characters: {stats.char_count} (excluding whitespace: {stats.char_count_no_spaces})",
        f"- Lines: {stats.line_count}",
        f"- Words: {stats.word_count}",
    ])


def format_patterns(matches: PatternMatches) -> str:
    lines = ["[Pattern extraction]"]
    if matches.urls:
        lines.append(f"\nURLs ({len(matches.urls)}):")
        lines.extend(f"- {url}" for url in matches.urls)
    if matches.emails:
        lines.append(f"\nE-mail addresses ({len(matches.emails)}):")
        lines.extend(f"- {email}" for email in matches.emails)
    if matches.hashtags:
        lines.append(f"\nHashtags ({len(matches.hashtags)}):")
        lines.extend(f"- {tag}" for tag in matches.hashtags)
    if matches.numbers:
        lines.append(f"\nNumbers ({len(matches.numbers)}):")
        lines.append(f"- {', '.join(matches.numbers)}")
    if matches.is_empty:
        lines.append("No recognizable patterns found.")
    return "\n".join(lines)


def format_character_types(breakdown: CharacterBreakdown) -> str:
    def row(label: str, count: int) -> str:
        return f"- {label}: {count} ({percentage(count, breakdown.total):.1f}%)"

    lines = [
        "[Character type analysis]",
        "",
        "Breakdown:",
        row("Hiragana", breakdown.hiragana),
        row("Katakana", breakdown.katakana),
        row("Kanji", breakdown.kanji),
        row("Alphabet", breakdown.alphabet),
        row("Digits", breakdown.digit),
        row("Whitespace", breakdown.space),
    ]
    if breakdown.other > 0:
        lines.append(row("Other", breakdown.other))

    minutes = breakdown.reading_minutes
    reading_time = "less than 1 minute" if minutes < 1 else f"{int(minutes)} min"
    lines += [
        "",
        "Language:",
        f"- Contains Japanese: {'yes' if breakdown.has_japanese else 'no'}",
        f"- English words: {breakdown.english_words}",
        "",
        f"Estimated reading time: {reading_time} "
        f"(at {READING_SPEED_CHARS_PER_MINUTE} characters per minute)",
    ]
    return "\n".join(lines)


class _TextTool:
    """A tool that takes a single ``text`` argument and analyzes it offline."""

    name: str
    description: str
    text_description: str
    analyze: Callable[[str], Any]
    render: Callable[[Any], str]

    @property
    def definition(self) -> ToolDefinition:
        return ToolDefinition(
            name=self.name,
            description=self.description,
            parameters=[
                ToolParameter(
                    name="text",
                    type=ParameterType.STRING,
                    description=self.text_description,
                ),
            ],
        )

    def decode(self, values: Mapping[str, Any]) -> str:
        return values["text"]

    async def execute(self, args: str) -> Any:
        return self.analyze(args)

    def format(self, result: Any) -> str:
        return self.render(result)


class AnalyzeTextTool(_TextTool):
    name = "analyze_text"
    description = "Compute basic statistics of a text: characters, lines and words."
    text_description = "Text to analyze"
    analyze = staticmethod(text_stats)
    render = staticmethod(format_text_stats)


class ExtractPatternsTool(_TextTool):
    name = "extract_patterns"
    description = "Extract URLs, e-mail addresses, hashtags and numbers from a text."
    text_description = "Text to extract patterns from"
    analyze = staticmethod(extract_patterns)
    render = staticmethod(format_patterns)


class AnalyzeCharacterTypesTool(_TextTool):
    name = "analyze_character_types"
    description = (
        "Break a text down by character type (hiragana, katakana, kanji, alphabet, "
        "digits, whitespace) and estimate its reading time."
    )
    text_description = "Text whose character types should be analyzed"
    analyze = staticmethod(character_types)
    render = staticmethod(format_character_types)
