from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from typing import Sequence

from ..config import MAX_SUGGESTIONS


@dataclass(frozen=True)
class Suggestion:
    """A known command and where the current query matches inside it.

    `match_start` is -1 when there is nothing to highlight.
    """
    text: str
    match_start: int
    match_length: int


# Root collation order of ASCII punctuation and symbols
PUNCTUATION_ORDER = "_-,;:!?.'\"()[]{}@*/\\&#%`^+<=>|~$"

_SPACE, _PUNCTUATION, _DIGIT, _LETTER = range(4)


def _primary_weight(ch: str) -> tuple[int, int]:
    if ch.isspace():
        return _SPACE, ord(ch)
    position = PUNCTUATION_ORDER.find(ch)
    if position != -1:
        return _PUNCTUATION, position
    category = unicodedata.category(ch)
    if category[0] in "PS":
        return _PUNCTUATION, len(PUNCTUATION_ORDER) + ord(ch)
    if category == "Nd":
        return _DIGIT, unicodedata.digit(ch)
    return _LETTER, ord(ch)


def collation_key(text: str) -> tuple[tuple, str, str]:
    """Sort key approximating a locale-aware string comparison.

    Characters compare by class first: whitespace, then punctuation and
    symbols, then digits, then letters ("a_b" < "a:b" < "a1b" < "aab").
    Accents and case only break ties: "a" < "á" < "b", and lower case sorts
    before upper case ("a" < "A").
    """
    decomposed = unicodedata.normalize("NFKD", text)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    primary = tuple(_primary_weight(ch) for ch in base.casefold())
    return primary, decomposed.casefold(), text.swapcase()


def _rank(command: str, normalized_query: str) -> tuple:
    lowered = command.lower()
    return (
        lowered != normalized_query,               # exact match first
        not lowered.startswith(normalized_query),  # then prefix matches
        len(command),                              # then shorter
        collation_key(command),                    # then alphabetical
    )


def suggest(query: str, commands: Sequence[str], limit: int = MAX_SUGGESTIONS) -> list[Suggestion]:
    """Rank the commands containing query (case-insensitive) and cap the list.

    An empty query or an empty command set yields an empty list, which means
    "hide suggestions".
    """
    if not query or not commands:
        return []

    normalized_query = query.lower()
    matches = [cmd for cmd in commands if normalized_query in cmd.lower()]
    matches.sort(key=lambda cmd: _rank(cmd, normalized_query))

    suggestions = []
    for cmd in matches[:limit]:
        index = cmd.lower().find(normalized_query)
        suggestions.append(Suggestion(
            text=cmd,
            match_start=index,
            match_length=len(normalized_query) if index != -1 else 0,
        ))
    return suggestions
