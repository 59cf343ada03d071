"""
Presenters for cheatsh
Convert relay responses and lookup results to Markdown for HTML display
"""

from __future__ import annotations

import re
from typing import List, Sequence


# Regex from: https://stackoverflow.com/a/29497680
ANSI_RE = re.compile(
    r"[\u001b\u009b][\[()#;?]*(?:[0-9]{1,4}(?:;[0-9]{0,4})*)?[0-9A-ORZcf-nqry=><]"
)


def strip_ansi(text: str) -> str:
    """Remove ANSI colour/cursor sequences, leaving plain text"""
    if not text:
        return ""
    return ANSI_RE.sub("", text)


class BasePresenter:
    """Base presenter with common formatting utilities"""

    def escape_markdown(self, text: str) -> str:
        """Escape markdown special characters"""
        if not text:
            return ""

        chars_to_escape = ['\\', '*', '_', '`', '[', ']', '(', ')', '#', '+', '-', '.', '!', '>']
        for char in chars_to_escape:
            text = text.replace(char, f'\\{char}')

        # Markdown has no backslash escape for "<"; entities keep raw tags out
        return text.replace('&', '&amp;').replace('<', '&lt;')

    def code_fence(self, text: str) -> str:
        """Pick a backtick fence longer than any backtick run inside text"""
        longest = max((len(run) for run in re.findall(r"`+", text)), default=0)
        return "`" * max(3, longest + 1)


class SheetPresenter(BasePresenter):
    """Convert a cheat sheet to Markdown"""

    def to_markdown(self, sheet: str, query: str = "") -> str:
        """Render the sheet as a preformatted block under the query heading"""
        header = f"## {self.escape_markdown(query)}" if query else "## cheat.sh"

        plain = strip_ansi(sheet).rstrip("\n")
        if not plain.strip():
            return f"{header}\n\n**No results found**"

        fence = self.code_fence(plain)
        return "\n".join([header, "", fence, plain, fence])


class ErrorPresenter(BasePresenter):
    """Convert a failed lookup to Markdown"""

    def to_markdown(self, message: str, query: str = "") -> str:
        header = f"## {self.escape_markdown(query)}" if query else "## Error"
        return f"{header}\n\n> {self.escape_markdown(message or 'Search failed')}"


class HistoryPresenter(BasePresenter):
    """Convert recent queries to a Markdown list"""

    def to_markdown(self, entries: Sequence[str]) -> str:
        if not entries:
            return "## Recent\n\n**No recent searches.**"

        markdown: List[str] = [f"## Recent ({len(entries)})", ""]
        for query in entries:
            markdown.append(f"- `{query}`" if "`" not in query else f"- {self.escape_markdown(query)}")
        return "\n".join(markdown)


# Factory function for easy access
def create_presenter(content_type: str) -> BasePresenter:
    """Create appropriate presenter for content type"""
    presenters = {
        'sheet': SheetPresenter(),
        'error': ErrorPresenter(),
        'history': HistoryPresenter(),
    }

    if content_type not in presenters:
        raise ValueError(f"Unknown content type: {content_type}")

    return presenters[content_type]
