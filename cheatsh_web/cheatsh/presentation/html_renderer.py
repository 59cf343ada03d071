"""
HTML Renderer for cheatsh
Converts Markdown to styled HTML pages and renders the lookup widgets
(suggestion dropdown, history chips) as escaped markup
"""

from __future__ import annotations

import markdown
from typing import Optional, Sequence

from ..config import settings
from ..lookup.suggest import Suggestion

THEMES = ("light", "dark")


class HtmlRenderer:
    """HTML renderer with light/dark CSS themes and mobile optimization"""

    def __init__(
        self,
        theme: Optional[str] = None,
        mobile_optimized: Optional[bool] = None,
        font_size: Optional[str] = None,
        max_width: Optional[str] = None
    ):
        # Use settings defaults or override with parameters
        self.theme = theme or settings.css_theme
        self.mobile_optimized = mobile_optimized if mobile_optimized is not None else settings.mobile_optimized
        self.font_size = font_size or settings.html_font_size
        self.max_width = max_width or settings.html_max_width

        self.md = markdown.Markdown(
            extensions=[
                'fenced_code',      # ```code blocks
                'tables',
            ]
        )

    def render(self, markdown_text: str, title: str = "cheat.sh", metadata: dict = None) -> str:
        """Convert Markdown to a complete styled HTML document"""
        self.md.reset()
        html_content = self.md.convert(markdown_text)
        css = self._get_complete_css()
        return self._build_html_document(html_content, css, title, metadata)

    def render_suggestions(self, suggestions: Sequence[Suggestion], highlighted_index: int = -1) -> str:
        """Dropdown items with the matched span wrapped in <strong>.

        Every piece of command text is escaped here; suggestions only ever
        carry plain text.
        """
        items = []
        for idx, suggestion in enumerate(suggestions):
            text = suggestion.text
            css_class = "autocomplete-item selected" if idx == highlighted_index else "autocomplete-item"

            if suggestion.match_start < 0:
                label = self._escape_html(text)
            else:
                end = suggestion.match_start + suggestion.match_length
                before = self._escape_html(text[:suggestion.match_start])
                match = self._escape_html(text[suggestion.match_start:end])
                after = self._escape_html(text[end:])
                label = f"{before}<strong>{match}</strong>{after}"

            items.append(
                f'<button class="{css_class}" data-val="{self._escape_html(text)}">{label}</button>'
            )
        return "".join(items)

    def render_history(self, entries: Sequence[str]) -> str:
        """History chips, most recent first"""
        return "".join(
            f'<button class="chip" data-query="{self._escape_html(q)}">{self._escape_html(q)}</button>'
            for q in entries
        )

    def _build_html_document(self, content: str, css: str, title: str, metadata: dict = None) -> str:
        """Build complete HTML document with optional metadata"""
        metadata_elements = ""
        if metadata:
            for key, value in metadata.items():
                safe_key = self._escape_html(str(key))
                safe_value = self._escape_html(str(value))
                metadata_elements += f'    <meta name="cheatsh-{safe_key}" content="{safe_value}">\n'

        return f"""<!DOCTYPE html>
<html lang="en" data-theme="{self._escape_html(self._resolved_theme())}">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{self._escape_html(title)}</title>
{metadata_elements}    <style>
{css}
    </style>
</head>
<body>
    <article class="markdown-body">
        {content}
    </article>
</body>
</html>"""

    def _escape_html(self, text: str) -> str:
        """Escape HTML entities"""
        return (
            text.replace("&", "&amp;")
            .replace("<", "&lt;")
            .replace(">", "&gt;")
            .replace('"', "&quot;")
            .replace("'", "&#x27;")
        )

    def _resolved_theme(self) -> str:
        return self.theme if self.theme in THEMES else "light"

    def _get_complete_css(self) -> str:
        """Generate complete CSS with theme and settings"""
        css_parts = [
            self._get_css_variables(),
            self._get_base_css(),
            self._get_theme_css(),
        ]

        if self.mobile_optimized:
            css_parts.append(self._get_mobile_css())

        return "\n".join(css_parts)

    def _get_css_variables(self) -> str:
        """CSS variables from settings"""
        return f"""
/* CSS Variables from settings */
:root {{
    --font-size: {self.font_size};
    --max-width: {self.max_width};
    --line-height: 1.5;
    --border-radius: 12px;
    --spacing: 16px;
}}
"""

    def _get_base_css(self) -> str:
        """Base CSS styles"""
        return """
/* Base styles */
.markdown-body {
    font-family: Roboto, -apple-system, BlinkMacSystemFont, 'Segoe UI', Helvetica, Arial, sans-serif;
    font-size: var(--font-size);
    line-height: var(--line-height);
    max-width: var(--max-width);
    margin: 0 auto;
    padding: 20px;
    word-wrap: break-word;
}

h2 {
    margin-top: 24px;
    margin-bottom: var(--spacing);
    font-weight: 500;
    font-size: 1.4em;
}

pre {
    padding: var(--spacing);
    border-radius: var(--border-radius);
    overflow: auto;
    font-family: 'JetBrains Mono', 'SF Mono', Monaco, Consolas, monospace;
    font-size: 13px;
    line-height: 1.45;
}

pre code {
    display: block;
    white-space: pre;
}

blockquote {
    margin: 0 0 var(--spacing) 0;
    padding: 12px var(--spacing);
    border-radius: var(--border-radius);
}

.autocomplete-item, .chip {
    font: inherit;
    border: none;
    cursor: pointer;
}

.autocomplete-item strong {
    font-weight: 700;
}
"""

    def _get_theme_css(self) -> str:
        """Theme-specific CSS"""
        themes = {
            "light": self._get_light_theme(),
            "dark": self._get_dark_theme(),
        }

        return themes.get(self.theme, themes["light"])

    def _get_light_theme(self) -> str:
        """Material-style light theme"""
        return """
/* Light theme */
:root {
    --bg-color: #fef7ff;
    --text-color: #1d1b20;
    --accent-color: #6750a4;
    --surface-color: #f3edf7;
    --error-bg: #f9dedc;
    --error-text: #410e0b;
}

body {
    background-color: var(--bg-color);
    color: var(--text-color);
}

h2 {
    color: var(--accent-color);
}

pre {
    background-color: var(--surface-color);
}

blockquote {
    background-color: var(--error-bg);
    color: var(--error-text);
}

.autocomplete-item.selected, .chip {
    background-color: var(--surface-color);
}
"""

    def _get_dark_theme(self) -> str:
        """Material-style dark theme"""
        return """
/* Dark theme */
:root {
    --bg-color: #141218;
    --text-color: #e6e0e9;
    --accent-color: #d0bcff;
    --surface-color: #211f26;
    --error-bg: #8c1d18;
    --error-text: #f9dedc;
}

body {
    background-color: var(--bg-color);
    color: var(--text-color);
}

h2 {
    color: var(--accent-color);
}

pre {
    background-color: var(--surface-color);
}

blockquote {
    background-color: var(--error-bg);
    color: var(--error-text);
}

.autocomplete-item.selected, .chip {
    background-color: var(--surface-color);
}
"""

    def _get_mobile_css(self) -> str:
        """Mobile-optimized CSS"""
        return """
/* Mobile optimizations */
@media screen and (max-width: 768px) {
    .markdown-body {
        padding: 12px;
    }

    /* Prevent horizontal scroll */
    pre {
        font-size: 12px;
        padding: 12px;
    }

    pre code {
        white-space: pre-wrap;
        word-break: break-all;
    }

    :root {
        --spacing: 12px;
    }
}
"""
