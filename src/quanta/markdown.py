"""Minimal, safe Markdown to HTML rendering for chat bubbles.

Only a small subset is understood: paragraphs with line breaks, flat
unordered and ordered lists, ``**bold**``, ``*italic*`` and ```code```.
Everything else passes through as escaped text. Escaping always happens
before any markup is inserted, so user-supplied ``<``, ``>`` and ``&`` can
never produce live HTML.
"""

import html
import re
from typing import List, Optional

UNORDERED_ITEM = re.compile(r"^\s*[-*]\s+(.+)$", re.ASCII)
ORDERED_ITEM = re.compile(r"^\s*\d+[.)]\s+(.+)$", re.ASCII)

BOLD = re.compile(r"\*\*(.+?)\*\*")
ITALIC = re.compile(r"(?<!\*)\*(?!\*)(.+?)(?<!\*)\*(?!\*)")
CODE = re.compile(r"`([^`]+)`")


def escape(text: str) -> str:
    """Escape ``&``, ``<`` and ``>``."""
    return html.escape(text, quote=False)


def inline(text: str) -> str:
    """Escape ``text`` and apply the inline transforms in precedence order."""
    text = escape(text)
    text = BOLD.sub(r"<strong>\1</strong>", text)
    text = ITALIC.sub(r"<em>\1</em>", text)
    return CODE.sub(r"<code>\1</code>", text)


class _Renderer:
    """Line-by-line state machine for a single ``render`` call."""

    def __init__(self):
        self.parts: List[str] = []
        self.open_list: Optional[str] = None
        self.in_paragraph = False

    def close_list(self):
        if self.open_list:
            self.parts.append(f"</{self.open_list}>")
            self.open_list = None

    def close_paragraph(self):
        if self.in_paragraph:
            self.parts.append("</p>")
            self.in_paragraph = False

    def list_item(self, tag: str, content: str):
        self.close_paragraph()
        if self.open_list != tag:
            self.close_list()
            self.parts.append(f"<{tag}>")
            self.open_list = tag
        self.parts.append(f"<li>{inline(content)}</li>")

    def paragraph_line(self, line: str):
        if self.in_paragraph:
            self.parts.append("<br>")
        else:
            self.close_list()
            self.parts.append("<p>")
            self.in_paragraph = True
        self.parts.append(inline(line))

    def feed(self, line: str):
        unordered = UNORDERED_ITEM.match(line)
        if unordered:
            self.list_item("ul", unordered.group(1))
            return
        ordered = ORDERED_ITEM.match(line)
        if ordered:
            self.list_item("ol", ordered.group(1))
            return
        if not line.strip():
            self.close_list()
            self.close_paragraph()
            return
        self.paragraph_line(line)

    def finish(self) -> str:
        self.close_list()
        self.close_paragraph()
        return "".join(self.parts)


def render(text: Optional[str]) -> str:
    """Render chat text to an HTML fragment.

    Parameters
    ----------
    text : str or None
        Raw message content. ``\\r\\n`` and ``\\r`` line endings are
        normalized to ``\\n``.

    Returns
    -------
    str
        The HTML fragment; empty for empty input.

    Examples
    --------
    >>> render("- a\\n- b")
    '<ul><li>a</li><li>b</li></ul>'
    >>> render("**hi** <b>")
    '<p><strong>hi</strong> &lt;b&gt;</p>'
    """
    renderer = _Renderer()
    normalized = re.sub(r"\r\n?", "\n", text or "")
    if not normalized:
        return ""
    for line in normalized.split("\n"):
        renderer.feed(line)
    return renderer.finish()
