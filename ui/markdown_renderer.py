# ui/markdown_renderer.py
# -*- coding: utf-8 -*-

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional

from markdown import markdown


@dataclass(frozen=True)
class MarkdownTheme:
    text: str = "#111827"
    muted: str = "#6B7280"
    border: str = "#E5E7EB"
    panel: str = "#FFFFFF"
    codebg: str = "#F3F4F6"
    link: str = "#2563EB"


LIGHT_THEME = MarkdownTheme()
DARK_THEME = MarkdownTheme(
    text="#E4E4E7",
    muted="#A1A1AA",
    border="#3F3F46",
    panel="#18181B",
    codebg="#27272A",
    link="#60A5FA",
)

EXTENSIONS: List[str] = ["extra", "sane_lists", "nl2br"]


class MarkdownRenderer:
    """
    Task description Markdown -> HTML for a tkinterweb HtmlFrame.

    tkhtml cannot draw <input>, so "- [ ]" / "- [x]" checklists are turned
    into unicode boxes before conversion.
    """

    def __init__(self, theme: Optional[MarkdownTheme] = None):
        self.theme = theme or LIGHT_THEME

    def preprocess(self, md_text: str) -> str:
        if not md_text:
            return ""

        task_unchecked = re.compile(r"^(\s*[-*+]\s+)\[ \]\s+")
        task_checked = re.compile(r"^(\s*[-*+]\s+)\[(x|X)\]\s+")

        out: List[str] = []
        for line in md_text.splitlines():
            line = task_checked.sub(r"\1☑ ", line)
            line = task_unchecked.sub(r"\1☐ ", line)
            out.append(line)
        return "\n".join(out)

    def css(self) -> str:
        t = self.theme
        return f"""
        body {{
          font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Arial, sans-serif;
          margin: 10px;
          color: {t.text};
          background: {t.panel};
          font-size: 13px;
          line-height: 1.5;
        }}
        p {{ margin: 0.5em 0; }}
        a {{ color: {t.link}; text-decoration: none; }}
        ul, ol {{ padding-left: 1.2em; margin: 0.5em 0; }}
        blockquote {{
          margin: 0.6em 0;
          padding-left: 0.8em;
          border-left: 3px solid {t.border};
          color: {t.muted};
        }}
        code {{
          font-family: ui-monospace, Menlo, Consolas, monospace;
          background: {t.codebg};
          padding: 1px 4px;
        }}
        pre {{ background: {t.codebg}; padding: 8px; }}
        .empty {{ color: {t.muted}; font-style: italic; }}
        """

    def to_html(self, md_text: str) -> str:
        if (md_text or "").strip():
            body = markdown(
                self.preprocess(md_text),
                extensions=EXTENSIONS,
                output_format="html5",
            )
        else:
            body = '<p class="empty">No description.</p>'
        return f"""
        <html>
          <head>
            <meta charset="utf-8"/>
            <style>{self.css()}</style>
          </head>
          <body>{body}</body>
        </html>
        """
