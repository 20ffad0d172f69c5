"""Plain-text rendering of assistant markdown for the compact surface."""

from __future__ import annotations

import re

_BOLD = re.compile(r'\*\*(.*?)\*\*')
_ITALIC = re.compile(r'\*(.*?)\*')
_CODE = re.compile(r'`(.*?)`')
_HEADER = re.compile(r'#{1,6}\s')
_LINK = re.compile(r'\[(.*?)\]\(.*?\)')


def strip_markdown(text: str) -> str:
    """Remove bold, italic, inline code, and header markers; links keep their text."""
    text = _BOLD.sub(r'\1', text)
    text = _ITALIC.sub(r'\1', text)
    text = _CODE.sub(r'\1', text)
    text = _HEADER.sub('', text)
    text = _LINK.sub(r'\1', text)
    return text.strip()
