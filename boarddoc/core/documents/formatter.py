"""Markdown-to-HTML conversion for card descriptions.

Trello descriptions use a small markdown dialect.  Rather than pulling in a
full markdown engine the conversion is a fixed sequence of regex rewrites:

    code -> special blocks -> escape -> images -> headings -> bold -> paragraphs

Code spans and fenced blocks are lifted out first and restored last so that
nothing inside them is rewritten.  Rendered image and special blocks are
stashed the same way, which keeps them out of paragraph wrapping.

All user text is HTML-escaped before any tag is introduced.  Anything that
does not match a rule (an unclosed ``**``, a lone backtick) is left as-is.
"""

from __future__ import annotations

import re

from markupsafe import escape

# Private-use characters delimit stash tokens; they are stripped from input.
_STASH_OPEN = "\ue000"
_STASH_CLOSE = "\ue001"
_BLOCK = "B"
_INLINE = "I"

_FENCED_CODE_RE = re.compile(r"```(?:([\w+#.-]+)[ \t]*\n)?(.*?)```", re.DOTALL)
_INLINE_CODE_RE = re.compile(r"`([^`\n]+)`")
_SPECIAL_START_RE = re.compile(r"^(TODO|NOTES?|Notes?)\b:?[ \t]*(.*)$")
_IMAGE_RE = re.compile(r"!\[([^\]]*)\]\(([^)\s]+)\)")
_HEADING_RE = re.compile(r"^(#{1,3}) +(.+?)[ \t]*$", re.MULTILINE)
_BOLD_RE = re.compile(r"\*\*(.+?)\*\*")
_PARAGRAPH_SPLIT_RE = re.compile(r"\n[ \t]*\n+")
_HEADING_LINE_RE = re.compile(r"^<h[1-6]>.*</h[1-6]>$")
_BLOCK_TOKEN_RE = re.compile(f"({_STASH_OPEN}{_BLOCK}\\d+{_STASH_CLOSE})")
_TOKEN_RE = re.compile(f"{_STASH_OPEN}[{_BLOCK}{_INLINE}](\\d+){_STASH_CLOSE}")


class _Stash:
    """Holds finished HTML fragments behind placeholder tokens."""

    def __init__(self) -> None:
        self._fragments: list[str] = []

    def put(self, html: str, kind: str = _INLINE) -> str:
        self._fragments.append(html)
        return f"{_STASH_OPEN}{kind}{len(self._fragments) - 1}{_STASH_CLOSE}"

    def restore(self, text: str) -> str:
        # Fragments may themselves contain tokens (code inside a TODO block).
        while _TOKEN_RE.search(text):
            text = _TOKEN_RE.sub(lambda m: self._fragments[int(m.group(1))], text)
        return text


def _esc(text: str) -> str:
    return str(escape(text))


def _stash_code(text: str, stash: _Stash) -> str:
    def fenced(match: re.Match) -> str:
        language, body = match.group(1), match.group(2)
        css = f' class="language-{_esc(language)}"' if language else ""
        body = body.removeprefix("\n").rstrip("\n")
        return stash.put(f"<pre><code{css}>{_esc(body)}</code></pre>", _BLOCK)

    text = _FENCED_CODE_RE.sub(fenced, text)
    return _INLINE_CODE_RE.sub(lambda m: stash.put(f"<code>{_esc(m.group(1))}</code>"), text)


def _format_inline(text: str) -> str:
    """Escape and apply the inline rules only; newlines become ``<br>``."""
    html = _BOLD_RE.sub(r"<strong>\1</strong>", _esc(text))
    return "<br>".join(line.strip() for line in html.split("\n"))


def _extract_special_blocks(text: str, stash: _Stash) -> str:
    """Turn ``TODO:`` / ``NOTE:`` style paragraphs into labelled blocks."""
    lines = text.split("\n")
    output: list[str] = []
    i = 0
    while i < len(lines):
        match = _SPECIAL_START_RE.match(lines[i])
        if not match:
            output.append(lines[i])
            i += 1
            continue

        keyword = match.group(1)
        body = [match.group(2)] if match.group(2) else []
        i += 1
        while i < len(lines) and lines[i].strip() and not _SPECIAL_START_RE.match(lines[i]):
            body.append(lines[i])
            i += 1

        kind = keyword.lower()
        body_html = _format_inline("\n".join(body))
        html = (
            f'<div class="special-block special-block-{kind}">'
            f'<div class="special-block-header">{keyword.upper()}</div>'
            f'<div class="special-block-body">{body_html}</div>'
            "</div>"
        )
        output.append(stash.put(html, _BLOCK))
    return "\n".join(output)


def _render_image(match: re.Match, stash: _Stash) -> str:
    alt = match.group(1) or "Image"
    src = match.group(2)
    return stash.put(
        '<div class="embedded-image">'
        f'<img src="{src}" alt="{alt}" class="card-image" loading="lazy">'
        f'<div class="image-caption">{alt}</div>'
        "</div>",
        _BLOCK,
    )


def _render_heading(match: re.Match) -> str:
    level = len(match.group(1))
    return f"<h{level}>{match.group(2)}</h{level}>"


def _build_paragraphs(text: str) -> str:
    """Wrap text runs in ``<p>``; headings and block tokens stand alone.

    A block token in the middle of a line splits the paragraph around it.
    """
    parts: list[str] = []
    pending: list[str] = []

    def flush() -> None:
        if pending:
            parts.append(f"<p>{'<br>'.join(pending)}</p>")
            pending.clear()

    for chunk in _PARAGRAPH_SPLIT_RE.split(text.strip("\n")):
        for line in chunk.split("\n"):
            line = line.strip()
            if _HEADING_LINE_RE.match(line):
                flush()
                parts.append(line)
                continue
            for piece in _BLOCK_TOKEN_RE.split(line):
                piece = piece.strip()
                if _BLOCK_TOKEN_RE.fullmatch(piece):
                    flush()
                    parts.append(piece)
                elif piece:
                    pending.append(piece)
        flush()
    return "".join(parts)


def format_description(text: str | None) -> str:
    """Convert a card description into an HTML fragment.

    The output is deterministic for a given input and never raises on
    malformed markdown.
    """
    if not text:
        return ""

    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = text.replace(_STASH_OPEN, "").replace(_STASH_CLOSE, "")

    stash = _Stash()
    text = _stash_code(text, stash)
    text = _extract_special_blocks(text, stash)

    text = _esc(text)
    text = _IMAGE_RE.sub(lambda m: _render_image(m, stash), text)
    text = _HEADING_RE.sub(_render_heading, text)
    text = _BOLD_RE.sub(r"<strong>\1</strong>", text)

    return stash.restore(_build_paragraphs(text))
