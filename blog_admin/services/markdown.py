"""HTML <-> Markdown body conversion for post files.

Two lossy, one-directional converters driven by rule tables. Headings,
paragraphs, emphasis, links, images, flat lists and blockquotes survive a
round trip; nested lists and tables do not. Embedded third-party snippets
(``<div class="embedded-content">``) are carried verbatim between sentinel
comments so the Markdown file never mangles them.
"""

import html
import math
import re
from collections.abc import Callable
from dataclasses import dataclass

EMBED_OPEN = "<!-- EMBEDDED_CONTENT -->"
EMBED_CLOSE = "<!-- /EMBEDDED_CONTENT -->"
EMBED_CLASS = "embedded-content"

WORDS_PER_MINUTE = 200

_EMBED_DIV_START_RE = re.compile(
    r"<div\b[^>]*\bclass\s*=\s*[\"'][^\"']*\bembedded-content\b[^\"']*[\"'][^>]*>",
    re.IGNORECASE,
)
_DIV_TAG_RE = re.compile(r"<(/?)div\b[^>]*>", re.IGNORECASE)
_EMBED_BLOCK_RE = re.compile(
    re.escape(EMBED_OPEN) + r"\n?(.*?)\n?" + re.escape(EMBED_CLOSE), re.DOTALL
)
_PLACEHOLDER = "\x00EMBED{}\x00"
_PLACEHOLDER_RE = re.compile(r"\n*\x00EMBED(\d+)\x00\n*")
_PLACEHOLDER_BLOCK_RE = re.compile(r"^\x00EMBED(\d+)\x00$")

_ATTR_RE = re.compile(r"([\w:-]+)\s*=\s*(?:\"([^\"]*)\"|'([^']*)')")
_TAG_RE = re.compile(r"<[^>]+>")
_SCRIPT_RE = re.compile(r"<(script|style)\b[^>]*>.*?</\1>", re.IGNORECASE | re.DOTALL)

Replacement = str | Callable[[re.Match[str]], str]


@dataclass(frozen=True)
class InlineRule:
    """One inline construct and how it is written in each direction."""

    name: str
    html_pattern: re.Pattern[str]
    to_markdown: Replacement
    markdown_pattern: re.Pattern[str]
    to_html: Replacement


def _attrs(raw: str) -> dict[str, str]:
    return {
        m.group(1).lower(): m.group(2) if m.group(2) is not None else m.group(3)
        for m in _ATTR_RE.finditer(raw)
    }


def _image_to_markdown(match: re.Match[str]) -> str:
    attrs = _attrs(match.group(1))
    src = attrs.get("src", "")
    if not src:
        return ""
    return f"![{attrs.get('alt', '')}]({src})"


def _link_to_markdown(match: re.Match[str]) -> str:
    href = _attrs(match.group(1)).get("href", "")
    text = match.group(2)
    if not href:
        return text
    return f"[{text}]({href})"


# Order matters: images before links in both directions, strong before em.
INLINE_RULES: tuple[InlineRule, ...] = (
    InlineRule(
        name="image",
        html_pattern=re.compile(r"<img\b([^>]*?)/?>", re.IGNORECASE),
        to_markdown=_image_to_markdown,
        markdown_pattern=re.compile(r"!\[([^\]]*)\]\(([^)\s]+)\)"),
        to_html=r'<img src="\2" alt="\1">',
    ),
    InlineRule(
        name="link",
        html_pattern=re.compile(r"<a\b([^>]*)>(.*?)</a>", re.IGNORECASE | re.DOTALL),
        to_markdown=_link_to_markdown,
        markdown_pattern=re.compile(r"\[([^\]]+)\]\(([^)\s]+)\)"),
        to_html=r'<a href="\2">\1</a>',
    ),
    InlineRule(
        name="strong",
        html_pattern=re.compile(
            r"<(strong|b)\b[^>]*>(.*?)</\1>", re.IGNORECASE | re.DOTALL
        ),
        to_markdown=r"**\2**",
        markdown_pattern=re.compile(r"\*\*(.+?)\*\*"),
        to_html=r"<strong>\1</strong>",
    ),
    InlineRule(
        name="emphasis",
        html_pattern=re.compile(r"<(em|i)\b[^>]*>(.*?)</\1>", re.IGNORECASE | re.DOTALL),
        to_markdown=r"*\2*",
        markdown_pattern=re.compile(r"\*(.+?)\*"),
        to_html=r"<em>\1</em>",
    ),
)

HEADING_LEVELS = range(1, 7)

_HEADING_HTML_RE = re.compile(r"<h([1-6])\b[^>]*>(.*?)</h\1>", re.IGNORECASE | re.DOTALL)
_BLOCKQUOTE_HTML_RE = re.compile(
    r"<blockquote\b[^>]*>(.*?)</blockquote>", re.IGNORECASE | re.DOTALL
)
_LIST_HTML_RE = re.compile(r"<(ul|ol)\b[^>]*>(.*?)</\1>", re.IGNORECASE | re.DOTALL)
_LIST_ITEM_HTML_RE = re.compile(r"<li\b[^>]*>(.*?)</li>", re.IGNORECASE | re.DOTALL)
_PARAGRAPH_HTML_RE = re.compile(r"<p\b[^>]*>(.*?)</p>", re.IGNORECASE | re.DOTALL)
_BREAK_HTML_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_INNER_BREAK_RE = re.compile(r"</p>\s*<p\b[^>]*>|<br\s*/?>", re.IGNORECASE)

_HEADING_MD_RE = re.compile(r"^(#{1,6})\s+(.*)$")
_QUOTE_MD_RE = re.compile(r"^>\s?(.*)$")
_BULLET_MD_RE = re.compile(r"^[-*+]\s+(.*)$")
_NUMBERED_MD_RE = re.compile(r"^\d+[.)]\s+(.*)$")
_BLOCK_SPLIT_RE = re.compile(r"\n[ \t]*\n")


# -- HTML -> Markdown --------------------------------------------------------


def _extract_embedded_html(source: str) -> tuple[str, list[str]]:
    """Swap each embedded-content container for a placeholder.

    Nested ``div`` elements inside the container are tracked so the whole
    snippet is captured. An unterminated container swallows the rest of the
    document.
    """
    snippets: list[str] = []
    parts: list[str] = []
    pos = 0
    while True:
        start = _EMBED_DIV_START_RE.search(source, pos)
        if start is None:
            break
        depth = 1
        inner_end = end = len(source)
        for tag in _DIV_TAG_RE.finditer(source, start.end()):
            depth += -1 if tag.group(1) else 1
            if depth == 0:
                inner_end, end = tag.start(), tag.end()
                break
        parts.append(source[pos : start.start()])
        parts.append(_PLACEHOLDER.format(len(snippets)))
        snippets.append(source[start.end() : inner_end])
        pos = end
    parts.append(source[pos:])
    return "".join(parts), snippets


def _strip_tags(fragment: str) -> str:
    return _TAG_RE.sub("", fragment)


def _heading_to_markdown(match: re.Match[str]) -> str:
    level = int(match.group(1))
    return f"{'#' * level} {_strip_tags(match.group(2)).strip()}\n\n"


def _blockquote_to_markdown(match: re.Match[str]) -> str:
    inner = _strip_tags(_INNER_BREAK_RE.sub("\n", match.group(1)))
    lines = [line.strip() for line in inner.strip().split("\n")]
    return "\n".join(f"> {line}" if line else ">" for line in lines) + "\n\n"


def _list_to_markdown(match: re.Match[str]) -> str:
    ordered = match.group(1).lower() == "ol"
    items = [
        _strip_tags(item).strip() for item in _LIST_ITEM_HTML_RE.findall(match.group(2))
    ]
    lines = [
        f"{n}. {item}" if ordered else f"- {item}" for n, item in enumerate(items, 1)
    ]
    return "\n".join(lines) + "\n\n"


def html_to_markdown(source: str) -> str:
    """Convert editor HTML to a Markdown body.

    Unrecognized markup is dropped; its text content is kept.
    """
    text, snippets = _extract_embedded_html(source)

    for rule in INLINE_RULES:
        text = rule.html_pattern.sub(rule.to_markdown, text)

    text = _HEADING_HTML_RE.sub(_heading_to_markdown, text)
    text = _BLOCKQUOTE_HTML_RE.sub(_blockquote_to_markdown, text)
    text = _LIST_HTML_RE.sub(_list_to_markdown, text)
    text = _PARAGRAPH_HTML_RE.sub(r"\1\n\n", text)
    text = _BREAK_HTML_RE.sub("\n", text)
    text = _strip_tags(text)
    text = re.sub(r"\n{3,}", "\n\n", text).lstrip("\n")

    def _restore(match: re.Match[str]) -> str:
        snippet = snippets[int(match.group(1))]
        return f"\n\n{EMBED_OPEN}\n{snippet}\n{EMBED_CLOSE}\n\n"

    return _PLACEHOLDER_RE.sub(_restore, text).lstrip("\n")


# -- Markdown -> HTML --------------------------------------------------------


def _inline_to_html(text: str) -> str:
    for rule in INLINE_RULES:
        text = rule.markdown_pattern.sub(rule.to_html, text)
    return text


def _lines_matching(lines: list[str], pattern: re.Pattern[str]) -> list[str] | None:
    matches = [pattern.match(line) for line in lines]
    if all(matches):
        return [m.group(1) for m in matches]  # type: ignore[union-attr]
    return None


def _block_to_html(block: str) -> str:
    lines = [line.rstrip() for line in block.split("\n")]

    quoted = _lines_matching(lines, _QUOTE_MD_RE)
    if quoted is not None:
        return f"<blockquote>{'<br>'.join(_inline_to_html(q) for q in quoted)}</blockquote>"

    bullets = _lines_matching(lines, _BULLET_MD_RE)
    if bullets is not None:
        items = "".join(f"<li>{_inline_to_html(b)}</li>" for b in bullets)
        return f"<ul>{items}</ul>"

    numbered = _lines_matching(lines, _NUMBERED_MD_RE)
    if numbered is not None:
        items = "".join(f"<li>{_inline_to_html(n)}</li>" for n in numbered)
        return f"<ol>{items}</ol>"

    out: list[str] = []
    paragraph: list[str] = []

    def _flush() -> None:
        if paragraph:
            out.append(f"<p>{'<br>'.join(_inline_to_html(p) for p in paragraph)}</p>")
            paragraph.clear()

    for line in lines:
        heading = _HEADING_MD_RE.match(line)
        if heading:
            _flush()
            level = len(heading.group(1))
            out.append(f"<h{level}>{_inline_to_html(heading.group(2).strip())}</h{level}>")
        elif line.strip():
            paragraph.append(line.strip())
    _flush()
    return "".join(out)


def markdown_to_html(source: str) -> str:
    """Convert a Markdown body back to editor HTML."""
    snippets: list[str] = []

    def _stash(match: re.Match[str]) -> str:
        snippets.append(match.group(1))
        return f"\n\n{_PLACEHOLDER.format(len(snippets) - 1)}\n\n"

    text = _EMBED_BLOCK_RE.sub(_stash, source.replace("\r\n", "\n"))

    blocks: list[str] = []
    for block in _BLOCK_SPLIT_RE.split(text.strip("\n")):
        block = block.strip("\n")
        if not block.strip():
            continue
        embedded = _PLACEHOLDER_BLOCK_RE.match(block.strip())
        if embedded:
            snippet = snippets[int(embedded.group(1))]
            blocks.append(f'<div class="{EMBED_CLASS}">{snippet}</div>')
        else:
            blocks.append(_block_to_html(block))
    return "".join(blocks)


# -- Text statistics ---------------------------------------------------------


def plain_text(source: str) -> str:
    """Visible text of an HTML fragment, whitespace collapsed."""
    text = _TAG_RE.sub(" ", _SCRIPT_RE.sub(" ", source))
    return " ".join(html.unescape(text).split())


def word_count(text: str) -> int:
    return len(text.split())


def read_time_minutes(source: str) -> int:
    """Minutes to read an HTML body at 200 words per minute, rounded up."""
    return math.ceil(word_count(plain_text(source)) / WORDS_PER_MINUTE)
