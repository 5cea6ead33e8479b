"""String and markup filters."""

from typing import Any

from markupsafe import Markup, escape


def pluralize(count: Any, singular: str, plural: str | None = None) -> str:
    """``3 | pluralize("book") -> "3 books"``."""
    try:
        is_one = float(count) == 1
    except (TypeError, ValueError):
        is_one = False
    word = singular if is_one else (plural or f"{singular}s")
    return f"{count} {word}"


def strip_html(value: Any) -> str:
    if value is None:
        return ""
    return Markup(str(value)).striptags()


def newline_to_br(value: Any) -> Markup:
    if value is None:
        return Markup("")
    text = str(escape(str(value))).replace("\r\n", "\n")
    return Markup(text.replace("\n", "<br>\n"))


def truncate_words(value: Any, count: int = 15, ellipsis: str = "...") -> str:
    if value is None:
        return ""
    words = str(value).split()
    if len(words) <= int(count):
        return " ".join(words)
    return " ".join(words[: int(count)]) + ellipsis


FILTERS = {
    "pluralize": pluralize,
    "strip_html": strip_html,
    "newline_to_br": newline_to_br,
    "truncate_words": truncate_words,
}
