"""Text helpers shared by the dispatcher, collector and built-in commands."""

import inspect
import math
import re
from collections.abc import Iterable
from typing import Any

_SINGLE_SMART_QUOTES = re.compile("[\u2018\u2019]")
_DOUBLE_SMART_QUOTES = re.compile("[\u201c\u201d]")

_TOKEN = re.compile(r"""\s*(?:(["'])(.*?)\1|(\S+))\s*""", re.DOTALL)
_TOKEN_DOUBLE_ONLY = re.compile(r"""\s*(?:(")(.*?)"|(\S+))\s*""", re.DOTALL)
_WRAPPED = re.compile(r"""^(["'])(.*)\1$""", re.DOTALL)
_WRAPPED_DOUBLE_ONLY = re.compile(r"""^(")(.*)"$""", re.DOTALL)

_MARKDOWN = re.compile(r"([\\*_`~|])")


def remove_smart_quotes(arg_string: str, allow_single_quote: bool = True) -> str:
    if allow_single_quote:
        arg_string = _SINGLE_SMART_QUOTES.sub("'", arg_string)
    return _DOUBLE_SMART_QUOTES.sub('"', arg_string)


def parse_args(arg_string: str, arg_count: float | None = None, allow_single_quote: bool = True) -> list[str]:
    """Split an argument string into tokens.

    Quoted groups count as a single token. When ``arg_count`` tokens have
    been produced the unsplit remainder becomes the final token. A falsy
    ``arg_count`` splits as far as possible; ``math.inf`` never stops early.
    """
    text = remove_smart_quotes(arg_string, allow_single_quote)
    token = _TOKEN if allow_single_quote else _TOKEN_DOUBLE_ONLY
    wrapped = _WRAPPED if allow_single_quote else _WRAPPED_DOUBLE_ONLY

    remaining = arg_count or len(text)
    result: list[str] = []
    position = 0
    matched = True

    while True:
        remaining -= 1
        if remaining <= 0 and not math.isinf(remaining):
            break
        match = token.match(text, position)
        if not match or match.end() == position:
            matched = False
            break
        result.append(match.group(2) if match.group(1) else match.group(3))
        position = match.end()

    if matched and position < len(text):
        result.append(wrapped.sub(r"\2", text[position:]))

    return result


def escape_markdown(text: str) -> str:
    return _MARKDOWN.sub(r"\\\1", text)


def disambiguation(items: Iterable[Any], label: str, attribute: str | None = "name") -> str:
    """Build the "be more specific" message used by the reference argument types."""
    names = (str(getattr(item, attribute) if attribute else item).replace(" ", "\xa0") for item in items)
    item_list = ",   ".join(f'"{name}"' for name in names)
    return f"Multiple {label} found, please be more specific: {item_list}"


def human_join(items: list[str], conjunction: str = "or") -> str:
    if len(items) <= 1:
        return "".join(items)
    if len(items) == 2:
        return f"{items[0]} {conjunction} {items[1]}"
    return f"{', '.join(items[:-1])}, {conjunction} {items[-1]}"


async def maybe_await(value: Any) -> Any:
    """Await ``value`` if it is awaitable, otherwise return it unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value


def split_message(text: str, limit: int = 2000) -> list[str]:
    """Split text into chunks no longer than ``limit``, preferring line breaks."""
    chunks: list[str] = []
    current = ""
    for line in text.split("\n"):
        while len(line) > limit:
            if current:
                chunks.append(current)
                current = ""
            chunks.append(line[:limit])
            line = line[limit:]
        candidate = f"{current}\n{line}" if current else line
        if len(candidate) > limit:
            chunks.append(current)
            current = line
        else:
            current = candidate
    if current:
        chunks.append(current)
    return chunks
