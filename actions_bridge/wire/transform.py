"""Key-case transforms for reading generation 1 (snake_case) payloads."""

import re
from typing import Any, Callable

_WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_SEPARATORS = re.compile(r"[^A-Za-z0-9]+")


def _words(key: str) -> list:
    words = []
    for chunk in _SEPARATORS.split(key):
        if chunk:
            words.extend(part for part in _WORD_BOUNDARY.split(chunk) if part)
    return words


def camel_case(key: str) -> str:
    """``text_value`` -> ``textValue``. Keys starting with ``@`` are kept."""
    if key.startswith("@"):
        return key
    words = _words(key)
    if not words:
        return key
    head, rest = words[0].lower(), words[1:]
    return head + "".join(word[:1].upper() + word[1:].lower() for word in rest)


def transform_keys(value: Any, key_transform: Callable[[str], str]) -> Any:
    """Return a copy of ``value`` with every mapping key transformed."""
    if isinstance(value, list):
        return [transform_keys(item, key_transform) for item in value]
    if isinstance(value, dict):
        return {
            (key_transform(key) if isinstance(key, str) else key): transform_keys(item, key_transform)
            for key, item in value.items()
        }
    return value


def to_camel_case(value: Any) -> Any:
    return transform_keys(value, camel_case)
