"""Failure signature normalisation for clustering.

A signature is ``"<family>|<shape>"``: the error family token (``TypeError``,
``ReferenceError``, ...) plus the message with its variable parts replaced by
placeholders. Two failures with equal signatures describe the same
underlying problem and are mined into one pattern.
"""

from __future__ import annotations

import re

_FAMILY_TOKEN = re.compile(r"\b[A-Z][A-Za-z]*(?:Error|Exception|Warning)\b")
_BARE_PREFIX = re.compile(r"^\s*(Error|Warning|Exception)\s*:")
_EXPECTED = re.compile(r"\bexpected\b.+?\bbut\s+(?:got|received|was)\b", re.IGNORECASE)

# Trailing "at fn (file:1:2)" stack-frame fragments are location, not shape
_TRAILING_FRAME = re.compile(r"\s+at\s+[\w$.<>]+(?:\s*\([^)]*\))?\s*$")

_PLACEHOLDERS: list[tuple[re.Pattern[str], str]] = [
    (
        re.compile(r"\bexpected\s+.+?\s+but\s+(got|received|was)\s+.+$"),
        "expected <val> but <got> <val>",
    ),
    (re.compile(r"\"[^\"]*\"|'[^']*'|`[^`]*`"), "<str>"),
    (re.compile(r"\b0x[0-9a-f]+\b"), "<hex>"),
    (re.compile(r"(?:\.{0,2}/)?(?:[\w.-]+/)+[\w.-]+\.\w+(?::\d+){0,2}"), "<path>"),
    (re.compile(r"(?<![<\w$.])[a-z_$][\w$]*(?:\.[a-z_$][\w$]*)+(?![\w$])"), "<id>"),
    (re.compile(r"\bproperty\s+(?!<)[\w$]+"), "property <id>"),
    (
        re.compile(
            r"(?<![<\w$])[\w$]+(?=\s+is\s+(?:not\s+(?:defined|a\s+function|a\s+constructor"
            r"|iterable)|null|undefined)\b)"
        ),
        "<id>",
    ),
    (re.compile(r"(?<![\w<])-?\d+(?:\.\d+)?(?![\w>])"), "<num>"),
]

PLACEHOLDER_TOKEN = re.compile(r"<(str|hex|path|id|num|val|got)>")

PLACEHOLDER_REGEX = {
    "str": r"(?:\"[^\"]*\"|'[^']*'|`[^`]*`)",
    "hex": r"0x[0-9a-f]+",
    "path": r"\S+",
    "id": r"[\w$]+(?:\.[\w$]+)*",
    "num": r"-?\d+(?:\.\d+)?",
    "val": r".+?",
    "got": r"(?:got|received|was)",
}


def error_family(message: str) -> str:
    """Dominant error family token of a message.

    Explicit class names win (``TypeError``), then a bare ``Error:`` or
    ``Warning:`` prefix, then a family inferred from wording.
    """
    if m := _FAMILY_TOKEN.search(message):
        return m.group(0)
    if m := _BARE_PREFIX.match(message):
        return m.group(1)
    lowered = message.lower()
    if _EXPECTED.search(message):
        return "AssertionError"
    if "deprecat" in lowered:
        return "DeprecationWarning"
    if "timed out" in lowered or "timeout" in lowered:
        return "TimeoutError"
    return "Error"


def strip_family(message: str, family: str) -> tuple[str, bool]:
    """Remove a leading family token. Returns (rest, stripped)."""
    text = message.strip()
    rest = text[len(family) :]
    if text.startswith(family) and not rest[:1].isalnum():
        return rest.lstrip(": \t"), True
    return text, False


def message_shape(message: str, family: str | None = None) -> str:
    """Generalised, lowercase message shape with placeholders for variable parts."""
    family = family or error_family(message)
    text, _ = strip_family(message, family)
    text = _TRAILING_FRAME.sub("", text).lower()
    for regex, replacement in _PLACEHOLDERS:
        text = regex.sub(replacement, text)
    return " ".join(text.split())


def error_signature(message: str) -> str:
    """Clustering key: failures with equal signatures share one pattern."""
    family = error_family(message)
    return f"{family}|{message_shape(message, family)}"


def family_slug(family: str) -> str:
    """``TypeError`` -> ``type-error``."""
    s1 = re.sub("(.)([A-Z][a-z]+)", r"\1-\2", family)
    return re.sub("([a-z0-9])([A-Z])", r"\1-\2", s1).lower()


def shape_to_regex(shape: str) -> str:
    """Regex source matching every message with this shape."""
    parts: list[str] = []
    pos = 0
    for m in PLACEHOLDER_TOKEN.finditer(shape):
        parts.append(_literal_regex(shape[pos : m.start()]))
        parts.append(PLACEHOLDER_REGEX[m.group(1)])
        pos = m.end()
    parts.append(_literal_regex(shape[pos:]))
    return "".join(parts)


def _literal_regex(text: str) -> str:
    return r"\s+".join(re.escape(chunk) for chunk in re.split(r"\s+", text))
