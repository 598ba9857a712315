"""Mechanical fixes for patterns that carry an enabled ``AutoFix``.

Each strategy named in ``AutoFix.strategy`` maps to a plain text rewrite of
a code snippet. Rewrites are conservative and line-based; anything that
needs a human decision has no entry here.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from typing import Any

from patternwatch.fields import get_field, is_present

logger = logging.getLogger("patternwatch.autofix")

# identifier followed by a plain member access: user.name -> user?.name
_MEMBER_ACCESS = re.compile(r"(?<![\w$?])((?!this\b)[A-Za-z_$][\w$]*)\.(?=[A-Za-z_$])")
_DEBUG_LINE = re.compile(r"^[ \t]*console\.log\(.*\);?[ \t]*(?:\n|$)", re.MULTILINE)
_DEBUG_INLINE = re.compile(r"console\.log\(.*\);?[ \t]*")
_UNAWAITED_CALL = re.compile(
    r"((?<![=!<>])=(?![=>])|\breturn\b)\s*"
    r"(?!(?:await|new|function|async)\b)(?=[A-Za-z_$][\w$.]*\s*\()"
)
_STATEMENT_END = (";", "{", "}", "(", "[", ",", ":")


def _null_guard(code: str) -> str:
    return _MEMBER_ACCESS.sub(r"\1?.", code)


def _insert_semicolon(code: str) -> str:
    lines = []
    for line in code.split("\n"):
        stripped = line.rstrip()
        is_comment = stripped.lstrip().startswith(("//", "/*", "*"))
        if stripped and not is_comment and not stripped.endswith(_STATEMENT_END):
            line = stripped + ";"
        lines.append(line)
    return "\n".join(lines)


def _remove_debug_statement(code: str) -> str:
    return _DEBUG_INLINE.sub("", _DEBUG_LINE.sub("", code))


def _insert_await(code: str) -> str:
    return _UNAWAITED_CALL.sub(lambda m: f"{m.group(1)} await ", code)


FIXERS: dict[str, Callable[[str], str]] = {
    "null-guard": _null_guard,
    "insert-semicolon": _insert_semicolon,
    "remove-debug-statement": _remove_debug_statement,
    "insert-await": _insert_await,
}


def generate_auto_fix(pattern: Any, code: str) -> str | None:
    """Rewrite ``code`` with the pattern's auto-fix strategy.

    Returns None when the pattern has no enabled auto-fix, the strategy has
    no mechanical rewrite, or the rewrite leaves the code unchanged.
    """
    if not isinstance(code, str) or not code:
        return None

    metadata = get_field(pattern, "metadata")
    auto_fix = get_field(metadata, "autoFix", "auto_fix") if is_present(metadata) else None
    if not is_present(auto_fix) or get_field(auto_fix, "enabled") is not True:
        return None

    strategy = get_field(auto_fix, "strategy")
    fixer = FIXERS.get(strategy) if isinstance(strategy, str) else None
    if fixer is None:
        logger.debug(f"No mechanical fix for strategy {strategy!r}")
        return None

    fixed = fixer(code)
    return fixed if fixed != code else None
