"""Trigger value object — a compiled regex plus a cheap structural inspector.

The inspector tokenizes the regex source once (escapes, character classes,
groups, quantifiers, alternation) and builds a small tree. Safety and
overlap heuristics read that tree instead of the regex engine internals.
None of this is a backtracking proof; it recognises a handful of known
bad shapes:

- nested quantifiers:        (a+)+
- repeated redundant choice: (a|a)*
- nested wildcards:          (.*).*
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any


class TriggerError(ValueError):
    """Raised when a value cannot be used as a trigger expression."""


_GROUP_OPEN = re.compile(r"\((?:\?(?:P<\w+>|<\w+>|<[=!]|[:=!>]|[aiLmsux-]+:?))?")
_BRACE_QUANT = re.compile(r"\{(\d*)(?:(,)(\d*))?\}")

# Escapes that stand for a literal character rather than a class/assertion
_CLASS_ESCAPES = set("dDwWsSbBAZz")
_ESCAPE_PROBES = {"d": "0", "D": "x", "w": "a", "W": "-", "s": " ", "S": "x"}


# ---------------------------------------------------------------------------
# Tokenizer and tree
# ---------------------------------------------------------------------------


@dataclass
class _Token:
    kind: str  # literal | escape | class | open | close | quant | alt | dot | anchor
    text: str


@dataclass
class _Node:
    kind: str  # literal | escape | class | dot | anchor | group
    text: str = ""
    quantifier: str | None = None
    capturing: bool = False
    branches: list[list[_Node]] = field(default_factory=list)

    @property
    def unbounded(self) -> bool:
        return _is_unbounded(self.quantifier)

    @property
    def optional(self) -> bool:
        return _min_repeat(self.quantifier) == 0

    def render(self) -> str:
        if self.kind != "group":
            return self.text + (self.quantifier or "")
        inner = "|".join("".join(n.render() for n in b) for b in self.branches)
        return f"{self.text}{inner})" + (self.quantifier or "")


def _tokenize(source: str) -> list[_Token]:
    tokens: list[_Token] = []
    i = 0
    n = len(source)
    while i < n:
        ch = source[i]
        if ch == "\\":
            tokens.append(_Token("escape", source[i : i + 2]))
            i += 2
        elif ch == "[":
            j = i + 1
            if j < n and source[j] == "^":
                j += 1
            if j < n and source[j] == "]":
                j += 1
            while j < n and source[j] != "]":
                j += 2 if source[j] == "\\" else 1
            tokens.append(_Token("class", source[i : j + 1]))
            i = j + 1
        elif ch == "(":
            m = _GROUP_OPEN.match(source, i)
            text = m.group(0) if m else "("
            tokens.append(_Token("open", text))
            i += len(text)
        elif ch == ")":
            tokens.append(_Token("close", ch))
            i += 1
        elif ch in "*+?":
            j = i + 1
            if j < n and source[j] in "?+":
                j += 1
            tokens.append(_Token("quant", source[i:j]))
            i = j
        elif ch == "{" and (m := _BRACE_QUANT.match(source, i)):
            j = m.end()
            if j < n and source[j] in "?+":
                j += 1
            tokens.append(_Token("quant", source[i:j]))
            i = j
        elif ch == "|":
            tokens.append(_Token("alt", ch))
            i += 1
        elif ch == ".":
            tokens.append(_Token("dot", ch))
            i += 1
        elif ch in "^$":
            tokens.append(_Token("anchor", ch))
            i += 1
        else:
            tokens.append(_Token("literal", ch))
            i += 1
    return tokens


def _parse(source: str) -> _Node:
    """Build a group tree from the token stream. Unbalanced input is tolerated."""
    root = _Node(kind="group", text="(?:", branches=[[]])
    stack = [root]
    for token in _tokenize(source):
        current = stack[-1]
        sequence = current.branches[-1]
        if token.kind == "open":
            named = token.text.startswith(("(?P<", "(?<")) and not token.text.startswith(
                ("(?<=", "(?<!")
            )
            group = _Node(
                kind="group",
                text=token.text,
                capturing=token.text == "(" or named,
                branches=[[]],
            )
            sequence.append(group)
            stack.append(group)
        elif token.kind == "close":
            if len(stack) > 1:
                stack.pop()
        elif token.kind == "alt":
            current.branches.append([])
        elif token.kind == "quant":
            if sequence and sequence[-1].quantifier is None:
                sequence[-1].quantifier = token.text
        else:
            sequence.append(_Node(kind=token.kind, text=token.text))
    return root


def _is_unbounded(quantifier: str | None) -> bool:
    if not quantifier:
        return False
    if quantifier[0] in "*+":
        return True
    m = _BRACE_QUANT.match(quantifier)
    return bool(m and m.group(2) and not m.group(3))


def _min_repeat(quantifier: str | None) -> int:
    if not quantifier:
        return 1
    if quantifier[0] in "*?":
        return 0
    if quantifier[0] == "+":
        return 1
    m = _BRACE_QUANT.match(quantifier)
    return int(m.group(1) or 0) if m else 1


def _walk_groups(node: _Node):
    for branch in node.branches:
        for child in branch:
            if child.kind == "group":
                yield child
                yield from _walk_groups(child)


def _contains_unbounded(node: _Node) -> bool:
    for branch in node.branches:
        for child in branch:
            if child.unbounded:
                return True
            if child.kind == "group" and _contains_unbounded(child):
                return True
    return False


def _ends_with_wildcard(node: _Node) -> bool:
    for branch in node.branches:
        if not branch:
            continue
        last = branch[-1]
        if last.kind == "dot" and last.unbounded:
            return True
        if last.kind == "group" and _ends_with_wildcard(last):
            return True
    return False


def _literal_char(node: _Node) -> str | None:
    if node.kind == "literal":
        return node.text
    if node.kind == "escape" and len(node.text) == 2 and node.text[1] not in _CLASS_ESCAPES:
        if node.text[1].isalnum():
            return None  # \n, \t, \1 and friends
        return node.text[1]
    return None


# ---------------------------------------------------------------------------
# Value object
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Trigger:
    """A compiled trigger regex with structural inspection helpers."""

    pattern: re.Pattern[str]

    @classmethod
    def coerce(cls, value: Any) -> Trigger:
        """Wrap a compiled regex; anything else is rejected with TriggerError."""
        if isinstance(value, Trigger):
            return value
        if isinstance(value, re.Pattern):
            if not isinstance(value.pattern, str):
                raise TriggerError("Byte-string triggers are not supported")
            return cls(value)
        raise TriggerError(
            f"Trigger must be a compiled regular expression, got {type(value).__name__}"
        )

    @property
    def source(self) -> str:
        return self.pattern.pattern

    @property
    def flags(self) -> int:
        return self.pattern.flags

    @property
    def ignore_case(self) -> bool:
        return bool(self.pattern.flags & re.IGNORECASE)

    def search(self, text: str) -> bool:
        return self.pattern.search(text) is not None

    @cached_property
    def _tree(self) -> _Node:
        return _parse(self.source)

    @cached_property
    def group_depth(self) -> int:
        """Maximum nesting depth of capturing groups."""

        def depth(node: _Node) -> int:
            best = 0
            for branch in node.branches:
                for child in branch:
                    if child.kind == "group":
                        best = max(best, depth(child) + (1 if child.capturing else 0))
            return best

        return depth(self._tree)

    @cached_property
    def dangerous_shapes(self) -> list[str]:
        """Names of the backtracking-prone shapes found in the trigger."""
        shapes: list[str] = []
        for group in _walk_groups(self._tree):
            if not group.unbounded:
                continue
            if _contains_unbounded(group) and "nested-quantifier" not in shapes:
                shapes.append("nested-quantifier")
            if len(group.branches) > 1:
                rendered = ["".join(n.render() for n in b) for b in group.branches]
                if self.ignore_case:
                    rendered = [r.lower() for r in rendered]
                if len(set(rendered)) < len(rendered) and "redundant-alternation" not in shapes:
                    shapes.append("redundant-alternation")

        sequences = list(self._tree.branches)
        for group in _walk_groups(self._tree):
            sequences.extend(group.branches)
        for sequence in sequences:
            for prev, nxt in zip(sequence, sequence[1:]):
                if not (nxt.kind == "dot" and nxt.unbounded):
                    continue
                if (prev.kind == "dot" and prev.unbounded) or (
                    prev.kind == "group" and _ends_with_wildcard(prev)
                ):
                    if "nested-wildcard" not in shapes:
                        shapes.append("nested-wildcard")
        return shapes

    @property
    def is_dangerous(self) -> bool:
        return bool(self.dangerous_shapes)

    @cached_property
    def literals(self) -> list[str]:
        """Runs of literal text every match must contain, in order."""
        runs: list[str] = []

        def collect(sequence: list[_Node]) -> None:
            current: list[str] = []
            for node in sequence:
                char = _literal_char(node)
                if char is not None and not node.optional:
                    current.append(char)
                    if node.quantifier:  # a+ still contributes one 'a', then breaks
                        runs.append("".join(current))
                        current = []
                    continue
                if current:
                    runs.append("".join(current))
                    current = []
                if (
                    node.kind == "group"
                    and len(node.branches) == 1
                    and not node.optional
                    and not node.text.startswith(("(?!", "(?<!"))
                ):
                    collect(node.branches[0])
            if current:
                runs.append("".join(current))

        if len(self._tree.branches) == 1:
            collect(self._tree.branches[0])
        return [r for r in runs if r]

    @cached_property
    def literal_weight(self) -> int:
        """Count of significant literal characters anywhere in the trigger."""

        def count(node: _Node) -> int:
            total = 0
            for branch in node.branches:
                for child in branch:
                    if child.kind == "group":
                        total += count(child)
                    elif (char := _literal_char(child)) is not None and not char.isspace():
                        total += 1
            return total

        return count(self._tree)

    @cached_property
    def has_structure(self) -> bool:
        """True when the trigger uses anchors, boundaries or character classes."""
        tokens = _tokenize(self.source)
        return any(
            t.kind in ("anchor", "class")
            or (t.kind == "escape" and len(t.text) == 2 and t.text[1] in _CLASS_ESCAPES)
            for t in tokens
        )

    @cached_property
    def matches_everything(self) -> bool:
        """Heuristic: no literal content and the empty string matches."""
        return self.literal_weight == 0 and self.search("")

    def probes(self, limit: int = 8) -> list[str]:
        """Representative strings the trigger matches, verified with search()."""
        candidates: list[str] = []
        for branch in self._tree.branches:
            candidates.append(_render_probe(branch, self.ignore_case))
        candidates.append("".join(self.literals))
        candidates.append(" ".join(self.literals))

        probes: list[str] = []
        for candidate in candidates:
            if len(probes) >= limit:
                break
            if candidate and candidate not in probes and self.search(candidate):
                probes.append(candidate)
        return probes


def _render_probe(sequence: list[_Node], ignore_case: bool) -> str:
    parts: list[str] = []
    for node in sequence:
        repeat = _min_repeat(node.quantifier)
        if repeat == 0:
            continue
        if node.kind == "group":
            piece = _render_probe(node.branches[0], ignore_case) if node.branches else ""
            if node.text.startswith(("(?=", "(?!", "(?<=", "(?<!")):
                piece = "" if node.text.startswith(("(?!", "(?<!")) else piece
        elif node.kind == "class":
            piece = _class_probe(node.text)
        elif node.kind == "dot":
            piece = "x"
        elif node.kind == "anchor":
            piece = ""
        elif node.kind == "escape":
            piece = _literal_char(node) or _ESCAPE_PROBES.get(node.text[1:], "")
        else:
            piece = node.text
        parts.append(piece * min(repeat, 3))
    return "".join(parts)


def _class_probe(text: str) -> str:
    body = text[1:-1]
    if body.startswith("^"):
        return "§"  # any char unlikely to be excluded
    if body.startswith("\\") and len(body) > 1:
        return _ESCAPE_PROBES.get(body[1], body[1])
    return body[:1]
