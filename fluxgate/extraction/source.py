# fluxgate/extraction/source.py
"""
Pattern-based analysis of Python source text.

This is a best-effort approximation, not a parser. The source is first run
through the standard tokenizer so that comments and docstrings can be
blanked out (same length, newlines kept, so line numbers survive). The
regexes below then only ever see live code:

    code      comments and docstrings blanked; string literals intact
              (route paths live in string literals)
    skeleton  comments and every string literal blanked
              (export and import scanning must not see text inside strings)

Anything the tokenizer rejects raises SourceError so the caller can record a
per-file parse failure and move on.
"""

from __future__ import annotations

import io
import re
import tokenize
from dataclasses import dataclass
from typing import List, Optional, Set, Tuple

from fluxgate.contracts.models import HTTP_METHODS

_FSTRING_MIDDLE = getattr(tokenize, "FSTRING_MIDDLE", None)

_STATEMENT_START = {None, tokenize.NEWLINE, tokenize.INDENT, tokenize.DEDENT}


class SourceError(Exception):
    """Source text the tokenizer cannot handle."""

    pass


@dataclass(frozen=True)
class CleanSource:
    code: str
    skeleton: str

    def line_of(self, offset: int) -> int:
        return self.code.count("\n", 0, offset) + 1


# =============================================================================
# Cleaning
# =============================================================================


def clean_source(source: str) -> CleanSource:
    """Blank comments and docstrings (code), and additionally all strings (skeleton)."""
    lines = io.StringIO(source).readlines()
    starts = [0]
    for line in lines:
        starts.append(starts[-1] + len(line))

    code = list(source)
    skeleton = list(source)

    def blank(buf: List[str], start: Tuple[int, int], end: Tuple[int, int]) -> None:
        s = starts[start[0] - 1] + start[1]
        e = starts[end[0] - 1] + end[1]
        for i in range(s, e):
            if buf[i] not in "\r\n":
                buf[i] = " "

    prev: Optional[int] = None
    pending = None  # a string token that opened a statement

    try:
        for tok in tokenize.generate_tokens(io.StringIO(source).readline):
            if tok.type == tokenize.COMMENT:
                blank(code, tok.start, tok.end)
                blank(skeleton, tok.start, tok.end)
                continue
            if tok.type == tokenize.NL:
                continue

            if tok.type == tokenize.STRING or tok.type == _FSTRING_MIDDLE:
                blank(skeleton, tok.start, tok.end)

            if tok.type == tokenize.STRING and prev in _STATEMENT_START:
                pending = tok
            elif tok.type == tokenize.NEWLINE and pending is not None:
                # A bare string statement: docstring or commented-out block
                blank(code, pending.start, pending.end)
                pending = None
            else:
                pending = None

            prev = tok.type
    except (tokenize.TokenError, SyntaxError) as e:
        raise SourceError(f"{type(e).__name__}: {e}") from e

    return CleanSource(code="".join(code), skeleton="".join(skeleton))


# =============================================================================
# Exports
# =============================================================================

_EXPORT_RE = re.compile(
    r"^(?:async[ \t]+def|def|class)[ \t]+(?P<defname>[A-Za-z_]\w*)"
    r"|^type[ \t]+(?P<typename>[A-Za-z_]\w*)[ \t]*(?:\[[^\]\n]*\])?[ \t]*="
    r"|^(?P<varname>[A-Za-z_]\w*)[ \t]*(?::[^=\n]*)?=(?!=)"
    r"|^\(?[ \t]*(?P<targets>[A-Za-z_]\w*(?:[ \t]*,[ \t]*[A-Za-z_]\w*)+)"
    r"[ \t]*,?[ \t]*\)?[ \t]*=(?!=)",
    re.MULTILINE,
)

_ALL_RE = re.compile(
    r"^__all__[ \t]*(?::[^=\n]*)?\+?=[ \t]*(?P<body>\[[^\]]*\]|\([^)]*\))",
    re.MULTILINE,
)
_ALL_ASSIGN_RE = re.compile(r"^__all__[ \t]*(?::[^=\n]*)?\+?=", re.MULTILINE)
_QUOTED_NAME_RE = re.compile(r"""['"]([A-Za-z_]\w*)['"]""")

_KEYWORDS = {"if", "elif", "else", "for", "while", "with", "try", "except", "finally", "return", "import", "from"}


def find_exports(clean: CleanSource) -> List[Tuple[str, int]]:
    """
    Module-level public bindings as (name, line), first binding wins.

    Honours a literal `__all__`: when present, only listed names count.
    Tuple targets (`a, b = make()`) bind every name; starred and nested
    targets are not followed.
    """
    declared_all = parse_dunder_all(clean)

    seen: dict[str, int] = {}
    for m in _EXPORT_RE.finditer(clean.skeleton):
        if m.group("targets"):
            names = [n.strip() for n in m.group("targets").split(",")]
        else:
            names = [m.group("defname") or m.group("typename") or m.group("varname")]
        for name in names:
            if not name or name.startswith("_") or name in _KEYWORDS:
                continue
            if declared_all is not None and name not in declared_all:
                continue
            seen.setdefault(name, clean.line_of(m.start()))

    return sorted(seen.items(), key=lambda item: (item[1], item[0]))


def parse_dunder_all(clean: CleanSource) -> Optional[Set[str]]:
    """
    Names listed in a literal `__all__`, or None.

    Returns None when there is no `__all__`, or when any assignment to it is
    not a plain list/tuple literal (e.g. built from another module), since
    the export set can't be known without executing code.
    """
    assignments = list(_ALL_ASSIGN_RE.finditer(clean.code))
    if not assignments:
        return None

    literals = list(_ALL_RE.finditer(clean.code))
    if len(literals) != len(assignments):
        return None

    names: Set[str] = set()
    for m in literals:
        names.update(_QUOTED_NAME_RE.findall(m.group("body")))
    return names


# =============================================================================
# Routes
# =============================================================================

_METHODS_ALT = "|".join(sorted(m.lower() for m in HTTP_METHODS))

_ROUTE_CALL_RE = re.compile(
    r"\b(?P<recv>[A-Za-z_]\w*)[ \t]*\.[ \t]*(?P<method>(?i:" + _METHODS_ALT + r"))"
    r"\s*\(\s*[rRuU]?(?P<q>['\"])(?P<path>[^'\"\n]+)(?P=q)"
)


def find_route_calls(clean: CleanSource, receiver_keyword: str) -> List[Tuple[str, str, int]]:
    """
    `<router>.<method>("<path>", ...)` calls as (METHOD, path, line).

    The receiver's name must contain the keyword ("route" matches `routes`,
    `router`, `todo_routes`). Works for decorators and plain calls. Text
    inside string literals is never a call.
    """
    found = []
    for m in _ROUTE_CALL_RE.finditer(clean.code):
        if clean.skeleton[m.start()] != clean.code[m.start()]:
            continue
        if receiver_keyword not in m.group("recv").lower():
            continue
        found.append((m.group("method").upper(), m.group("path"), clean.line_of(m.start())))
    return found


# =============================================================================
# Imports
# =============================================================================

_IMPORT_RE = re.compile(r"^[ \t]*import[ \t]+(?P<mods>(?:[^\n;\\]|\\\n)+)", re.MULTILINE)
_FROM_RE = re.compile(
    r"^[ \t]*from[ \t]+(?P<mod>\.*[\w.]*)[ \t]+import[ \t]+"
    r"(?P<names>\([^)]*\)|(?:[^\n;\\]|\\\n)+)",
    re.MULTILINE,
)


def _split_names(text: str) -> List[str]:
    text = text.replace("\\\n", " ").strip().strip("()")
    out = []
    for part in text.split(","):
        part = part.strip()
        if not part:
            continue
        out.append(part.split()[0])
    return out


def find_imports(clean: CleanSource) -> List[Tuple[str, Tuple[str, ...], int]]:
    """
    Every import statement as (module, names, line), in source order.

        import a.b as c, d        -> ("a.b", (), n), ("d", (), n)
        from ..x import (y, z)    -> ("..x", ("y", "z"), n)
    """
    found = []
    for m in _IMPORT_RE.finditer(clean.skeleton):
        line = clean.line_of(m.start())
        for module in _split_names(m.group("mods")):
            found.append((module, (), line))

    for m in _FROM_RE.finditer(clean.skeleton):
        module = m.group("mod")
        if not module:
            continue
        found.append((module, tuple(_split_names(m.group("names"))), clean.line_of(m.start())))

    found.sort(key=lambda item: (item[2], item[0]))
    return found


__all__ = [
    "SourceError",
    "CleanSource",
    "clean_source",
    "find_exports",
    "parse_dunder_all",
    "find_route_calls",
    "find_imports",
]
