"""Read and write flat `key=value` properties documents.

Only the subset of the format that marker files and the catalog use is
supported: `#`/`!` comments, `=`/`:`/whitespace separators, backslash
escapes (including `\\uXXXX`) and trailing-backslash line continuations.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping


_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_SEPARATORS = "=: \t\f"
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


def _logical_lines(text: str) -> Iterable[str]:
    """Join continuation lines and drop comments and blank lines."""
    pending = ""
    for raw in text.splitlines():
        line = raw.lstrip() if pending else raw
        if not pending:
            stripped = line.lstrip()
            if not stripped or stripped[0] in "#!":
                continue
            line = stripped

        trailing = len(line) - len(line.rstrip("\\"))
        if trailing % 2 == 1:
            pending += line[:-1]
            continue
        yield pending + line
        pending = ""
    if pending:
        yield pending


def _unescape(value: str) -> str:
    out: list[str] = []
    i = 0
    while i < len(value):
        ch = value[i]
        if ch != "\\" or i + 1 >= len(value):
            out.append(ch)
            i += 1
            continue
        nxt = value[i + 1]
        if nxt == "u":
            digits = value[i + 2 : i + 6]
            if len(digits) != 4 or any(c not in _HEX_DIGITS for c in digits):
                raise ValueError("Malformed \\uxxxx encoding")
            out.append(chr(int(digits, 16)))
            i += 6
            continue
        out.append(_ESCAPES.get(nxt, nxt))
        i += 2
    return "".join(out)


def _split(line: str) -> tuple[str, str]:
    """Split a logical line at the first unescaped separator."""
    i = 0
    while i < len(line):
        ch = line[i]
        if ch == "\\":
            i += 2
            continue
        if ch in _SEPARATORS:
            break
        i += 1
    key = line[:i]
    rest = line[i:].lstrip(" \t\f")
    if rest[:1] in ("=", ":"):
        rest = rest[1:].lstrip(" \t\f")
    return key, rest


def loads(text: str) -> dict[str, str]:
    """Parse properties text into an ordered dict (last duplicate wins).

    Raises:
        ValueError: On a malformed `\\uXXXX` escape.
    """
    props: dict[str, str] = {}
    for line in _logical_lines(text):
        key, value = _split(line)
        props[_unescape(key)] = _unescape(value)
    return props


def _escape(value: str, *, is_key: bool) -> str:
    out: list[str] = []
    for idx, ch in enumerate(value):
        if ch == "\\":
            out.append("\\\\")
        elif ch in "=:#!":
            out.append("\\" + ch)
        elif ch == " " and (is_key or idx == 0):
            out.append("\\ ")
        elif ch in "\t\n\r\f":
            out.append("\\" + {"\t": "t", "\n": "n", "\r": "r", "\f": "f"}[ch])
        elif ord(ch) > 0x7E or ord(ch) < 0x20:
            out.append(f"\\u{ord(ch):04x}")
        else:
            out.append(ch)
    return "".join(out)


def dumps(props: Mapping[str, str], *, comments: Iterable[str] = ()) -> str:
    """Serialize properties with sorted keys and no timestamp header."""
    lines = [f"#{c}" for c in comments]
    for key in sorted(props):
        lines.append(f"{_escape(key, is_key=True)}={_escape(props[key], is_key=False)}")
    return "\n".join(lines) + "\n"
