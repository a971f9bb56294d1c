"""
Named-placeholder template parser.

Rewrites ``:name`` placeholders into the driver's positional marker and
records, per lower-cased name, the 1-based positions it occupies.
"""

from types import MappingProxyType
from typing import Mapping, NamedTuple


class ParsedTemplate(NamedTuple):
    sql: str
    indexes: Mapping[str, tuple[int, ...]]
    count: int


def _is_identifier_start(ch: str) -> bool:
    return ch.isidentifier()


def _is_identifier_part(ch: str) -> bool:
    return ("_" + ch).isidentifier()


def parse_template(template: str, placeholder: str = "?") -> ParsedTemplate:
    """
    Scan *template* once, left to right, tracking single/double quote state.

    - ``:name`` outside quotes becomes *placeholder*; ``name`` is lower-cased
      and gets the next position (positions count occurrences, not names).
    - Quoted text is copied verbatim; an unterminated quote runs to the end.
    - ``::`` (PostgreSQL cast) and a colon not followed by an identifier start
      are copied literally.
    - With the ``%s`` marker, literal ``%`` is doubled for format paramstyle drivers.
    """
    escape_percent = placeholder == "%s"
    length = len(template)
    out: list[str] = []
    indexes: dict[str, list[int]] = {}
    in_single = False
    in_double = False
    position = 0
    i = 0

    while i < length:
        ch = template[i]

        if ch == "%" and escape_percent:
            out.append("%%")
            i += 1
            continue

        if in_single:
            if ch == "'":
                in_single = False
        elif in_double:
            if ch == '"':
                in_double = False
        elif ch == "'":
            in_single = True
        elif ch == '"':
            in_double = True
        elif ch == ":" and i + 1 < length:
            nxt = template[i + 1]
            if nxt == ":":
                out.append("::")
                i += 2
                continue
            if _is_identifier_start(nxt):
                j = i + 2
                while j < length and _is_identifier_part(template[j]):
                    j += 1
                position += 1
                indexes.setdefault(template[i + 1 : j].lower(), []).append(position)
                out.append(placeholder)
                i = j
                continue

        out.append(ch)
        i += 1

    frozen = MappingProxyType({name: tuple(pos) for name, pos in indexes.items()})
    return ParsedTemplate("".join(out), frozen, position)
