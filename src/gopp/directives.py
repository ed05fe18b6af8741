"""gopp Directive Parser

Turns the text of a directive comment (prefix already removed) into a typed
directive:

    ifdef  NAME          -- emit following tokens if NAME is defined
    ifndef NAME          -- emit following tokens if NAME is NOT defined
    else                 -- flip the current conditional state
    endif                -- stop suppressing
    define NAME VALUE... -- define a substitution, VALUE kept verbatim
    undef  NAME          -- remove a define

Parsing is pure: nothing here touches the macro table or the conditional
state. Anything that does not fit the vocabulary comes back as ``Malformed``.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple


DEFAULT_PREFIX = "//gopp:"

_WHITESPACE_RE = re.compile(r'\s+')


class Directive:
    """Base class for parsed directives."""
    pass


@dataclass(frozen=True)
class IfDef(Directive):
    name: str


@dataclass(frozen=True)
class IfNDef(Directive):
    name: str


@dataclass(frozen=True)
class Else(Directive):
    pass


@dataclass(frozen=True)
class EndIf(Directive):
    pass


@dataclass(frozen=True)
class Define(Directive):
    name: str
    value: str


@dataclass(frozen=True)
class Undef(Directive):
    name: str


@dataclass(frozen=True)
class Malformed(Directive):
    raw: str
    reason: str = "malformed directive"


# (name, signature, description), in the order they are documented
DIRECTIVES: List[Tuple[str, str, str]] = [
    ('ifdef',  'ifdef NAME',         'Emit the following tokens only if NAME is defined'),
    ('ifndef', 'ifndef NAME',        'Emit the following tokens only if NAME is NOT defined'),
    ('else',   'else',               'Flip the current conditional state'),
    ('endif',  'endif',              'Stop suppressing tokens'),
    ('define', 'define NAME VALUE',  'Replace every NAME token with VALUE (kept verbatim)'),
    ('undef',  'undef NAME',         'Remove a previously defined macro'),
]

DIRECTIVE_NAMES = frozenset(name for name, _, _ in DIRECTIVES)


def strip_prefix(comment: str, prefix: str = DEFAULT_PREFIX) -> Optional[str]:
    """Return the comment text after *prefix*, or None if it is not a directive."""
    if not comment.startswith(prefix):
        return None
    return comment[len(prefix):]


def _split_first(text: str) -> Tuple[str, str]:
    """Split *text* on its first whitespace run into (head, rest)."""
    parts = _WHITESPACE_RE.split(text, maxsplit=1)
    if len(parts) == 1:
        return parts[0], ''
    return parts[0], parts[1]


def _single_name(command: str, rest: str, text: str) -> Directive:
    args = rest.split()
    if len(args) != 1:
        return Malformed(text, f"'{command}' takes exactly one macro name")
    if command == 'ifdef':
        return IfDef(args[0])
    if command == 'ifndef':
        return IfNDef(args[0])
    return Undef(args[0])


def parse_directive(text: str) -> Directive:
    """Parse directive *text* (the comment with the prefix removed)."""
    text = text.rstrip()
    command, rest = _split_first(text)
    command = command.lower()

    if command in ('ifdef', 'ifndef', 'undef'):
        return _single_name(command, rest, text)

    if command == 'define':
        name, value = _split_first(rest)
        if not name or not value:
            return Malformed(text, "'define' needs a name and a value")
        return Define(name, value)

    # Trailing text after else/endif is ignored.
    if command == 'else':
        return Else()

    if command == 'endif':
        return EndIf()

    if not command:
        return Malformed(text, "missing directive name")
    return Malformed(text, f"unknown directive '{command}'")
