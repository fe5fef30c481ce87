"""Cucumber-style expression compiler.

Turns patterns such as ``I send a GET request to {string}`` into an
anchored regular expression plus the ordered kinds of its parameters.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any, Optional

PLACEHOLDER_RE = re.compile(r"\{(string|int|word)\}")


class ParamKind(str, Enum):
    """How a captured parameter is coerced."""
    STRING = "string"
    INT = "int"
    WORD = "word"


STRICT_STRING = r'"([^"]*)"'
LENIENT_STRING = r'(?:"([^"]*)"|(\S+))'
INT_GROUP = r"(\d+)"
WORD_GROUP = r"(\S+)"


def coerce(kind: ParamKind, value: str) -> Any:
    """Convert a captured substring to its parameter value."""
    if kind == ParamKind.INT:
        return int(value)
    if kind == ParamKind.STRING:
        if value.startswith('"'):
            value = value[1:]
        if value.endswith('"'):
            value = value[:-1]
        return value
    return value


@dataclass(frozen=True)
class CompiledPattern:
    """A step pattern compiled to a matcher."""
    pattern: str
    regex: re.Pattern
    param_kinds: tuple[ParamKind, ...]
    # capture group numbers backing each parameter, in parameter order
    groups: tuple[tuple[int, ...], ...]

    def match(self, text: str) -> Optional[list[Any]]:
        """Match step text, returning coerced parameters or None."""
        found = self.regex.fullmatch(text)
        if found is None:
            return None

        params = []
        for kind, group_numbers in zip(self.param_kinds, self.groups):
            value = next(
                found.group(n) for n in group_numbers if found.group(n) is not None
            )
            params.append(coerce(kind, value))
        return params


@lru_cache(maxsize=512)
def compile_pattern(pattern: str, lenient: bool = True) -> CompiledPattern:
    """Compile a step pattern.

    Args:
        pattern: Pattern with ``{string}``, ``{int}`` or ``{word}`` placeholders
        lenient: Let ``{string}`` also match a single unquoted token

    Returns:
        CompiledPattern matching the whole step text, case-sensitively
    """
    parts = PLACEHOLDER_RE.split(pattern)
    regex_parts: list[str] = []
    kinds: list[ParamKind] = []
    groups: list[tuple[int, ...]] = []
    next_group = 1

    # split() alternates literal text and placeholder names
    for index, part in enumerate(parts):
        if index % 2 == 0:
            regex_parts.append(re.escape(part))
            continue

        kind = ParamKind(part)
        kinds.append(kind)
        if kind == ParamKind.STRING and lenient:
            regex_parts.append(LENIENT_STRING)
            groups.append((next_group, next_group + 1))
            next_group += 2
        else:
            if kind == ParamKind.STRING:
                regex_parts.append(STRICT_STRING)
            elif kind == ParamKind.INT:
                regex_parts.append(INT_GROUP)
            else:
                regex_parts.append(WORD_GROUP)
            groups.append((next_group,))
            next_group += 1

    return CompiledPattern(
        pattern=pattern,
        regex=re.compile("^" + "".join(regex_parts) + "$"),
        param_kinds=tuple(kinds),
        groups=tuple(groups),
    )
