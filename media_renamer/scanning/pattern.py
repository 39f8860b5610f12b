"""
Shell-style glob patterns, compiled one path component at a time.

Supported syntax:
    ?        any single character
    *        any run of characters inside one component
    [abc]    one of the listed characters, ranges like [a-z] allowed
    [!abc]   any character except the listed ones
    **       zero or more directories (must be a whole component)

Wildcards match a leading dot, so hidden files are not special.
"""
import os
import re
from dataclasses import dataclass
from typing import List, Optional, Pattern, Tuple

from ..exceptions import InvalidPatternError


@dataclass(frozen=True)
class PatternComponent:
    text: str
    regex: Optional[Pattern]   # None for '**'
    literal: bool = False

    @property
    def recursive(self) -> bool:
        return self.regex is None

    def matches(self, name: str) -> bool:
        return self.regex is not None and self.regex.fullmatch(name) is not None


@dataclass(frozen=True)
class GlobPattern:
    source: str
    absolute: bool
    components: Tuple[PatternComponent, ...]
    case_insensitive: bool = False

    @classmethod
    def compile(cls, pattern: str, case_insensitive: bool = False) -> "GlobPattern":
        """
        Raises:
            InvalidPatternError: if the pattern is not syntactically valid.
        """
        normalized = pattern.replace(os.sep, '/') if os.sep != '/' else pattern
        flags = re.DOTALL | (re.IGNORECASE if case_insensitive else 0)

        components: List[PatternComponent] = []
        offset = 0
        for text in normalized.split('/'):
            if text:
                components.append(_compile_component(pattern, text, offset, flags))
            offset += len(text) + 1

        return cls(
            source=pattern,
            absolute=normalized.startswith('/'),
            components=tuple(components),
            case_insensitive=case_insensitive,
        )


def _compile_component(pattern: str, text: str, offset: int, flags: int) -> PatternComponent:
    if '**' in text:
        if text == '**':
            return PatternComponent(text=text, regex=None)
        raise InvalidPatternError(
            pattern, "recursive wildcards must form a single path component", offset + text.index('**')
        )

    parts = []
    literal = True
    i = 0
    while i < len(text):
        c = text[i]
        if c == '*':
            parts.append('.*')
            literal = False
        elif c == '?':
            parts.append('.')
            literal = False
        elif c == '[':
            regex, i = _compile_class(pattern, text, i, offset)
            parts.append(regex)
            literal = False
            continue
        else:
            parts.append(re.escape(c))
        i += 1

    return PatternComponent(text=text, regex=re.compile(''.join(parts), flags), literal=literal)


def _compile_class(pattern: str, text: str, start: int, offset: int) -> Tuple[str, int]:
    """Compiles the class opening at text[start]. Returns (regex, index after ']')."""
    i = start + 1
    negate = i < len(text) and text[i] == '!'
    if negate:
        i += 1

    items = []
    first = True
    while i < len(text):
        c = text[i]
        if c == ']' and not first:
            body = ''.join(items)
            return (f'[^{body}]' if negate else f'[{body}]'), i + 1

        if i + 2 < len(text) and text[i + 1] == '-' and text[i + 2] != ']':
            end = text[i + 2]
            if end < c:
                raise InvalidPatternError(pattern, f"invalid range '{c}-{end}'", offset + i)
            items.append(f'{re.escape(c)}-{re.escape(end)}')
            i += 3
        else:
            items.append(re.escape(c))
            i += 1
        first = False

    raise InvalidPatternError(pattern, "unterminated character class", offset + start)
