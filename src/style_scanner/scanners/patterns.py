"""Declarative token patterns.

A pattern is an ordered tuple of elements. Consuming elements (``TokenMatch``,
``Balanced``) advance through the stream; ``NotFollowedBy`` and
``NotPrecededBy`` are zero-width assertions. The first consuming element is
the anchor and must match the token at the evaluated position exactly.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Union

from style_scanner.models import TRIVIA_KINDS, Token, TokenKind, TokenStream


class MalformedRulePattern(ValueError):
    pass


@dataclass(frozen=True)
class TokenMatch:
    kind: TokenKind | tuple[TokenKind, ...] | None = None
    text: str | tuple[str, ...] | None = None
    regex: str | None = None
    invert: bool = False

    @property
    def kinds(self) -> frozenset[TokenKind] | None:
        if self.kind is None:
            return None
        if isinstance(self.kind, str):
            return frozenset({self.kind})
        return frozenset(self.kind)

    def validate(self) -> None:
        kinds = self.kinds
        if kinds is not None and not kinds:
            raise MalformedRulePattern("TokenMatch kind tuple must not be empty")
        if kinds is not None and not all(isinstance(item, TokenKind) for item in kinds):
            raise MalformedRulePattern(f"TokenMatch kind must be TokenKind members, got {self.kind!r}")
        if isinstance(self.text, tuple) and not self.text:
            raise MalformedRulePattern("TokenMatch text alternatives must not be empty")
        if self.invert and self.text is None and self.regex is None:
            raise MalformedRulePattern("TokenMatch invert requires text or regex")
        if self.regex is not None:
            try:
                _compile(self.regex)
            except re.error as exc:
                raise MalformedRulePattern(f"Invalid regex {self.regex!r}: {exc}") from exc

    def matches(self, token: Token) -> bool:
        kinds = self.kinds
        if kinds is not None and token.kind not in kinds:
            return False
        if self.text is None and self.regex is None:
            return True

        satisfied = True
        if self.text is not None:
            options = (self.text,) if isinstance(self.text, str) else self.text
            satisfied = token.text in options
        if satisfied and self.regex is not None:
            satisfied = _compile(self.regex).fullmatch(token.text) is not None
        return satisfied != self.invert


@dataclass(frozen=True)
class Balanced:
    open: str = "("
    close: str = ")"

    def validate(self) -> None:
        if len(self.open) != 1 or len(self.close) != 1 or self.open == self.close:
            raise MalformedRulePattern(
                f"Balanced delimiters must be two distinct characters, got {self.open!r}/{self.close!r}"
            )


@dataclass(frozen=True)
class NotFollowedBy:
    matcher: TokenMatch


@dataclass(frozen=True)
class NotPrecededBy:
    matcher: TokenMatch


Element = Union[TokenMatch, Balanced, NotFollowedBy, NotPrecededBy]


@dataclass(frozen=True)
class TokenPattern:
    elements: tuple[Element, ...]
    skip_trivia: bool = True

    @property
    def min_length(self) -> int:
        total = 0
        for element in self.elements:
            if isinstance(element, TokenMatch):
                total += 1
            elif isinstance(element, Balanced):
                total += 2
        return total

    @property
    def lookback(self) -> int:
        return sum(1 for element in self.elements if isinstance(element, NotPrecededBy))

    def validate(self) -> None:
        if not self.elements:
            raise MalformedRulePattern("Pattern has no elements")
        if self.min_length == 0:
            raise MalformedRulePattern("Pattern has no consuming element")

        seen_consuming = False
        for element in self.elements:
            if isinstance(element, NotPrecededBy):
                if seen_consuming:
                    raise MalformedRulePattern("NotPrecededBy must come before the first consuming element")
                element.matcher.validate()
            elif isinstance(element, NotFollowedBy):
                element.matcher.validate()
            elif isinstance(element, TokenMatch):
                element.validate()
                kinds = element.kinds
                if seen_consuming and self.skip_trivia and kinds is not None and kinds <= TRIVIA_KINDS:
                    raise MalformedRulePattern("Pattern skips trivia but an element only matches trivia")
                seen_consuming = True
            elif isinstance(element, Balanced):
                element.validate()
                seen_consuming = True
            else:
                raise MalformedRulePattern(f"Unsupported pattern element: {element!r}")

    def match(self, stream: TokenStream, index: int) -> tuple[int, int] | None:
        """Match the pattern anchored at ``index``.

        Returns the inclusive (first, last) token indices of the consumed span,
        or None when the pattern does not match there.
        """
        cursor = index
        last: int | None = None
        anchored = False

        for element in self.elements:
            if isinstance(element, NotPrecededBy):
                previous = self._previous(stream, index - 1)
                if previous is not None and element.matcher.matches(stream[previous]):
                    return None
                continue

            if anchored:
                cursor = self._next(stream, cursor)

            if isinstance(element, NotFollowedBy):
                if cursor < len(stream) and element.matcher.matches(stream[cursor]):
                    return None
                continue

            if cursor >= len(stream):
                return None

            if isinstance(element, TokenMatch):
                if not element.matches(stream[cursor]):
                    return None
                last = cursor
            else:
                closing = _balanced_end(stream, cursor, element)
                if closing is None:
                    return None
                last = closing

            cursor = last + 1
            anchored = True

        if last is None:
            return None
        return index, last

    def _next(self, stream: TokenStream, cursor: int) -> int:
        if not self.skip_trivia:
            return cursor
        while cursor < len(stream) and stream[cursor].is_trivia:
            cursor += 1
        return cursor

    def _previous(self, stream: TokenStream, cursor: int) -> int | None:
        while cursor >= 0:
            if not (self.skip_trivia and stream[cursor].is_trivia):
                return cursor
            cursor -= 1
        return None


def _balanced_end(stream: TokenStream, start: int, group: Balanced) -> int | None:
    first = stream[start]
    if first.kind is not TokenKind.PUNCTUATION or first.text != group.open:
        return None

    depth = 0
    for position in range(start, len(stream)):
        token = stream[position]
        if token.kind is not TokenKind.PUNCTUATION:
            continue
        if token.text == group.open:
            depth += 1
        elif token.text == group.close:
            depth -= 1
            if depth == 0:
                return position
    return None


@lru_cache(maxsize=256)
def _compile(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern)
