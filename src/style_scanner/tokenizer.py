"""Language-agnostic tokenizer.

Splits raw text into classified tokens without any grammar knowledge. Every
character of the input ends up in exactly one token, so joining the token
texts reproduces the input. Whitespace, newlines and comments are kept as
tokens because spacing and comment rules need to see them.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import Iterable

from style_scanner.models import Token, TokenKind, TokenStream, advance_position

DEFAULT_KEYWORDS = frozenset(
    {
        "auto", "break", "case", "catch", "char", "class", "const", "continue",
        "default", "delete", "do", "double", "else", "end", "enum", "extern",
        "false", "finally", "float", "for", "goto", "if", "implementation",
        "inline", "int", "interface", "long", "namespace", "new", "nil",
        "private", "property", "protected", "protocol", "public", "register",
        "restrict", "return", "short", "signed", "sizeof", "static", "struct",
        "super", "switch", "synthesize", "this", "throw", "true", "try",
        "typedef", "union", "unsigned", "void", "volatile", "while",
    }
)

_NUMBER = re.compile(
    r"0[xX][0-9a-fA-F]+[A-Za-z0-9_]*"
    r"|(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?[A-Za-z0-9_]*"
)
_IDENTIFIER = re.compile(r"(?:[^\W\d]|\$)(?:\w|\$)*")
_LINE_END_CHARS = "\r\n"


@dataclass(frozen=True)
class Lexicon:
    keywords: frozenset[str] = field(default=DEFAULT_KEYWORDS)
    line_comments: tuple[str, ...] = ("//",)
    block_comments: tuple[tuple[str, str], ...] = (("/*", "*/"),)

    def __post_init__(self) -> None:
        if any(not marker for marker in self.line_comments):
            raise ValueError("Line comment markers must be non-empty")
        if any(not opener or not closer for opener, closer in self.block_comments):
            raise ValueError("Block comment delimiters must be non-empty")

    def with_keywords(self, keywords: Iterable[str]) -> Lexicon:
        return replace(self, keywords=frozenset(keywords))


DEFAULT_LEXICON = Lexicon()


def tokenize(text: str, lexicon: Lexicon = DEFAULT_LEXICON) -> TokenStream:
    tokens: list[Token] = []
    pos = 0
    line = 1
    column = 1
    length = len(text)

    while pos < length:
        kind, end = _classify(text, pos, lexicon)
        raw = text[pos:end]
        tokens.append(Token(kind=kind, text=raw, offset=pos, line=line, column=column))
        line, column = advance_position(line, column, raw)
        pos = end

    return TokenStream(tokens=tuple(tokens), text=text)


def _classify(text: str, pos: int, lexicon: Lexicon) -> tuple[TokenKind, int]:
    ch = text[pos]

    if ch in "\"'":
        return TokenKind.STRING_LITERAL, _scan_string(text, pos)

    number = _NUMBER.match(text, pos)
    if number:
        return TokenKind.NUMBER_LITERAL, number.end()

    comment_end = _scan_comment(text, pos, lexicon)
    if comment_end is not None:
        return TokenKind.COMMENT, comment_end

    word = _IDENTIFIER.match(text, pos)
    if word:
        if word.group() in lexicon.keywords:
            return TokenKind.KEYWORD, word.end()
        return TokenKind.IDENTIFIER, word.end()

    if ch == "\r":
        if text.startswith("\r\n", pos):
            return TokenKind.NEWLINE, pos + 2
        return TokenKind.NEWLINE, pos + 1
    if ch == "\n":
        return TokenKind.NEWLINE, pos + 1

    if ch.isspace():
        end = pos + 1
        while end < len(text) and text[end].isspace() and text[end] not in _LINE_END_CHARS:
            end += 1
        return TokenKind.WHITESPACE, end

    return TokenKind.PUNCTUATION, pos + 1


def _scan_string(text: str, pos: int) -> int:
    quote = text[pos]
    end = pos + 1
    length = len(text)
    while end < length:
        ch = text[end]
        if ch in _LINE_END_CHARS:
            return end
        if ch == "\\":
            if end + 1 < length and text[end + 1] not in _LINE_END_CHARS:
                end += 2
                continue
            return end + 1
        end += 1
        if ch == quote:
            return end
    return end


def _scan_comment(text: str, pos: int, lexicon: Lexicon) -> int | None:
    for opener, closer in lexicon.block_comments:
        if text.startswith(opener, pos):
            close_at = text.find(closer, pos + len(opener))
            if close_at == -1:
                return len(text)
            return close_at + len(closer)

    for marker in lexicon.line_comments:
        if text.startswith(marker, pos):
            end = pos + len(marker)
            while end < len(text) and text[end] not in _LINE_END_CHARS:
                end += 1
            return end

    return None
