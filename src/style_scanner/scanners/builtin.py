from __future__ import annotations

from style_scanner.models import Severity, TokenKind
from style_scanner.ruleset import RuleSet
from style_scanner.scanners.patterns import (
    Balanced,
    NotFollowedBy,
    NotPrecededBy,
    TokenMatch,
    TokenPattern,
)
from style_scanner.scanners.rules import Rule

CONTROL_KEYWORDS = ("if", "for", "while", "switch", "catch")
OWNERSHIP_QUALIFIERS = r"__(weak|strong|unsafe_unretained|autoreleasing)"
TYPEOF_OPERATORS = ("typeof", "__typeof", "__typeof__")
TYPE_PREFIX = r"[A-Z]{2,3}[A-Z][A-Za-z0-9]*"

_NOT_NEWLINE = tuple(kind for kind in TokenKind if kind is not TokenKind.NEWLINE)

BUILTIN_RULES = (
    Rule(
        rule_id="require-braces",
        description="Conditional and loop bodies must be wrapped in braces",
        default_severity=Severity.WARNING,
        pattern=TokenPattern(
            (
                NotPrecededBy(TokenMatch(TokenKind.PUNCTUATION, "#")),
                TokenMatch(TokenKind.KEYWORD, ("if", "for", "while")),
                Balanced("(", ")"),
                NotFollowedBy(TokenMatch(TokenKind.PUNCTUATION, ("{", ";"))),
            )
        ),
        message="'{text}' body is not wrapped in braces",
        fix="Wrap the '{text}' body in { ... }",
    ),
    Rule(
        rule_id="trailing-whitespace",
        description="Lines must not end with whitespace",
        default_severity=Severity.INFO,
        pattern=TokenPattern(
            (
                TokenMatch(TokenKind.WHITESPACE),
                NotFollowedBy(TokenMatch(_NOT_NEWLINE)),
            ),
            skip_trivia=False,
        ),
        message="Trailing whitespace",
        fix="Remove the trailing whitespace",
    ),
    Rule(
        rule_id="no-tabs",
        description="Indent with spaces, never tabs",
        default_severity=Severity.WARNING,
        pattern=TokenPattern((TokenMatch(TokenKind.WHITESPACE, regex=r"[^\t]*\t.*"),), skip_trivia=False),
        message="Tab character in whitespace",
        fix="Replace tabs with spaces",
    ),
    Rule(
        rule_id="keyword-space",
        description="Control keywords are separated from their parenthesis by one space",
        default_severity=Severity.WARNING,
        pattern=TokenPattern(
            (
                NotPrecededBy(TokenMatch(TokenKind.PUNCTUATION, "#")),
                TokenMatch(TokenKind.KEYWORD, CONTROL_KEYWORDS),
                TokenMatch(TokenKind.PUNCTUATION, "("),
            ),
            skip_trivia=False,
        ),
        message="Missing space between '{text}' and '('",
        fix="{text} (",
    ),
    Rule(
        rule_id="brace-space",
        description="An opening brace after ')' is preceded by a space",
        default_severity=Severity.INFO,
        pattern=TokenPattern(
            (
                TokenMatch(TokenKind.PUNCTUATION, ")"),
                TokenMatch(TokenKind.PUNCTUATION, "{"),
            ),
            skip_trivia=False,
        ),
        message="Missing space before '{'",
        fix=") {",
    ),
    Rule(
        rule_id="comment-space",
        description="Line comments start with a space after the marker",
        default_severity=Severity.INFO,
        pattern=TokenPattern((TokenMatch(TokenKind.COMMENT, regex=r"//[^\s/].*"),), skip_trivia=False),
        message="Missing space after '//'",
    ),
    Rule(
        rule_id="hex-uppercase",
        description="Hexadecimal literals use uppercase digits",
        default_severity=Severity.INFO,
        pattern=TokenPattern(
            (TokenMatch(TokenKind.NUMBER_LITERAL, regex=r"0[xX][0-9A-Fa-f]*[a-f][0-9A-Fa-f]*[A-Za-z0-9_]*"),)
        ),
        message="Hexadecimal literal '{text}' has lowercase digits",
    ),
    Rule(
        rule_id="qualifier-placement",
        description="Ownership qualifiers are written after the '*' of the pointer type",
        default_severity=Severity.WARNING,
        pattern=TokenPattern(
            (
                NotPrecededBy(TokenMatch(TokenKind.PUNCTUATION, "*")),
                TokenMatch(TokenKind.IDENTIFIER, regex=OWNERSHIP_QUALIFIERS),
                NotFollowedBy(TokenMatch(TokenKind.IDENTIFIER, TYPEOF_OPERATORS)),
            )
        ),
        message="Place '{text}' after the '*' of the pointer type",
        fix="Type * {text} name",
    ),
    Rule(
        rule_id="naming-prefix",
        description="Type names carry the project's two or three letter uppercase prefix",
        default_severity=Severity.WARNING,
        pattern=TokenPattern(
            (
                TokenMatch(TokenKind.KEYWORD, ("class", "struct", "interface", "enum", "protocol")),
                TokenMatch(TokenKind.IDENTIFIER, regex=TYPE_PREFIX, invert=True),
            )
        ),
        message="Type name is missing the project prefix",
        enabled_by_default=False,
    ),
)


def builtin_rules() -> list[Rule]:
    return list(BUILTIN_RULES)


def default_ruleset() -> RuleSet:
    return RuleSet.from_rules(BUILTIN_RULES)
