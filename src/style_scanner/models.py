from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Iterator

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    @classmethod
    def parse(cls, value: object) -> Severity:
        if isinstance(value, Severity):
            return value
        text = str(value).strip().lower()
        for member in cls:
            if member.value == text:
                return member
        raise ValueError(f"Unknown severity: {value!r}")


_SEVERITY_RANK = {Severity.INFO: 0, Severity.WARNING: 1, Severity.ERROR: 2}


class TokenKind(str, Enum):
    IDENTIFIER = "identifier"
    KEYWORD = "keyword"
    STRING_LITERAL = "string_literal"
    NUMBER_LITERAL = "number_literal"
    PUNCTUATION = "punctuation"
    COMMENT = "comment"
    WHITESPACE = "whitespace"
    NEWLINE = "newline"


TRIVIA_KINDS = frozenset({TokenKind.COMMENT, TokenKind.WHITESPACE, TokenKind.NEWLINE})


def advance_position(line: int, column: int, text: str) -> tuple[int, int]:
    """Return the (line, column) reached after consuming ``text``."""
    breaks = 0
    last_end = 0
    for match in _LINE_BREAK.finditer(text):
        breaks += 1
        last_end = match.end()
    if not breaks:
        return line, column + len(text)
    return line + breaks, len(text) - last_end + 1


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    offset: int
    line: int
    column: int

    @property
    def is_trivia(self) -> bool:
        return self.kind in TRIVIA_KINDS

    @property
    def end_offset(self) -> int:
        return self.offset + len(self.text)

    @property
    def end_line(self) -> int:
        return advance_position(self.line, self.column, self.text)[0]

    @property
    def end_column(self) -> int:
        return advance_position(self.line, self.column, self.text)[1]


@dataclass(frozen=True)
class TokenStream:
    tokens: tuple[Token, ...]
    text: str

    def __len__(self) -> int:
        return len(self.tokens)

    def __getitem__(self, index: int) -> Token:
        return self.tokens[index]

    def __iter__(self) -> Iterator[Token]:
        return iter(self.tokens)

    @property
    def end_position(self) -> tuple[int, int]:
        return advance_position(1, 1, self.text)

    def reconstruct(self) -> str:
        return "".join(token.text for token in self.tokens)

    def significant(self) -> Iterator[Token]:
        return (token for token in self.tokens if not token.is_trivia)

    def contains(self, finding: Finding) -> bool:
        start = (finding.line, finding.column)
        end = (finding.end_line, finding.end_column)
        return (1, 1) <= start <= end <= self.end_position


@dataclass(frozen=True)
class Finding:
    rule_id: str
    severity: Severity
    line: int
    column: int
    end_line: int
    end_column: int
    message: str
    fix: str | None = None
    source: str | None = None

    @property
    def sort_key(self) -> tuple[int, int, str, str]:
        return (self.line, self.column, self.rule_id, self.source or "")

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["severity"] = self.severity.value
        return payload


@dataclass(frozen=True)
class ConfigIssue:
    kind: str
    rule_id: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _zero_severity_counts() -> dict[str, int]:
    return {severity.value: 0 for severity in Severity}


@dataclass(frozen=True)
class Summary:
    total: int = 0
    counts_by_severity: dict[str, int] = field(default_factory=_zero_severity_counts)
    counts_by_rule: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "counts_by_severity": dict(self.counts_by_severity),
            "counts_by_rule": dict(self.counts_by_rule),
        }


@dataclass(frozen=True)
class RunResult:
    findings: tuple[Finding, ...] = ()
    config_issues: tuple[ConfigIssue, ...] = ()
    summary: Summary = field(default_factory=Summary)
    source: str | None = None
    aborted: bool = False
    error: str | None = None

    @property
    def has_errors(self) -> bool:
        return any(item.severity is Severity.ERROR for item in self.findings)

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "aborted": self.aborted,
            "error": self.error,
            "findings": [item.to_dict() for item in self.findings],
            "config_issues": [item.to_dict() for item in self.config_issues],
            "summary": self.summary.to_dict(),
        }


@dataclass(frozen=True)
class SourceUnit:
    name: str
    text: str


@dataclass(frozen=True)
class RuleSettings:
    rule_id: str
    enabled: bool | None = None
    severity: Severity | None = None


@dataclass(frozen=True)
class LintConfig:
    rules: tuple[RuleSettings, ...] = ()
    rules_path: str | None = None
    keywords: tuple[str, ...] | None = None
    max_workers: int | None = None
