from __future__ import annotations

from dataclasses import dataclass

from style_scanner.models import Finding, Severity, TokenStream
from style_scanner.scanners.patterns import MalformedRulePattern, TokenPattern


@dataclass(frozen=True)
class Rule:
    rule_id: str
    description: str
    default_severity: Severity
    pattern: TokenPattern
    message: str
    fix: str | None = None
    window: int | None = None
    enabled_by_default: bool = True

    @property
    def effective_window(self) -> int:
        if self.window is not None:
            return self.window
        return self.pattern.min_length

    def validate(self) -> None:
        if not self.rule_id or not self.rule_id.strip():
            raise MalformedRulePattern("Rule id must be a non-empty string")
        try:
            self.pattern.validate()
        except MalformedRulePattern as exc:
            raise MalformedRulePattern(f"Rule '{self.rule_id}': {exc}") from exc
        if self.effective_window < 1:
            raise MalformedRulePattern(f"Rule '{self.rule_id}': window must be at least 1")
        if self.window is not None and self.window < self.pattern.min_length:
            raise MalformedRulePattern(
                f"Rule '{self.rule_id}': window {self.window} is smaller than "
                f"pattern length {self.pattern.min_length}"
            )

    def fits(self, stream: TokenStream, index: int) -> bool:
        return index + self.effective_window <= len(stream)

    def evaluate(self, stream: TokenStream, index: int, severity: Severity) -> list[Finding]:
        span = self.pattern.match(stream, index)
        if span is None:
            return []

        first, last = span
        anchor = stream[first]
        closing = stream[last]
        return [
            Finding(
                rule_id=self.rule_id,
                severity=severity,
                line=anchor.line,
                column=anchor.column,
                end_line=closing.end_line,
                end_column=closing.end_column,
                message=_render(self.message, anchor.text),
                fix=_render(self.fix, anchor.text) if self.fix is not None else None,
            )
        ]


def _render(template: str, text: str) -> str:
    return template.replace("{text}", text)
