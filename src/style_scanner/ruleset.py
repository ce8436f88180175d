from __future__ import annotations

import hashlib
from dataclasses import dataclass, replace
from typing import Iterable, Iterator

from style_scanner.models import ConfigIssue, RuleSettings, Severity
from style_scanner.scanners.rules import Rule


class DuplicateRuleID(ValueError):
    def __init__(self, rule_id: str) -> None:
        self.rule_id = rule_id
        super().__init__(f"Rule id already registered: {rule_id}")


class UnknownRuleID(ValueError):
    def __init__(self, rule_id: str) -> None:
        self.rule_id = rule_id
        super().__init__(f"Unknown rule id: {rule_id}")


@dataclass(frozen=True)
class RuleEntry:
    rule: Rule
    enabled: bool
    severity: Severity

    @property
    def rule_id(self) -> str:
        return self.rule.rule_id


class RuleSet:
    def __init__(self) -> None:
        self._entries: dict[str, RuleEntry] = {}

    @classmethod
    def from_rules(cls, rules: Iterable[Rule]) -> RuleSet:
        ruleset = cls()
        for rule in rules:
            ruleset.register(rule)
        return ruleset

    def register(self, rule: Rule) -> None:
        rule.validate()
        if rule.rule_id in self._entries:
            raise DuplicateRuleID(rule.rule_id)
        self._entries[rule.rule_id] = RuleEntry(
            rule=rule,
            enabled=rule.enabled_by_default,
            severity=rule.default_severity,
        )

    def get(self, rule_id: str) -> RuleEntry:
        try:
            return self._entries[rule_id]
        except KeyError:
            raise UnknownRuleID(rule_id) from None

    def set_enabled(self, rule_id: str, enabled: bool) -> None:
        entry = self.get(rule_id)
        self._entries[rule_id] = replace(entry, enabled=bool(enabled))

    def set_severity(self, rule_id: str, severity: Severity | str) -> None:
        entry = self.get(rule_id)
        self._entries[rule_id] = replace(entry, severity=Severity.parse(severity))

    def configure(self, settings: Iterable[RuleSettings]) -> list[ConfigIssue]:
        issues: list[ConfigIssue] = []
        for item in settings:
            try:
                if item.enabled is not None:
                    self.set_enabled(item.rule_id, item.enabled)
                if item.severity is not None:
                    self.set_severity(item.rule_id, item.severity)
                else:
                    self.get(item.rule_id)
            except UnknownRuleID as exc:
                issues.append(
                    ConfigIssue(kind="UnknownRuleID", rule_id=exc.rule_id, message=str(exc))
                )
        return issues

    def copy(self) -> RuleSet:
        clone = RuleSet()
        clone._entries = dict(self._entries)
        return clone

    def snapshot(self) -> tuple[RuleEntry, ...]:
        return tuple(entry for entry in self if entry.enabled)

    def rule_ids(self) -> list[str]:
        return sorted(self._entries)

    def fingerprint(self) -> str:
        digest = hashlib.sha256()
        for entry in self:
            digest.update(repr((entry.rule, entry.enabled, entry.severity.value)).encode("utf-8"))
        return digest.hexdigest()

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[RuleEntry]:
        for rule_id in sorted(self._entries):
            yield self._entries[rule_id]
