from __future__ import annotations

import hashlib
import threading
from collections import Counter
from dataclasses import replace
from typing import Iterable

from style_scanner.models import ConfigIssue, Finding, RunResult, Severity, Summary
from style_scanner.ruleset import RuleSet
from style_scanner.tokenizer import Lexicon


def summarize(source: RunResult | Iterable[Finding]) -> Summary:
    findings = source.findings if isinstance(source, RunResult) else tuple(source)

    by_severity = {severity.value: 0 for severity in Severity}
    by_rule: Counter[str] = Counter()
    for item in findings:
        by_severity[item.severity.value] += 1
        by_rule[item.rule_id] += 1

    return Summary(
        total=len(findings),
        counts_by_severity=by_severity,
        counts_by_rule={rule_id: by_rule[rule_id] for rule_id in sorted(by_rule)},
    )


def order_findings(findings: Iterable[Finding]) -> tuple[Finding, ...]:
    # Keep the first occurrence of every (source, rule, line, column) key.
    deduped: dict[tuple, Finding] = {}
    for item in findings:
        key = (item.source, item.rule_id, item.line, item.column)
        deduped.setdefault(key, item)
    return tuple(sorted(deduped.values(), key=lambda item: item.sort_key))


def merge(first: RunResult, second: RunResult) -> RunResult:
    findings = order_findings(first.findings + second.findings)
    issues = tuple(dict.fromkeys(first.config_issues + second.config_issues))
    errors = [text for text in (first.error, second.error) if text]

    return RunResult(
        findings=findings,
        config_issues=issues,
        summary=summarize(findings),
        source=first.source if first.source == second.source else None,
        aborted=first.aborted or second.aborted,
        error="; ".join(errors) or None,
    )


def merge_all(results: Iterable[RunResult]) -> RunResult:
    merged: RunResult | None = None
    for result in results:
        merged = result if merged is None else merge(merged, result)
    if merged is None:
        return RunResult()
    return merged


def with_config_issues(result: RunResult, issues: Iterable[ConfigIssue]) -> RunResult:
    combined = tuple(dict.fromkeys(tuple(issues) + result.config_issues))
    return replace(result, config_issues=combined)


def group_by_source(result: RunResult) -> dict[str | None, tuple[Finding, ...]]:
    groups: dict[str | None, list[Finding]] = {}
    for item in result.findings:
        groups.setdefault(item.source, []).append(item)
    return {source: tuple(items) for source, items in groups.items()}


def group_by_severity(result: RunResult) -> dict[Severity, tuple[Finding, ...]]:
    groups: dict[Severity, tuple[Finding, ...]] = {}
    for severity in sorted(Severity, key=lambda member: member.rank, reverse=True):
        groups[severity] = tuple(item for item in result.findings if item.severity is severity)
    return groups


class ResultCache:
    """Run results keyed by content hash, rule-set fingerprint and lexicon."""

    def __init__(self) -> None:
        self._results: dict[str, RunResult] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    @staticmethod
    def key(text: str, ruleset: RuleSet, lexicon: Lexicon) -> str:
        digest = hashlib.sha256()
        digest.update(ruleset.fingerprint().encode("utf-8"))
        digest.update(repr((sorted(lexicon.keywords), lexicon.line_comments, lexicon.block_comments)).encode("utf-8"))
        digest.update(text.encode("utf-8", errors="surrogatepass"))
        return digest.hexdigest()

    def get(self, key: str, source: str | None = None) -> RunResult | None:
        with self._lock:
            cached = self._results.get(key)
            if cached is None:
                self.misses += 1
                return None
            self.hits += 1
        return relabel(cached, source)

    def put(self, key: str, result: RunResult) -> None:
        if result.aborted:
            return
        with self._lock:
            self._results[key] = result

    def __len__(self) -> int:
        with self._lock:
            return len(self._results)


def relabel(result: RunResult, source: str | None) -> RunResult:
    if result.source == source:
        return result
    findings = tuple(replace(item, source=source) for item in result.findings)
    return replace(result, findings=findings, source=source)
