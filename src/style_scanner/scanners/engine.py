from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Iterable

from style_scanner.aggregator import order_findings, summarize
from style_scanner.models import ConfigIssue, Finding, RuleSettings, RunResult, TokenStream
from style_scanner.ruleset import RuleEntry, RuleSet
from style_scanner.tokenizer import DEFAULT_LEXICON, Lexicon, tokenize

logger = logging.getLogger(__name__)


class RunCancelled(Exception):
    pass


class RuleDefect(RuntimeError):
    pass


def run(
    stream: TokenStream,
    ruleset: RuleSet,
    *,
    config: Iterable[RuleSettings] | None = None,
    source: str | None = None,
    should_cancel: Callable[[], bool] | None = None,
) -> RunResult:
    issues: list[ConfigIssue] = []
    if config is not None:
        ruleset = ruleset.copy()
        issues = ruleset.configure(config)

    entries = ruleset.snapshot()
    logger.debug("Running %d rules over %d tokens (source=%s)", len(entries), len(stream), source)

    findings: list[Finding] = []
    for index in range(len(stream)):
        if should_cancel is not None and should_cancel():
            raise RunCancelled(f"Run cancelled at token {index} (source={source})")

        try:
            findings.extend(_evaluate_position(stream, index, entries, source))
        except RuleDefect as exc:
            token = stream[index]
            error = f"{exc} (line {token.line}, column {token.column})"
            logger.exception("Aborting run for source=%s: %s", source, error)
            return _result(findings, issues, source, aborted=True, error=error)

    result = _result(findings, issues, source)
    logger.debug("Run finished for source=%s with %d findings", source, result.summary.total)
    return result


def lint_text(
    text: str,
    ruleset: RuleSet,
    *,
    lexicon: Lexicon = DEFAULT_LEXICON,
    config: Iterable[RuleSettings] | None = None,
    source: str | None = None,
) -> RunResult:
    return run(tokenize(text, lexicon), ruleset, config=config, source=source)


def _evaluate_position(
    stream: TokenStream,
    index: int,
    entries: tuple[RuleEntry, ...],
    source: str | None,
) -> list[Finding]:
    found: list[Finding] = []
    for entry in entries:
        rule = entry.rule
        if not rule.fits(stream, index):
            continue
        try:
            produced = rule.evaluate(stream, index, entry.severity)
        except Exception as exc:
            raise RuleDefect(f"Rule '{rule.rule_id}' raised {type(exc).__name__}: {exc}") from exc

        for item in produced:
            if item.rule_id != rule.rule_id:
                raise RuleDefect(f"Rule '{rule.rule_id}' produced a finding for '{item.rule_id}'")
            if not stream.contains(item):
                raise RuleDefect(f"Rule '{rule.rule_id}' produced a finding outside the source text")
            found.append(replace(item, source=source))
    return found


def _result(
    findings: list[Finding],
    issues: list[ConfigIssue],
    source: str | None,
    *,
    aborted: bool = False,
    error: str | None = None,
) -> RunResult:
    ordered = order_findings(findings)
    return RunResult(
        findings=ordered,
        config_issues=tuple(issues),
        summary=summarize(ordered),
        source=source,
        aborted=aborted,
        error=error,
    )
