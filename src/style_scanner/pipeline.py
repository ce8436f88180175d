from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Iterable

from style_scanner.aggregator import ResultCache, merge_all, with_config_issues
from style_scanner.models import RuleSettings, RunResult, SourceUnit
from style_scanner.ruleset import RuleSet
from style_scanner.scanners.engine import RunCancelled, run
from style_scanner.tokenizer import DEFAULT_LEXICON, Lexicon, tokenize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchResult:
    results: tuple[RunResult, ...]
    merged: RunResult
    cancelled: tuple[str, ...] = ()

    @property
    def aborted(self) -> bool:
        return any(item.aborted for item in self.results)

    def to_dict(self) -> dict[str, Any]:
        return {
            "units": [item.to_dict() for item in self.results],
            "cancelled": list(self.cancelled),
            "config_issues": [item.to_dict() for item in self.merged.config_issues],
            "summary": self.merged.summary.to_dict(),
        }


def lint_units(
    units: Iterable[SourceUnit],
    ruleset: RuleSet,
    *,
    config: Iterable[RuleSettings] | None = None,
    lexicon: Lexicon = DEFAULT_LEXICON,
    max_workers: int | None = None,
    cancel_event: threading.Event | None = None,
    cache: ResultCache | None = None,
) -> BatchResult:
    selected = list(units)

    active = ruleset.copy()
    issues = active.configure(config) if config is not None else []
    should_cancel = cancel_event.is_set if cancel_event is not None else None

    def analyze(unit: SourceUnit) -> RunResult | None:
        if should_cancel is not None and should_cancel():
            logger.info("Skipping %s: batch cancelled", unit.name)
            return None

        key = None
        if cache is not None:
            key = ResultCache.key(unit.text, active, lexicon)
            cached = cache.get(key, unit.name)
            if cached is not None:
                logger.debug("Cache hit for %s", unit.name)
                return cached

        try:
            result = run(
                tokenize(unit.text, lexicon),
                active,
                source=unit.name,
                should_cancel=should_cancel,
            )
        except RunCancelled:
            logger.info("Discarding partial result for %s: batch cancelled", unit.name)
            return None

        if cache is not None and key is not None:
            cache.put(key, result)
        return result

    workers = _resolve_workers(max_workers, len(selected))
    if workers <= 1:
        outcomes = [analyze(unit) for unit in selected]
    else:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            outcomes = list(executor.map(analyze, selected))

    results: list[RunResult] = []
    cancelled: list[str] = []
    for unit, outcome in zip(selected, outcomes):
        if outcome is None:
            cancelled.append(unit.name)
        else:
            results.append(outcome)

    merged = with_config_issues(merge_all(results), issues)
    return BatchResult(results=tuple(results), merged=merged, cancelled=tuple(cancelled))


def _resolve_workers(max_workers: int | None, unit_count: int) -> int:
    if unit_count <= 1:
        return 1
    if max_workers is None:
        max_workers = os.cpu_count() or 4
    return max(1, min(max_workers, unit_count))
