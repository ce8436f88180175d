import threading

from style_scanner.aggregator import ResultCache
from style_scanner.models import RuleSettings, Severity, SourceUnit, TokenKind
from style_scanner.pipeline import lint_units
from style_scanner.ruleset import RuleSet
from style_scanner.scanners.builtin import default_ruleset
from style_scanner.scanners.engine import lint_text
from style_scanner.scanners.patterns import TokenMatch, TokenPattern
from style_scanner.scanners.rules import Rule


UNITS = [
    SourceUnit("a.m", "if (x) y();\n"),
    SourceUnit("b.m", "int m = 0xff;  \n"),
    SourceUnit("c.m", "\tfor (;;){\n}\n"),
    SourceUnit("d.m", ""),
    SourceUnit("e.m", "while(1) spin();\n"),
]


def test_parallel_matches_sequential():
    ruleset = default_ruleset()
    sequential = lint_units(UNITS, ruleset, max_workers=1)
    parallel = lint_units(UNITS, ruleset, max_workers=4)

    assert sequential == parallel
    assert [item.source for item in parallel.results] == [unit.name for unit in UNITS]
    assert parallel.cancelled == ()


def test_units_match_individual_runs():
    ruleset = default_ruleset()
    batch = lint_units(UNITS, ruleset, max_workers=3)

    for unit, result in zip(UNITS, batch.results):
        assert result == lint_text(unit.text, ruleset, source=unit.name)
    assert batch.merged.summary.total == sum(item.summary.total for item in batch.results)


def test_config_issues_are_reported_once():
    batch = lint_units(
        UNITS,
        default_ruleset(),
        config=[
            RuleSettings("nonexistent-rule", enabled=True),
            RuleSettings("require-braces", severity=Severity.ERROR),
        ],
        max_workers=2,
    )

    assert [item.rule_id for item in batch.merged.config_issues] == ["nonexistent-rule"]
    assert all(not item.config_issues for item in batch.results)
    assert batch.merged.has_errors


def test_cancel_before_start_skips_every_unit():
    event = threading.Event()
    event.set()

    batch = lint_units(UNITS, default_ruleset(), cancel_event=event, max_workers=2)

    assert batch.results == ()
    assert batch.cancelled == tuple(unit.name for unit in UNITS)
    assert batch.merged.findings == ()


def test_cancel_mid_unit_discards_that_unit():
    event = threading.Event()

    class StopRule(Rule):
        def evaluate(self, stream, index, severity):
            if stream[index].text == "stop":
                event.set()
            return []

    ruleset = RuleSet.from_rules(
        [
            StopRule(
                rule_id="stop",
                description="sets the cancel flag",
                default_severity=Severity.INFO,
                pattern=TokenPattern((TokenMatch(TokenKind.IDENTIFIER),)),
                message="stop",
            )
        ]
    )
    units = [
        SourceUnit("first.m", "a b"),
        SourceUnit("second.m", "x stop y"),
        SourceUnit("third.m", "z"),
    ]

    batch = lint_units(units, ruleset, cancel_event=event, max_workers=1)

    assert [item.source for item in batch.results] == ["first.m"]
    assert batch.cancelled == ("second.m", "third.m")


def test_cache_reuses_identical_units():
    cache = ResultCache()
    units = [SourceUnit("one.m", "if (x) y();"), SourceUnit("two.m", "if (x) y();")]

    batch = lint_units(units, default_ruleset(), max_workers=1, cache=cache)

    assert cache.hits == 1
    assert [item.source for item in batch.results] == ["one.m", "two.m"]
    assert batch.results[1].findings[0].source == "two.m"
    assert batch.merged.summary.total == 2


def test_batch_to_dict_shape():
    payload = lint_units(UNITS[:1], default_ruleset()).to_dict()

    assert set(payload) == {"units", "cancelled", "config_issues", "summary"}
    assert payload["units"][0]["findings"][0]["rule_id"] == "require-braces"
    assert payload["units"][0]["findings"][0]["severity"] == "warning"
