"""Token-based style rule checker."""

from style_scanner.models import (
    ConfigIssue,
    Finding,
    LintConfig,
    RuleSettings,
    RunResult,
    Severity,
    SourceUnit,
    Summary,
    Token,
    TokenKind,
    TokenStream,
)
from style_scanner.tokenizer import DEFAULT_LEXICON, Lexicon, tokenize
from style_scanner.scanners.patterns import (
    Balanced,
    MalformedRulePattern,
    NotFollowedBy,
    NotPrecededBy,
    TokenMatch,
    TokenPattern,
)
from style_scanner.scanners.rules import Rule
from style_scanner.ruleset import DuplicateRuleID, RuleEntry, RuleSet, UnknownRuleID
from style_scanner.aggregator import ResultCache, merge, merge_all, summarize
from style_scanner.scanners.engine import RunCancelled, lint_text, run
from style_scanner.scanners.builtin import builtin_rules, default_ruleset
from style_scanner.pipeline import BatchResult, lint_units

__all__ = [
    "Balanced",
    "BatchResult",
    "ConfigIssue",
    "DEFAULT_LEXICON",
    "DuplicateRuleID",
    "Finding",
    "Lexicon",
    "LintConfig",
    "MalformedRulePattern",
    "NotFollowedBy",
    "NotPrecededBy",
    "ResultCache",
    "Rule",
    "RuleEntry",
    "RuleSet",
    "RuleSettings",
    "RunCancelled",
    "RunResult",
    "Severity",
    "SourceUnit",
    "Summary",
    "Token",
    "TokenKind",
    "TokenMatch",
    "TokenPattern",
    "TokenStream",
    "UnknownRuleID",
    "builtin_rules",
    "default_ruleset",
    "lint_text",
    "lint_units",
    "merge",
    "merge_all",
    "run",
    "summarize",
    "tokenize",
]
