from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Iterator

from style_scanner.config import ConfigError, load_config, load_rules, resolve_log_level
from style_scanner.models import LintConfig, SourceUnit
from style_scanner.pipeline import lint_units
from style_scanner.ruleset import DuplicateRuleID, RuleSet
from style_scanner.scanners.builtin import builtin_rules
from style_scanner.scanners.patterns import MalformedRulePattern
from style_scanner.tokenizer import DEFAULT_LEXICON

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = (".c", ".cc", ".cpp", ".h", ".hpp", ".m", ".mm", ".java", ".js", ".ts")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="style-scanner",
        description="Token-based style rule checker",
    )
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING (default) or ERROR")
    subparsers = parser.add_subparsers(dest="command", required=True)

    check_parser = subparsers.add_parser("check", help="Check files against the style rules")
    check_parser.add_argument("paths", nargs="+", help="Files or directories to check")
    check_parser.add_argument("--config", default=None, help="Config JSON path")
    check_parser.add_argument("--rules", default=None, help="Custom rules JSON path")
    check_parser.add_argument("--workers", type=int, default=None)
    check_parser.add_argument(
        "--extensions",
        default=",".join(DEFAULT_EXTENSIONS),
        help="Comma-separated extensions to check inside directories",
    )

    rules_parser = subparsers.add_parser("rules", help="List registered rules")
    rules_parser.add_argument("--config", default=None, help="Config JSON path")
    rules_parser.add_argument("--rules", default=None, help="Custom rules JSON path")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        level = resolve_log_level(args.log_level)
    except ConfigError as exc:
        parser.error(str(exc))
        return 2
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config) if args.config else LintConfig()
        ruleset = _build_ruleset(args.rules or config.rules_path)
    except (ConfigError, MalformedRulePattern, DuplicateRuleID) as exc:
        parser.error(str(exc))
        return 2

    if args.command == "check":
        lexicon = DEFAULT_LEXICON
        if config.keywords is not None:
            lexicon = DEFAULT_LEXICON.with_keywords(config.keywords)

        extensions = {item.strip().lower() for item in args.extensions.split(",") if item.strip()}
        units = list(_collect_units(args.paths, extensions))
        batch = lint_units(
            units,
            ruleset,
            config=config.rules,
            lexicon=lexicon,
            max_workers=args.workers or config.max_workers,
        )
        print(json.dumps(batch.to_dict(), indent=2, ensure_ascii=True))
        if batch.merged.has_errors or batch.aborted:
            return 1
        return 0

    if args.command == "rules":
        active = ruleset.copy()
        issues = active.configure(config.rules)
        payload = {
            "rules": [
                {
                    "id": entry.rule_id,
                    "description": entry.rule.description,
                    "enabled": entry.enabled,
                    "severity": entry.severity.value,
                    "window": entry.rule.effective_window,
                }
                for entry in active
            ],
            "config_issues": [item.to_dict() for item in issues],
        }
        print(json.dumps(payload, indent=2, ensure_ascii=True))
        return 0

    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_ruleset(rules_path: str | None) -> RuleSet:
    rules = builtin_rules()
    if rules_path:
        rules.extend(load_rules(rules_path))
    return RuleSet.from_rules(rules)


def _collect_units(paths: list[str], extensions: set[str]) -> Iterator[SourceUnit]:
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            candidates = sorted(
                item
                for item in path.rglob("*")
                if item.is_file()
                and item.suffix.lower() in extensions
                and ".git" not in item.relative_to(path).parts
            )
        elif path.is_file():
            candidates = [path]
        else:
            logger.warning("Skipping missing path: %s", path)
            continue

        for file_path in candidates:
            try:
                text = file_path.read_bytes().decode("utf-8")
            except (UnicodeDecodeError, OSError) as exc:
                logger.warning("Skipping unreadable file %s: %s", file_path, exc)
                continue
            yield SourceUnit(name=str(file_path), text=text)


if __name__ == "__main__":
    raise SystemExit(main())
