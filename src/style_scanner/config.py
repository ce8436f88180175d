from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from style_scanner.models import LintConfig, RuleSettings, Severity, TokenKind
from style_scanner.scanners.patterns import (
    Balanced,
    Element,
    MalformedRulePattern,
    NotFollowedBy,
    NotPrecededBy,
    TokenMatch,
    TokenPattern,
)
from style_scanner.scanners.rules import Rule

logger = logging.getLogger(__name__)

LOG_LEVEL_ENV = "STYLE_SCANNER_LOG_LEVEL"
MAX_WORKERS_ENV = "STYLE_SCANNER_MAX_WORKERS"

_RULE_SETTING_KEYS = {"enabled", "severity"}
_RULE_REQUIRED_KEYS = ("id", "description", "severity", "message", "pattern")
_RULE_OPTIONAL_KEYS = {"fix", "window", "enabled", "skip_trivia"}
_MATCH_KEYS = {"kind", "text", "regex", "invert"}


class ConfigError(ValueError):
    pass


def load_config(path: str | Path) -> LintConfig:
    config_path = Path(path)
    raw = _read_json(config_path, "Config")
    if not isinstance(raw, dict):
        raise ConfigError("Config root must be an object")

    rules_raw = raw.get("rules", {})
    if not isinstance(rules_raw, dict):
        raise ConfigError("'rules' must be an object mapping rule ids to settings")

    settings: list[RuleSettings] = []
    for rule_id, item in rules_raw.items():
        if not isinstance(item, dict):
            raise ConfigError(f"Settings for rule '{rule_id}' must be an object")
        unknown = sorted(set(item) - _RULE_SETTING_KEYS)
        if unknown:
            raise ConfigError(f"Settings for rule '{rule_id}' have unknown keys: {', '.join(unknown)}")

        enabled = item.get("enabled")
        if enabled is not None and not isinstance(enabled, bool):
            raise ConfigError(f"'enabled' for rule '{rule_id}' must be true or false")

        settings.append(
            RuleSettings(
                rule_id=str(rule_id),
                enabled=enabled,
                severity=_optional_severity(item.get("severity"), f"rule '{rule_id}'"),
            )
        )

    keywords = raw.get("keywords")
    if keywords is not None:
        if not isinstance(keywords, list) or not all(isinstance(word, str) for word in keywords):
            raise ConfigError("'keywords' must be a list of strings")
        keywords = tuple(keywords)

    rules_path = raw.get("rules_path")
    if rules_path is not None:
        candidate = Path(str(rules_path))
        if not candidate.is_absolute():
            candidate = config_path.parent / candidate
        rules_path = str(candidate)

    max_workers = _resolve_max_workers(raw.get("max_workers"))

    logger.debug("Loaded config %s with %d rule settings", config_path, len(settings))
    return LintConfig(
        rules=tuple(settings),
        rules_path=rules_path,
        keywords=keywords,
        max_workers=max_workers,
    )


def load_rules(path: str | Path) -> list[Rule]:
    rules_path = Path(path)
    raw = _read_json(rules_path, "Rules file")

    if not isinstance(raw, list) or not raw:
        raise ConfigError("Rules file must contain a non-empty list")

    rules: list[Rule] = []
    for item in raw:
        if not isinstance(item, dict):
            raise ConfigError("Each rule entry must be an object")

        missing = [key for key in _RULE_REQUIRED_KEYS if key not in item]
        if missing:
            raise ConfigError(f"Rule is missing keys: {', '.join(missing)}")
        unknown = sorted(set(item) - set(_RULE_REQUIRED_KEYS) - _RULE_OPTIONAL_KEYS)
        if unknown:
            raise ConfigError(f"Rule '{item['id']}' has unknown keys: {', '.join(unknown)}")

        window = item.get("window")
        if window is not None and (isinstance(window, bool) or not isinstance(window, int)):
            raise ConfigError(f"Rule '{item['id']}': 'window' must be an integer")

        rules.append(
            Rule(
                rule_id=str(item["id"]),
                description=str(item["description"]),
                default_severity=_required_severity(item["severity"], f"rule '{item['id']}'"),
                pattern=parse_pattern(item["pattern"], skip_trivia=bool(item.get("skip_trivia", True))),
                message=str(item["message"]),
                fix=_optional_str(item.get("fix")),
                window=window,
                enabled_by_default=bool(item.get("enabled", True)),
            )
        )

    logger.debug("Loaded %d rules from %s", len(rules), rules_path)
    return rules


def parse_pattern(raw: object, *, skip_trivia: bool = True) -> TokenPattern:
    if not isinstance(raw, list):
        raise MalformedRulePattern("Pattern must be a list of elements")
    return TokenPattern(tuple(_parse_element(item) for item in raw), skip_trivia=skip_trivia)


def resolve_log_level(value: str | None = None) -> str:
    level = (value or os.getenv(LOG_LEVEL_ENV) or "WARNING").strip().upper()
    if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        raise ConfigError(f"Unknown log level: {level}")
    return level


def _parse_element(raw: object) -> Element:
    if not isinstance(raw, dict) or len(raw) != 1:
        raise MalformedRulePattern(f"Pattern element must be an object with exactly one key: {raw!r}")

    tag, body = next(iter(raw.items()))
    if tag == "match":
        return _parse_match(body)
    if tag == "not_followed_by":
        return NotFollowedBy(_parse_match(body))
    if tag == "not_preceded_by":
        return NotPrecededBy(_parse_match(body))
    if tag == "balanced":
        if not isinstance(body, dict):
            raise MalformedRulePattern("'balanced' must be an object")
        return Balanced(open=str(body.get("open", "(")), close=str(body.get("close", ")")))
    raise MalformedRulePattern(f"Unknown pattern element: {tag}")


def _parse_match(raw: object) -> TokenMatch:
    if not isinstance(raw, dict):
        raise MalformedRulePattern("Token matcher must be an object")
    unknown = sorted(set(raw) - _MATCH_KEYS)
    if unknown:
        raise MalformedRulePattern(f"Token matcher has unknown keys: {', '.join(unknown)}")

    kind = raw.get("kind")
    if isinstance(kind, list):
        kind = tuple(_parse_kind(item) for item in kind)
    elif kind is not None:
        kind = _parse_kind(kind)

    text = raw.get("text")
    if isinstance(text, list):
        text = tuple(str(item) for item in text)
    elif text is not None:
        text = str(text)

    return TokenMatch(
        kind=kind,
        text=text,
        regex=None if raw.get("regex") is None else str(raw["regex"]),
        invert=bool(raw.get("invert", False)),
    )


def _parse_kind(value: object) -> TokenKind:
    try:
        return TokenKind(str(value).strip().lower())
    except ValueError:
        raise MalformedRulePattern(f"Unknown token kind: {value!r}") from None


def _read_json(path: Path, label: str) -> object:
    if not path.exists():
        raise ConfigError(f"{label} not found: {path}")
    if not path.is_file():
        raise ConfigError(f"{label} is not a file: {path}")
    try:
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"{label} is not valid JSON: {path}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise ConfigError(f"{label} is not valid UTF-8: {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"{label} could not be read: {path}: {exc}") from exc


def _resolve_max_workers(value: object) -> int | None:
    env_value = os.getenv(MAX_WORKERS_ENV)
    if env_value:
        value = env_value
    if value is None:
        return None
    try:
        workers = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"'max_workers' must be an integer, got {value!r}") from None
    if isinstance(value, bool) or workers < 1:
        raise ConfigError(f"'max_workers' must be a positive integer, got {value!r}")
    return workers


def _optional_severity(value: object, context: str) -> Severity | None:
    if value is None:
        return None
    try:
        return Severity.parse(value)
    except ValueError:
        raise ConfigError(f"Unknown severity {value!r} for {context}") from None


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _required_severity(value: object, context: str) -> Severity:
    severity = _optional_severity(value, context)
    if severity is None:
        raise ConfigError(f"Missing severity for {context}")
    return severity
