"""Rule configuration loading and per-file resolution.

A configuration file is a YAML (or JSON) mapping::

    defaultSeverity: error
    extends: lintcheck:recommended
    linterOptions:
      exclude:
        - "vendor/**"
    rules:
      no-console:
        pattern: "console\\.log\\("
        message: Calls to console.log are not allowed
        severity: warning
      no-debugger: false

When no base configuration is given, the nearest ``lintcheck.yaml``,
``lintcheck.yml`` or ``lintcheck.json`` above a file applies to it, so a
nested directory can override its parents. Files with no configuration
anywhere above them get the bundled recommended rules.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from ..errors import ConfigLoadError

CONFIG_FILENAMES = ("lintcheck.yaml", "lintcheck.yml", "lintcheck.json")
RECOMMENDED = "lintcheck:recommended"
DISABLED_SEVERITIES = {"off", "none"}

_BUNDLED = {
    RECOMMENDED: Path(__file__).resolve().parent.parent / "configs" / "recommended.yaml",
}
_TOP_LEVEL_KEYS = {"defaultSeverity", "extends", "linterOptions", "rules"}
_RULE_KEYS = {"pattern", "message", "severity"}


@dataclass(frozen=True)
class RuleConfig:
    pattern: str | None
    severity: str
    message: str | None = None

    @property
    def enabled(self) -> bool:
        return self.severity not in DISABLED_SEVERITIES


@dataclass(frozen=True)
class LintConfiguration:
    """Effective rule set for one or more files."""
    rules: dict[str, RuleConfig] = field(default_factory=dict)
    exclude: tuple[str, ...] = ()
    path: Path | None = None

    def enabled_rules(self) -> dict[str, RuleConfig]:
        return {name: rule for name, rule in self.rules.items() if rule.enabled}

    def is_excluded(self, file_name: str) -> bool:
        target = Path(file_name).resolve().as_posix()
        return any(_glob_regex(pattern).fullmatch(target) for pattern in self.exclude)


class ConfigurationResolver:
    """Resolves the effective configuration for each linted file.

    Loaded files are cached by resolved path for the lifetime of the resolver.
    """

    def __init__(self) -> None:
        self._cache: dict[Path, LintConfiguration] = {}

    def resolve(self, config_file: str | None, file_path: Path) -> LintConfiguration:
        if config_file:
            return self.load(Path(config_file))
        found = find_configuration_path(file_path)
        if found is None:
            return self.load(_BUNDLED[RECOMMENDED])
        return self.load(found)

    def load(self, path: Path) -> LintConfiguration:
        return self._load(path.resolve(), ())

    def _load(self, path: Path, chain: tuple[Path, ...]) -> LintConfiguration:
        if path in chain:
            cycle = " -> ".join(str(p) for p in (*chain, path))
            raise ConfigLoadError(f"{path}: circular 'extends': {cycle}")
        cached = self._cache.get(path)
        if cached is not None:
            return cached

        document = read_configuration_file(path)
        errors = _validate_document(document)
        if errors:
            joined = "\n  ".join(errors)
            raise ConfigLoadError(f"{path}: configuration validation failed:\n  {joined}")

        rules: dict[str, RuleConfig] = {}
        exclude: list[str] = []
        for parent in _as_list(document.get("extends")):
            base = self._load(_resolve_extends(parent, path), (*chain, path))
            rules.update(base.rules)
            exclude.extend(base.exclude)

        default_severity = document.get("defaultSeverity", "error")
        for name, entry in (document.get("rules") or {}).items():
            rules[name] = _merge_rule(rules.get(name), entry, default_severity)

        missing = sorted(name for name, rule in rules.items() if rule.enabled and not rule.pattern)
        if missing:
            raise ConfigLoadError(f"{path}: enabled rules without a pattern: {', '.join(missing)}")

        options = document.get("linterOptions") or {}
        exclude.extend((path.parent / pattern).as_posix() for pattern in options.get("exclude", []))

        config = LintConfiguration(rules=rules, exclude=tuple(exclude), path=path)
        self._cache[path] = config
        return config


def find_configuration_path(file_path: Path) -> Path | None:
    """Return the nearest configuration file in or above the file's directory."""
    directory = file_path.resolve().parent
    for candidate_dir in (directory, *directory.parents):
        for name in CONFIG_FILENAMES:
            candidate = candidate_dir / name
            if candidate.is_file():
                return candidate
    return None


def read_configuration_file(path: Path | str) -> dict:
    """Parse a configuration file without resolving ``extends``."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigLoadError(f"configuration file not found: {path}") from None
    except OSError as e:
        raise ConfigLoadError(f"{path}: cannot read configuration: {e}") from e

    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"{path}: invalid YAML: {e}") from e

    if document is None:
        return {}
    if not isinstance(document, dict):
        raise ConfigLoadError(f"{path}: expected a mapping at top level")
    return document


def _resolve_extends(name: str, origin: Path) -> Path:
    if name in _BUNDLED:
        return _BUNDLED[name]
    return (origin.parent / name).resolve()


def _merge_rule(inherited: RuleConfig | None, entry: Any, default_severity: str) -> RuleConfig:
    """Apply one rule entry over the inherited definition, if any."""
    pattern = inherited.pattern if inherited else None
    message = inherited.message if inherited else None

    if isinstance(entry, bool):
        return RuleConfig(pattern=pattern, message=message, severity=default_severity if entry else "off")
    if isinstance(entry, str):
        return RuleConfig(pattern=pattern, message=message, severity=entry)
    return RuleConfig(
        pattern=entry.get("pattern", pattern),
        message=entry.get("message", message),
        severity=entry.get("severity", default_severity),
    )


def _validate_document(document: dict) -> list[str]:
    """Return a list of error strings if the document is malformed."""
    errors: list[str] = []

    unknown = set(document) - _TOP_LEVEL_KEYS
    if unknown:
        errors.append(f"unknown top-level keys: {sorted(unknown)}")

    severity = document.get("defaultSeverity", "error")
    if not isinstance(severity, str):
        errors.append(f"defaultSeverity: expected string, got {type(severity).__name__}")

    extends = document.get("extends")
    if extends is not None and not all(isinstance(e, str) for e in _as_list(extends)):
        errors.append("extends: expected a string or a list of strings")

    options = document.get("linterOptions")
    if options is not None:
        if not isinstance(options, dict):
            errors.append(f"linterOptions: expected mapping, got {type(options).__name__}")
        else:
            exclude = options.get("exclude", [])
            if not isinstance(exclude, list) or not all(isinstance(e, str) for e in exclude):
                errors.append("linterOptions.exclude: expected a list of glob strings")

    rules = document.get("rules")
    if rules is None:
        return errors
    if not isinstance(rules, dict):
        errors.append(f"rules: expected mapping, got {type(rules).__name__}")
        return errors

    for name, entry in rules.items():
        if isinstance(entry, (bool, str)):
            continue
        if not isinstance(entry, dict):
            errors.append(f"rules.{name}: expected bool, severity string or mapping, got {type(entry).__name__}")
            continue
        extra = set(entry) - _RULE_KEYS
        if extra:
            errors.append(f"rules.{name}: unknown keys: {sorted(extra)}")
        for key in _RULE_KEYS & set(entry):
            if not isinstance(entry[key], str):
                errors.append(f"rules.{name}.{key}: expected string, got {type(entry[key]).__name__}")
    return errors


def _as_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


@lru_cache(maxsize=None)
def _glob_regex(pattern: str) -> re.Pattern[str]:
    """Compile an exclude glob: ``*`` and ``?`` stay within one path segment,
    ``**`` spans directories and ``[...]`` is a character class."""
    parts = []
    i, n = 0, len(pattern)
    while i < n:
        if pattern.startswith("**/", i):
            parts.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("**", i):
            parts.append(".*")
            i += 2
        elif pattern[i] == "*":
            parts.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            parts.append("[^/]")
            i += 1
        elif pattern[i] == "[" and "]" in pattern[i + 2:]:
            end = pattern.index("]", i + 2)
            body = pattern[i + 1:end].replace("\\", "\\\\").replace("[", "\\[")
            if body.startswith("!"):
                body = "^" + body[1:]
            parts.append(f"[{body}]")
            i = end + 1
        else:
            parts.append(re.escape(pattern[i]))
            i += 1
    return re.compile("".join(parts))
