"""Project configuration loaded from kbarchive.toml or pyproject.toml."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore

from .errors import ConfigError

CONFIG_FILENAME = "kbarchive.toml"
LEVELS = ("error", "warning", "info")
FAIL_ON = ("error", "warning")

DEFAULT_COMMAND = ["npx", "quartz", "build", "-d", "{content}", "-o", "{output}"]
DEFAULT_SERVE_ARGS = ["--serve", "--port", "{port}"]
DEFAULT_IGNORE = ["private", "templates", ".obsidian"]


@dataclass
class GeneratorConfig:
    """How to invoke the external static-site generator."""

    command: list[str] = field(default_factory=lambda: list(DEFAULT_COMMAND))
    serve_args: list[str] = field(default_factory=lambda: list(DEFAULT_SERVE_ARGS))
    output: str = "public"
    port: int = 8080


@dataclass
class ArchiveConfig:
    """Settings for linting and publishing an archive."""

    content: str = "content"
    ignore: list[str] = field(default_factory=lambda: list(DEFAULT_IGNORE))
    required_fields: list[str] = field(default_factory=lambda: ["title"])
    fail_on: str = "error"
    disabled_rules: list[str] = field(default_factory=list)
    severity: dict[str, str] = field(default_factory=dict)
    generator: GeneratorConfig = field(default_factory=GeneratorConfig)
    root: Path = field(default_factory=Path.cwd)  # directory the config was found in
    source: Path | None = None  # config file path, None when using defaults

    @property
    def content_path(self) -> Path:
        return (self.root / self.content).resolve()

    @property
    def output_path(self) -> Path:
        return (self.root / self.generator.output).resolve()


def _str_list(data: dict[str, Any], key: str, default: list[str]) -> list[str]:
    value = data.get(key, default)
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"'{key}' must be a list of strings")
    return list(value)


def _str(data: dict[str, Any], key: str, default: str) -> str:
    value = data.get(key, default)
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"'{key}' must be a non-empty string")
    return value.strip()


def parse_config(data: dict[str, Any], root: Path, source: Path | None = None) -> ArchiveConfig:
    """Build an ArchiveConfig from a decoded TOML table."""
    fail_on = _str(data, "fail_on", "error")
    if fail_on not in FAIL_ON:
        raise ConfigError(f"fail_on must be one of {', '.join(FAIL_ON)}, got '{fail_on}'")

    rules = data.get("rules", {})
    if not isinstance(rules, dict):
        raise ConfigError("[rules] must be a table")
    severity = rules.get("severity", {})
    if not isinstance(severity, dict):
        raise ConfigError("[rules.severity] must be a table")
    for rule_id, level in severity.items():
        if level not in LEVELS:
            raise ConfigError(f"Unknown level '{level}' for rule '{rule_id}' (expected {', '.join(LEVELS)})")

    gen = data.get("generator", {})
    if not isinstance(gen, dict):
        raise ConfigError("[generator] must be a table")
    command = _str_list(gen, "command", DEFAULT_COMMAND)
    if not command:
        raise ConfigError("generator.command must not be empty")
    port = gen.get("port", 8080)
    if not isinstance(port, int) or isinstance(port, bool) or not 0 < port < 65536:
        raise ConfigError("generator.port must be an integer between 1 and 65535")

    return ArchiveConfig(
        content=_str(data, "content", "content"),
        ignore=_str_list(data, "ignore", DEFAULT_IGNORE),
        required_fields=_str_list(data, "required_fields", ["title"]),
        fail_on=fail_on,
        disabled_rules=_str_list(rules, "disabled", []),
        severity=dict(severity),
        generator=GeneratorConfig(
            command=command,
            serve_args=_str_list(gen, "serve_args", DEFAULT_SERVE_ARGS),
            output=_str(gen, "output", "public"),
            port=port,
        ),
        root=root,
        source=source,
    )


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e


def find_config(start: Path) -> tuple[Path, dict[str, Any]] | None:
    """Find the nearest config by walking up from `start`.

    kbarchive.toml wins over [tool.kbarchive] in pyproject.toml at the
    same level.
    """
    cur = start.resolve()
    for p in (cur, *cur.parents):
        candidate = p / CONFIG_FILENAME
        if candidate.is_file():
            return candidate, _read_toml(candidate)
        pyproject = p / "pyproject.toml"
        if pyproject.is_file():
            table = _read_toml(pyproject).get("tool", {}).get("kbarchive")
            if isinstance(table, dict):
                return pyproject, table
    return None


def load_config(start: Path | None = None) -> ArchiveConfig:
    """Load configuration for the project containing `start` (default: cwd)."""
    start = start or Path.cwd()
    found = find_config(start)
    if found is None:
        return ArchiveConfig(root=start.resolve())
    path, data = found
    return parse_config(data, root=path.parent, source=path)
