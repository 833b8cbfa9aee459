"""Configuration loading for gitreport (.gitreport.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

CONFIG_FILENAME = ".gitreport.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class LLMConfig:
    """Chat backend settings."""

    model: Optional[str] = None
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    temperature: Optional[float] = None
    request_timeout: Optional[float] = None


@dataclass
class GitHubConfig:
    """GitHub REST API settings."""

    api_url: Optional[str] = None
    token: Optional[str] = None
    request_timeout: Optional[float] = None


@dataclass
class ReportSettings:
    """Knobs for the report pipeline itself."""

    days: int = 7
    max_targets: int = 3
    correlation_capacity: int = 6_000
    log_level: Optional[str] = None


@dataclass
class ReportConfig:
    """Represents the settings defined in .gitreport.yml."""

    root: Path
    llm: LLMConfig = field(default_factory=LLMConfig)
    github: GitHubConfig = field(default_factory=GitHubConfig)
    report: ReportSettings = field(default_factory=ReportSettings)


def load_config(config_path: Path) -> ReportConfig:
    """Load configuration from disk, returning defaults when the file is absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return ReportConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    llm_data = _as_dict(data.get("llm"))
    llm = LLMConfig(
        model=_as_str(llm_data.get("model")),
        base_url=_as_str(llm_data.get("base_url")),
        api_key=_as_str(llm_data.get("api_key")),
        temperature=_as_float(llm_data.get("temperature")),
        request_timeout=_as_float(llm_data.get("request_timeout")),
    )

    github_data = _as_dict(data.get("github"))
    github = GitHubConfig(
        api_url=_as_str(github_data.get("api_url")),
        token=_as_str(github_data.get("token")),
        request_timeout=_as_float(github_data.get("request_timeout")),
    )

    report_data = _as_dict(data.get("report"))
    defaults = ReportSettings()
    report = ReportSettings(
        days=_positive_int(report_data.get("days"), defaults.days),
        max_targets=_positive_int(report_data.get("max_targets"), defaults.max_targets),
        correlation_capacity=_positive_int(
            report_data.get("correlation_capacity"), defaults.correlation_capacity
        ),
        log_level=_as_str(report_data.get("log_level")),
    )

    return ReportConfig(root=root, llm=llm, github=github, report=report)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool) or value is None:
        return None
    return str(value) if isinstance(value, (str, int, float)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _positive_int(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value if value > 0 else default
    if isinstance(value, str):
        try:
            parsed = int(value)
        except ValueError:
            return default
        return parsed if parsed > 0 else default
    return default


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "GitHubConfig",
    "LLMConfig",
    "ReportConfig",
    "ReportSettings",
    "load_config",
]
