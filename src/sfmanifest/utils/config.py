from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict

import yaml

from sfmanifest.errors import ConfigError
from sfmanifest.model.manifest import DEFAULT_API_VERSION, DEFAULT_NAMESPACE


def load_yaml(path: str | Path) -> Dict[str, Any]:
    """Load YAML config into a dict."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Cannot load config {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must be a mapping, got {type(data).__name__}")
    return data


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged: Dict[str, Any] = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


@dataclass
class AppConfig:
    raw: Dict[str, Any]

    @classmethod
    def from_files(cls, *paths: str | Path) -> "AppConfig":
        merged: Dict[str, Any] = {}
        for path in paths:
            merged = deep_merge(merged, load_yaml(path))
        return cls(raw=merged)


@dataclass
class ManifestSettings:
    root: str = "."
    dir: str = ""
    api_version: str = DEFAULT_API_VERSION
    package_name: str = "package.xml"
    xmlns_source: str = DEFAULT_NAMESPACE
    sort_entries: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> "ManifestSettings":
        section = raw.get("manifest", {}) or {}
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(section) - known)
        if unknown:
            raise ConfigError(f"Unknown manifest settings: {', '.join(unknown)}")
        settings = cls(**section)
        settings.root = str(settings.root or os.getcwd())
        settings.dir = str(settings.dir or "")
        settings.api_version = str(settings.api_version)
        settings.sort_entries = bool(settings.sort_entries)
        return settings
