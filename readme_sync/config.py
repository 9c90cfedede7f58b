"""
config.py

Responsibility: Build the immutable `SyncRequest` at the process boundary.

Values are resolved from three layers, highest precedence first:
1) explicit overrides (CLI flags)
2) an optional YAML config file
3) environment variables: GitHub Actions `INPUT_*` inputs first, then the
   conventional fallbacks (`DOCKERHUB_*`, `GITHUB_REPOSITORY`, `GITHUB_REF_NAME`)

The syncer should treat the returned request as the single source of truth;
nothing downstream reads the environment.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from readme_sync.errors import ConfigError

DEFAULT_REF_NAME = "main"

_REPOSITORY_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*/[A-Za-z0-9][A-Za-z0-9._-]*$")

# Environment variables consulted for each field, in order.
ENV_FALLBACKS: dict[str, tuple[str, ...]] = {
    "username": ("INPUT_USERNAME", "DOCKERHUB_USERNAME"),
    "password": ("INPUT_PASSWORD", "DOCKERHUB_PASSWORD"),
    "repository": ("INPUT_REPOSITORY", "GITHUB_REPOSITORY"),
    "ref_name": ("INPUT_REF_NAME", "GITHUB_REF_NAME"),
    "readme": ("INPUT_README",),
    "replace_pattern": ("INPUT_REPLACE_PATTERN",),
    "replace_with": ("INPUT_REPLACE_WITH",),
    "short_description": ("INPUT_SHORT_DESCRIPTION",),
}

# Keys accepted in the YAML config file. Secrets are deliberately absent.
FILE_KEYS = frozenset(ENV_FALLBACKS) - {"password"}


@dataclass(frozen=True)
class SyncRequest:
    """Everything one sync run needs. Constructed once, never mutated."""

    username: str
    password: str = field(repr=False)
    repository: str
    readme_path: Path
    search_pattern: str
    replacement_template: str
    ref_name: str = DEFAULT_REF_NAME
    short_description: str | None = None


def validate_repository(repository: str) -> str:
    repository = repository.strip()
    if not _REPOSITORY_RE.match(repository):
        raise ConfigError(f"Repository must look like 'owner/name', got: {repository!r}")
    return repository


def load_config_file(config_path: str | Path) -> dict[str, Any]:
    """
    Load a YAML config file into a plain dict of known keys.

    The top level must be a mapping. Unknown keys (and `password`) are rejected
    so that typos surface instead of silently falling back to the environment.
    """
    path = Path(config_path)
    if not path.is_file():
        raise ConfigError(f"Config file does not exist: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Config file is not valid YAML: {path}") from e
    if not isinstance(data, dict):
        raise ConfigError("Config file must be a mapping/object at the top level.")

    if "password" in data:
        raise ConfigError("`password` must not be stored in the config file; use --password or the environment.")
    unknown = sorted(str(k) for k in data if k not in FILE_KEYS)
    if unknown:
        raise ConfigError(f"Unknown config key(s): {', '.join(unknown)}")

    # YAML may produce ints/bools for unquoted scalars; the request is all strings.
    return {str(k): (None if v is None else str(v)) for k, v in data.items()}


def _from_env(key: str, env: Mapping[str, str]) -> str | None:
    for name in ENV_FALLBACKS[key]:
        value = env.get(name)
        if value:
            return value
    return None


def _resolve(
    key: str,
    overrides: Mapping[str, str | None],
    file_values: Mapping[str, str | None],
    env: Mapping[str, str],
) -> str | None:
    for layer in (overrides, file_values):
        value = layer.get(key)
        if value is not None and value != "":
            return value
    return _from_env(key, env)


def _require(key: str, value: str | None) -> str:
    if value is None or value == "":
        flag = "--" + key.replace("_", "-")
        envs = " or ".join(ENV_FALLBACKS[key])
        raise ConfigError(f"Missing required value `{key}` (use {flag} or set {envs})")
    return value


def build_request(
    overrides: Mapping[str, str | None] | None = None,
    *,
    config_path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
) -> SyncRequest:
    """
    Resolve every field of a `SyncRequest` and validate it.

    `overrides` uses the same keys as `ENV_FALLBACKS`; a None or empty value
    means "not given on this layer".
    """
    overrides = overrides or {}
    env = os.environ if env is None else env
    file_values = load_config_file(config_path) if config_path else {}

    values = {key: _resolve(key, overrides, file_values, env) for key in ENV_FALLBACKS}

    # The pattern is matched literally; surrounding whitespace is significant.
    search_pattern = _require("replace_pattern", values["replace_pattern"])
    replacement_template = _require("replace_with", values["replace_with"])

    short_description = values["short_description"]
    if short_description is not None:
        short_description = short_description.strip() or None

    return SyncRequest(
        username=_require("username", values["username"]).strip(),
        password=_require("password", values["password"]),
        repository=validate_repository(_require("repository", values["repository"])),
        readme_path=Path(_require("readme", values["readme"])),
        search_pattern=search_pattern,
        replacement_template=replacement_template,
        ref_name=(values["ref_name"] or DEFAULT_REF_NAME).strip(),
        short_description=short_description,
    )
