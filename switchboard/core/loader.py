# switchboard/core/loader.py
"""
Config file helpers: glob-driven YAML loading and ``${VAR}`` expansion.
"""
from __future__ import annotations

import logging
import os
import re
from glob import glob
from pathlib import Path
from typing import Any, Iterable, Mapping

import yaml

logger = logging.getLogger(__name__)

# ${VAR} or ${VAR:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


def expand_env(value: Any, environ: Mapping[str, str] | None = None) -> Any:
    """
    Recursively expand environment references in a config value.

    Supports:
        - ${VAR} - substituted with the env var, raises if not set
        - ${VAR:-default} - substituted with the env var or the default

    Args:
        value: Configuration value (string, dict, list, or other)
        environ: Mapping to read from (defaults to ``os.environ``)

    Returns:
        The value with every reference expanded

    Raises:
        ValueError: If a required env var is not set and has no default
    """
    env = os.environ if environ is None else environ

    if isinstance(value, str):
        return _expand_string(value, env)
    if isinstance(value, dict):
        return {k: expand_env(v, env) for k, v in value.items()}
    if isinstance(value, list):
        return [expand_env(item, env) for item in value]
    return value


def _expand_string(value: str, env: Mapping[str, str]) -> str:
    def replacer(match: re.Match) -> str:
        var_name = match.group(1)
        default = match.group(2)

        env_value = env.get(var_name)
        if env_value is not None:
            return env_value
        if default is not None:
            return default
        raise ValueError(
            f"Environment variable '{var_name}' is not set and no default provided"
        )

    return ENV_VAR_PATTERN.sub(replacer, value)


def load_yaml_files(patterns: Iterable[str]) -> list[dict[str, Any]]:
    """
    Load every YAML file matching the glob patterns.

    Files are returned in sorted path order so that callers merging them
    get "later file wins" semantics.
    """
    patterns = list(patterns)
    files: set[Path] = set()
    for pattern in patterns:
        files.update(Path(m).resolve() for m in glob(pattern))

    if not files:
        logger.warning("No config files found matching patterns: %s", patterns)
        return []

    ordered = sorted(files)
    logger.info("Loading config files: %s", [str(f) for f in ordered])

    out: list[dict[str, Any]] = []
    for f in ordered:
        try:
            with f.open("r", encoding="utf-8") as fh:
                out.append(yaml.safe_load(fh) or {})
        except (OSError, yaml.YAMLError) as exc:
            logger.error("Failed to load YAML file '%s': %s", f, exc)
            raise

    return out
