from __future__ import annotations

"""Configuration loading and small accessors for task settings."""

import copy
from pathlib import Path
from typing import Any, Dict, List

import yaml

from .logging import get_logger


log = get_logger("dispatcher.config")

DEFAULT_CONFIG_PATH = "configs/tasks.yaml"

DEFAULTS: Dict[str, Any] = {
    "env_file": ".env",
    "dist_dir": "dist",
    "install": {"extras": "dev"},
    "lint": {"args": ["run", "--all-files"]},
    "test": {
        "args": [
            "--junitxml=test-reports/junit.xml",
            "--cov",
            "--cov-report=xml:coverage.xml",
            "--cov-report=html",
        ],
    },
    "repositories": {
        "test": {"name": "testpypi", "token_env": "TEST_PYPI_TOKEN"},
        "prod": {"name": "pypi", "token_env": "PROD_PYPI_TOKEN"},
    },
    "clean": {
        "paths": ["dist", "build", "coverage.xml", "test-reports"],
        "dir_patterns": ["*cache*", "*.dist-info", "*.egg-info", "*htmlcov"],
        "file_patterns": ["*.pyc"],
        "exclude": "*env/*",
    },
}


def _merge(base: Dict, override: Dict) -> Dict:
    out = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge(out[k], v)
        else:
            out[k] = v
    return out


def load_config(path: str | Path | None = None, root: str | Path = ".") -> dict:
    """Load the YAML task settings and merge them over the built-in defaults.

    A relative `path` is resolved against `root`. When no path is given the
    default location is tried and silently skipped if absent; an explicit path
    that does not exist raises FileNotFoundError.
    """
    explicit = path is not None
    p = Path(path or DEFAULT_CONFIG_PATH)
    if not p.is_absolute():
        p = Path(root) / p
    if not p.exists():
        if explicit:
            raise FileNotFoundError(f"Config file not found: {p}")
        log.debug("No config at %s, using defaults", p)
        return copy.deepcopy(DEFAULTS)
    with open(p, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config must be a mapping, got {type(data).__name__}: {p}")
    log.debug("Loaded config from %s", p)
    return _merge(copy.deepcopy(DEFAULTS), data)


def _get(d: Dict, *keys, default=None):
    cur = d
    for k in keys:
        if not isinstance(cur, dict):
            return default
        cur = cur.get(k)
        if cur is None:
            return default
    return cur


def _as_list(value) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value]


def env_file(p: Dict) -> str:
    return _get(p, "env_file", default=DEFAULTS["env_file"])


def dist_dir(p: Dict) -> str:
    return _get(p, "dist_dir", default=DEFAULTS["dist_dir"])


def install_extras(p: Dict) -> str:
    return _get(p, "install", "extras", default="")


def tool_args(p: Dict, tool: str) -> List[str]:
    return _as_list(_get(p, tool, "args", default=DEFAULTS.get(tool, {}).get("args")))


def repository(p: Dict, target: str) -> tuple[str, str]:
    """Return (repository name, token env var) for a publish target."""
    fallback = DEFAULTS["repositories"][target]
    name = _get(p, "repositories", target, "name", default=fallback["name"])
    token_env = _get(p, "repositories", target, "token_env", default=fallback["token_env"])
    return name, token_env


def clean_settings(p: Dict) -> dict:
    fallback = DEFAULTS["clean"]
    return {
        "paths": _as_list(_get(p, "clean", "paths", default=fallback["paths"])),
        "dir_patterns": _as_list(
            _get(p, "clean", "dir_patterns", default=fallback["dir_patterns"])
        ),
        "file_patterns": _as_list(
            _get(p, "clean", "file_patterns", default=fallback["file_patterns"])
        ),
        "exclude": _as_list(_get(p, "clean", "exclude", default=fallback["exclude"])),
    }
