"""Loading of the optional local secrets file (`.env`)."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, MutableMapping, Optional

from dotenv import dotenv_values

from .logging import get_logger


log = get_logger("dispatcher.envfile")


def load_env_file(
    path: str | Path, env: MutableMapping[str, str]
) -> Optional[Dict[str, str]]:
    """Export the `KEY=VALUE` lines of `path` into `env`.

    Returns the loaded pairs, or None when the file does not exist. Absence is
    not an error: callers carry on without secrets. Blank lines and `#`
    comments produce nothing; a line without `=` is skipped with a warning.
    Loaded values override what `env` already holds.
    """
    p = Path(path)
    if not p.is_file():
        log.info("no .env file found at %s", p)
        return None

    loaded: Dict[str, str] = {}
    for key, value in dotenv_values(p, interpolate=False).items():
        if value is None:
            log.warning("Skipping malformed line in %s: %r", p, key)
            continue
        loaded[key] = value

    env.update(loaded)
    log.info("Loaded %d variable(s) from %s", len(loaded), p)
    return loaded
