"""Configuration — project resolution and run settings.

Environments are resolved to project IDs through the ``projects`` alias table
of a ``.firebaserc`` file. Run settings come from environment variables and
are overridden by CLI options.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from indexcheck.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_INDEXES_PATH = "firestore.indexes.json"
DEFAULT_FIREBASERC_PATH = ".firebaserc"
DEFAULT_FETCH_TIMEOUT = 60.0


@dataclass
class Settings:
    """Settings for a verification run."""

    indexes_path: str = DEFAULT_INDEXES_PATH
    firebaserc_path: str = DEFAULT_FIREBASERC_PATH
    snapshot_path: str | None = None
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT

    @classmethod
    def from_env(cls, environ: dict | None = None) -> Settings:
        """Build settings from ``INDEXCHECK_*`` environment variables."""
        env = os.environ if environ is None else environ

        timeout = DEFAULT_FETCH_TIMEOUT
        raw_timeout = env.get("INDEXCHECK_FETCH_TIMEOUT")
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError as e:
                raise ConfigurationError(
                    f"INDEXCHECK_FETCH_TIMEOUT must be a number of seconds, got '{raw_timeout}'"
                ) from e
            if timeout <= 0:
                raise ConfigurationError("INDEXCHECK_FETCH_TIMEOUT must be positive")

        return cls(
            indexes_path=env.get("INDEXCHECK_INDEXES_PATH") or DEFAULT_INDEXES_PATH,
            firebaserc_path=env.get("INDEXCHECK_FIREBASERC") or DEFAULT_FIREBASERC_PATH,
            snapshot_path=env.get("INDEXCHECK_SNAPSHOT") or None,
            fetch_timeout=timeout,
        )


def load_project_aliases(firebaserc_path: str | Path) -> dict[str, str]:
    """Read the ``projects`` alias table from a ``.firebaserc`` file."""
    path = Path(firebaserc_path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigurationError(f"Error reading {path}: {e.strerror or e}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Error parsing {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a JSON object")

    projects = data.get("projects") or {}
    if not isinstance(projects, dict):
        raise ConfigurationError(f"'projects' in {path} must be a mapping of alias to project ID")
    return {str(alias): str(project) for alias, project in projects.items()}


def resolve_project_id(environment: str, aliases: dict[str, str]) -> str:
    """Map an environment name to a project ID.

    The environment may be an alias (``staging``) or a project ID that appears
    as one of the alias targets.

    Raises:
        ConfigurationError: No alias or known project matches.
    """
    if environment in aliases:
        return aliases[environment]
    if environment in aliases.values():
        return environment
    if environment == "default":
        raise ConfigurationError("'default' project ID not found in .firebaserc.")
    raise ConfigurationError(
        f"Project ID for environment '{environment}' not found in .firebaserc "
        f"(known aliases: {', '.join(sorted(aliases)) or 'none'})."
    )


def resolve_environment(environment: str, firebaserc_path: str | Path) -> str:
    """Resolve an environment name using the given ``.firebaserc`` file."""
    project_id = resolve_project_id(environment, load_project_aliases(firebaserc_path))
    logger.debug("Resolved environment '%s' to project '%s'", environment, project_id)
    return project_id
