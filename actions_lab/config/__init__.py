"""Repository policy for the example workflows.

lab_config.yml is the single source of truth for which triggers, Python
versions and lint tools the workflows under .github/workflows may use.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import yaml

from ..errors import ValidationError
from ..utils.yamlio import read_yaml
from .validate_lab_config import validate_lab_config

DEFAULT_CONFIG_REL_PATH = Path("actions_lab/config/lab_config.yml")
CONFIG_ENV_VAR = "ACTIONS_LAB_CONFIG"


@dataclass(frozen=True)
class LabConfig:
    workflows_dir: str
    allowed_triggers: Tuple[str, ...]
    python_versions: Tuple[str, ...]
    lint_tools: Tuple[str, ...]
    require_pinned_actions: bool

    def workflows_path(self, repo_root: Path) -> Path:
        return (Path(repo_root) / self.workflows_dir).resolve()


def resolve_lab_config_path(repo_root: Path, cli_path: Optional[str] = None) -> Path:
    """Resolve the lab config YAML path.

    Precedence:
      1) explicit path (CLI flag --config)
      2) ACTIONS_LAB_CONFIG
      3) <repo_root>/actions_lab/config/lab_config.yml
    """
    if cli_path and str(cli_path).strip():
        return Path(str(cli_path).strip()).expanduser().resolve()

    env_path = str(os.environ.get(CONFIG_ENV_VAR, "") or "").strip()
    if env_path:
        return Path(env_path).expanduser().resolve()

    return (Path(repo_root) / DEFAULT_CONFIG_REL_PATH).resolve()


def load_lab_config(repo_root: Path, cli_path: Optional[str] = None) -> LabConfig:
    """Load and validate the lab config.

    Contract:
    - Strict validation: missing keys or unknown keys fail fast.
    - No hidden defaults beyond the YAML file.

    Raises:
        FileNotFoundError: if the config file is missing.
        ValidationError: if the config file is not valid YAML, is not a
        mapping, or does not match the schema.
    """
    path = resolve_lab_config_path(repo_root, cli_path)
    if not path.exists():
        raise FileNotFoundError(f"Missing lab config: {path}")

    try:
        data = read_yaml(path)
    except yaml.YAMLError as e:
        raise ValidationError(f"Invalid lab_config YAML in {path}: {e}") from e
    except ValueError as e:
        raise ValidationError(f"Invalid lab_config in {path}: {e}") from e

    validate_lab_config(data)
    return LabConfig(
        workflows_dir=str(data["workflows_dir"]),
        allowed_triggers=tuple(data["allowed_triggers"]),
        python_versions=tuple(data["python_versions"]),
        lint_tools=tuple(data["lint_tools"]),
        require_pinned_actions=bool(data["require_pinned_actions"]),
    )


__all__ = [
    "CONFIG_ENV_VAR",
    "DEFAULT_CONFIG_REL_PATH",
    "LabConfig",
    "load_lab_config",
    "resolve_lab_config_path",
]
