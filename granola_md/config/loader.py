"""Config file discovery and loading for granola-md."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import GranolaMdConfig

logger = logging.getLogger(__name__)

CONFIG_ENV = "GRANOLA_MD_CONFIG"
PROJECT_CONFIG = "granola-md.yaml"

_ENV_REF_RE = re.compile(r"\$\{(\w+)(?::-([^}]*))?\}")


def _config_candidates(cli_path: str | None = None) -> list[Path]:
    """Config files to try, highest priority first."""
    candidates = [
        Path(explicit).expanduser()
        for explicit in (cli_path, os.environ.get(CONFIG_ENV))
        if explicit
    ]
    candidates.append(Path(PROJECT_CONFIG))
    candidates.append(Path.home() / ".granola-md" / "config.yaml")
    return candidates


def load_config(cli_path: str | None = None) -> GranolaMdConfig:
    """Load the first non-empty config file, or defaults.

    Resolution order: ``--config`` > ``$GRANOLA_MD_CONFIG`` >
    ``./granola-md.yaml`` > ``~/.granola-md/config.yaml``.
    """
    for path in _config_candidates(cli_path):
        if not path.is_file():
            continue

        raw = _read_yaml(path)
        if raw is None:
            logger.debug("Config %s is empty, trying next", path)
            continue

        try:
            config = GranolaMdConfig.model_validate(_expand_env_vars(raw))
        except ValidationError as e:
            raise ValueError(f"Invalid config in {path}: {e}") from e
        logger.debug("Loaded config from %s", path)
        return config

    return GranolaMdConfig()


def _read_yaml(path: Path) -> object:
    try:
        with open(path, encoding="utf-8") as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e


def _expand_env_vars(obj: object) -> object:
    """Expand ``${VAR}`` and ``${VAR:-default}`` in every string of a YAML tree.

    Unset or empty variables use the default, else ``""``.
    """
    if isinstance(obj, str):
        return _ENV_REF_RE.sub(lambda m: os.environ.get(m.group(1)) or m.group(2) or "", obj)
    if isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


# Default YAML template for `granola-md config init`
DEFAULT_CONFIG_TEMPLATE = """\
# granola-md.yaml

# Granola API
api:
  base_url: "https://api.granola.ai"
  token_env: "GRANOLA_TOKEN"     # env var holding the bearer token
  timeout: 30
  page_size: 100
  page_delay: 0.2                # seconds between pages
  # credentials_file: "~/.config/Granola/supabase.json"

# Vault output
import:
  vault_path: "."
  folder: ""                     # subfolder inside the vault
  strategy: "update"             # update | skip
  skip_empty: false
  max_filename_length: 100

# Content processing
content:
  date_prefix_format: "YYYY-MM-DD"   # YYYY-MM-DD | MM-DD-YYYY | DD-MM-YYYY | YYYY.MM.DD | none
  content_priority: "panel_first"    # panel_first | notes_first | panel_only | notes_only
  include_enhanced_frontmatter: false
  include_granola_url: false
  use_custom_filename_template: false
  filename_template: "{created_date} - {title}"
  # max_depth: 100                  # node nesting ceiling, 1-200

# Action items
action_items:
  convert_to_tasks: false
  add_task_tag: false
  task_tag_name: "#tasks"

# Attendee tags
attendee_tags:
  enabled: false
  tag_template: "person/{name}"  # {name} | {email} | {domain} | {company}
  exclude_my_name: false
  # my_name: ""
  include_host: false

# Logging
log_level: "info"                # debug | info | warn | error
"""
