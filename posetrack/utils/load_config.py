import logging
import os
from typing import Any, Dict, Optional

import yaml

log = logging.getLogger(__name__)

CONFIG_ENV_VAR = "PT_CONFIG"


def resolve_config_path(path: Optional[str], default: str) -> str:
    """Explicit path wins, then $PT_CONFIG, then the packaged default."""
    return path or os.getenv(CONFIG_ENV_VAR) or default


def read_yaml(path: str) -> Dict[str, Any]:
    """Whole YAML document as a dict. A missing file is not an error: defaults apply."""
    if not os.path.isfile(path):
        log.info(f"No config at '{path}', using defaults")
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            doc = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        log.warning(f"Config error at '{path}': {e}. Using defaults.")
        return {}
    if doc is None:
        return {}
    if not isinstance(doc, dict):
        log.warning(f"Config at '{path}' is a {type(doc).__name__}, expected a mapping. Using defaults.")
        return {}
    return doc


def select_section(doc: Dict[str, Any], section: str) -> Dict[str, Any]:
    node: Any = doc
    for key in filter(None, (section or "").split(".")):
        node = node.get(key) if isinstance(node, dict) else None
    return node if isinstance(node, dict) else {}


def load_yaml_section(path: str, section: str = "") -> Dict[str, Any]:
    """
    Load a YAML section as dict. Supports dotted paths like:
      - "recorder"
      - "assets.models"
    An empty section returns the whole document; {} on error/missing.
    """
    return select_section(read_yaml(path), section)
