"""
Optional config file support for cmdgen.

Reads ~/.config/cmdgen/config.toml if it exists.
Missing config or invalid values fall back to defaults.
"""

import logging
import sys
import tomllib
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)

CONFIG_PATH = Path.home() / ".config" / "cmdgen" / "config.toml"

# Defaults (match the launcher extension's behavior)
DEFAULTS: Dict[str, Any] = {
    "provider": "claude-haiku",
    "model": None,  # None means use provider default
    "max_tokens": 256,
    "selected_text_limit": 2000,
    "relevant_apps": None,  # None means use relevance.RELEVANT_APPS
    "history_limit": 20,
    "storage_path": None,  # None means ~/.local/share/cmdgen/storage.json
    "paste_target": "stdout",
    "debug": False,
}

# Valid provider names
VALID_PROVIDERS = {"claude-haiku", "gemini-flash-lite", "groq"}

# Where PASTE delivery sends the command
VALID_PASTE_TARGETS = {"stdout", "frontmost"}

_config: Dict[str, Any] = {}
_loaded = False


def _validate_int(value: Any, key: str, minimum: int = 1) -> int | None:
    """Validate an integer config value. Returns None if invalid."""
    if isinstance(value, bool):
        print(f"cmdgen: config '{key}' must be an integer, ignoring", file=sys.stderr)
        return None
    try:
        val = int(value)
        if val < minimum:
            print(f"cmdgen: config '{key}' must be >= {minimum}, ignoring", file=sys.stderr)
            return None
        return val
    except (TypeError, ValueError):
        print(f"cmdgen: config '{key}' must be an integer, ignoring", file=sys.stderr)
        return None


def _validate_str_list(value: Any, key: str) -> list[str] | None:
    """Validate a list of non-empty strings. Returns None if invalid."""
    if not isinstance(value, list) or not all(
        isinstance(item, str) and item.strip() for item in value
    ):
        print(f"cmdgen: config '{key}' must be a list of non-empty strings, ignoring", file=sys.stderr)
        return None
    return [item.strip() for item in value]


def load_config() -> Dict[str, Any]:
    """
    Load config from TOML file, merging with defaults.

    Returns a dict with keys: provider, model, max_tokens, selected_text_limit,
    relevant_apps, history_limit, storage_path, paste_target, debug.
    """
    global _config, _loaded

    if _loaded:
        return _config

    _config = dict(DEFAULTS)
    _loaded = True

    if not CONFIG_PATH.exists():
        logger.debug("No config file at %s, using defaults", CONFIG_PATH)
        return _config

    try:
        with open(CONFIG_PATH, "rb") as f:
            data = tomllib.load(f)
    except Exception as e:
        print(f"cmdgen: error reading config: {e}", file=sys.stderr)
        return _config

    # [provider] section
    provider_section = data.get("provider", {})
    if isinstance(provider_section, dict):
        primary = provider_section.get("primary")
        if primary is not None:
            if primary in VALID_PROVIDERS:
                _config["provider"] = primary
            else:
                print(f"cmdgen: unknown provider '{primary}', ignoring", file=sys.stderr)

        model = provider_section.get("model")
        if model is not None:
            if isinstance(model, str) and model.strip():
                _config["model"] = model.strip()
            else:
                print("cmdgen: config 'model' must be a non-empty string, ignoring", file=sys.stderr)

        max_tokens = provider_section.get("max_tokens")
        if max_tokens is not None:
            val = _validate_int(max_tokens, "max_tokens", minimum=16)
            if val is not None:
                _config["max_tokens"] = val

    # [context] section
    context_section = data.get("context", {})
    if isinstance(context_section, dict):
        limit = context_section.get("selected_text_limit")
        if limit is not None:
            val = _validate_int(limit, "selected_text_limit")
            if val is not None:
                _config["selected_text_limit"] = val

        apps = context_section.get("relevant_apps")
        if apps is not None:
            val = _validate_str_list(apps, "relevant_apps")
            if val is not None:
                _config["relevant_apps"] = val

    # [history] section
    history_section = data.get("history", {})
    if isinstance(history_section, dict):
        max_entries = history_section.get("max_entries")
        if max_entries is not None:
            val = _validate_int(max_entries, "max_entries")
            if val is not None:
                _config["history_limit"] = val

        path = history_section.get("path")
        if path is not None:
            if isinstance(path, str) and path.strip():
                _config["storage_path"] = str(Path(path.strip()).expanduser())
            else:
                print("cmdgen: config 'path' must be a non-empty string, ignoring", file=sys.stderr)

    # [delivery] section
    delivery_section = data.get("delivery", {})
    if isinstance(delivery_section, dict):
        target = delivery_section.get("paste_target")
        if target is not None:
            if isinstance(target, str) and target in VALID_PASTE_TARGETS:
                _config["paste_target"] = target
            else:
                print(f"cmdgen: unknown paste_target '{target}', ignoring", file=sys.stderr)

    # [debug] section
    debug_section = data.get("debug", {})
    if isinstance(debug_section, dict):
        enabled = debug_section.get("enabled")
        if isinstance(enabled, bool):
            _config["debug"] = enabled

    logger.debug("Loaded config: %s", _config)
    return _config


def get(key: str) -> Any:
    """Get a config value by key."""
    cfg = load_config()
    return cfg.get(key, DEFAULTS.get(key))


def reset():
    """Reset loaded config (for testing)."""
    global _config, _loaded
    _config = {}
    _loaded = False
