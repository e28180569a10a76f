"""
Engine settings.

settings.yaml is read once per process and served by dot-path key:

    get_config("augmentation.min_line_items", 4)

The sections the engine sizes its caps, thresholds and time budgets from
are checked on load, so a bad value stops the process at startup rather
than surfacing halfway through a job.
"""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

SETTINGS_FILE = Path(__file__).parent / "settings.yaml"
PROJECT_ROOT = Path(__file__).parent.parent

# Every key in these sections is a count, cap or threshold
POSITIVE_SECTIONS = ("limits", "augmentation")
POSITIVE_KEYS = {
    "providers": ("timeout_seconds", "connect_timeout_seconds", "max_tokens"),
    "local_extractor": ("timeout_seconds",),
    "input": ("max_workers",),
}
PROVIDER_IDS = ("openai", "anthropic", "google")


class ConfigurationError(ValueError):
    """Raised when settings.yaml holds a value the engine cannot run with."""


def _require_positive(source: Path, dotted: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigurationError(f"{source}: {dotted} must be a positive number, got {value!r}")


def _section(source: Path, settings: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = settings.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"{source}: '{name}' must be a mapping")
    return section


def validate_settings(settings: Dict[str, Any], source: Path) -> None:
    """
    Check the numeric and provider sections of a settings mapping.

    Missing sections are fine; every caller carries a code default.

    Raises:
        ConfigurationError: On a non-positive or non-numeric limit,
            threshold or budget, or a provider without endpoint and model.
    """
    for name in POSITIVE_SECTIONS:
        for key, value in _section(source, settings, name).items():
            _require_positive(source, f"{name}.{key}", value)

    for name, keys in POSITIVE_KEYS.items():
        section = _section(source, settings, name)
        for key in keys:
            if key in section:
                _require_positive(source, f"{name}.{key}", section[key])

    providers = _section(source, settings, "providers")
    for provider_id in PROVIDER_IDS:
        entry = providers.get(provider_id)
        if entry is None:
            continue
        if not isinstance(entry, dict) or not entry.get("endpoint") or not entry.get("model"):
            raise ConfigurationError(f"{source}: providers.{provider_id} needs an endpoint and a model")


class ConfigurationManager:
    """
    Process-wide settings singleton.

    The first construction loads the file; later constructions return
    the same instance whatever path they pass. Tests call reset() to
    start over.

    Attributes:
        config_path: File the settings were loaded from

    Example:
        >>> ConfigurationManager().get("providers.timeout_seconds")
        60
    """

    _instance: Optional['ConfigurationManager'] = None

    def __new__(cls, config_path: Optional[str] = None) -> 'ConfigurationManager':
        if cls._instance is None:
            instance = super().__new__(cls)
            instance._load(Path(config_path) if config_path else SETTINGS_FILE)
            cls._instance = instance
        return cls._instance

    def _load(self, path: Path) -> None:
        if not path.is_file():
            raise FileNotFoundError(f"Configuration file not found: {path}")
        with open(path, 'r', encoding='utf-8') as f:
            settings = yaml.safe_load(f) or {}
        if not isinstance(settings, dict):
            raise ConfigurationError(f"{path}: top level must be a mapping")

        validate_settings(settings, path)

        # Relative paths are anchored at the project root, not the cwd
        paths = _section(path, settings, "paths")
        for key, value in paths.items():
            if value and not Path(value).is_absolute():
                paths[key] = str(PROJECT_ROOT / value)

        self.config_path = path
        self._settings = settings

    def get(self, key: str, default: Any = None) -> Any:
        """Value at a dot-separated key, or default when any part is missing."""
        value: Any = self._settings
        for part in key.split('.'):
            if not isinstance(value, dict) or part not in value:
                return default
            value = value[part]
        return value

    @classmethod
    def reset(cls) -> None:
        """Forget the loaded settings so the next access reloads."""
        cls._instance = None


def get_config(key: str, default: Any = None) -> Any:
    """Shortcut for ConfigurationManager().get(key, default)."""
    return ConfigurationManager().get(key, default)


__all__ = ['ConfigurationError', 'ConfigurationManager', 'get_config', 'validate_settings']
