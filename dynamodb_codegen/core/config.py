"""
Generator settings.

Settings are layered: dataclass defaults, then an optional JSON file, then
explicit overrides (CLI flags or keyword arguments). Keys the generator does
not know are preserved in ``custom`` rather than rejected.
"""

import json
import keyword
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

PathLike = Union[str, Path]


class ConfigError(Exception):
    """Raised for unreadable or invalid generator settings."""
    pass


MAP_FIELD_POLICIES = ("error", "placeholder")


@dataclass
class GeneratorConfig:
    """Settings of one codec generation run."""

    # Output location
    output_dir: Optional[str] = None
    package_name: str = "generated_codecs"

    # Names of generated artifacts
    codec_suffix: str = "Codec"
    fields_suffix: str = "Fields"
    registry_module: str = "table_name_resolver"

    # Classification policy
    strict_classification: bool = True
    map_fields: str = "error"  # one of MAP_FIELD_POLICIES

    # Which auxiliary artifacts to write
    generate_fields: bool = True
    generate_registry: bool = True
    generate_wiring: bool = True

    # "DO NOT EDIT" headers
    add_comments: bool = True

    custom: Dict[str, Any] = field(default_factory=dict)


_KNOWN_KEYS = frozenset(f.name for f in fields(GeneratorConfig))


class ConfigManager:
    """Loads, merges, validates and saves generator settings."""

    def get_config(
        self,
        custom_config: Optional[Dict[str, Any]] = None,
        config_file: Optional[PathLike] = None,
    ) -> GeneratorConfig:
        """
        Merge defaults, the config file and overrides, in that order.

        Args:
            custom_config: Explicit overrides
            config_file: JSON settings file

        Returns:
            GeneratorConfig (not validated, see ``validate_config``)
        """
        merged: Dict[str, Any] = {}
        if config_file:
            merged.update(self._read_json(Path(config_file)))
        merged.update(custom_config or {})
        return self._build(merged)

    @staticmethod
    def _read_json(path: Path) -> Dict[str, Any]:
        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")
        if path.suffix.lower() != ".json":
            raise ConfigError(f"Configuration file must be JSON: {path}")

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in configuration file {path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Cannot read configuration file {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Configuration file must contain a JSON object: {path}")
        return data

    @staticmethod
    def _build(settings: Dict[str, Any]) -> GeneratorConfig:
        known = {key: value for key, value in settings.items() if key in _KNOWN_KEYS}
        unknown = {key: value for key, value in settings.items() if key not in _KNOWN_KEYS}

        custom = dict(known.pop("custom", None) or {})
        custom.update(unknown)
        return GeneratorConfig(custom=custom, **known)

    def save_config(self, config: GeneratorConfig, output_path: PathLike):
        """Write settings as JSON; ``custom`` entries are stored as top-level keys."""
        data = asdict(config)
        data.update(data.pop("custom"))
        path = Path(output_path)
        try:
            path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Failed to save configuration to {path}: {e}") from e

    def validate_config(self, config: GeneratorConfig) -> List[str]:
        """Return a list of problems; empty when the settings are usable."""
        problems = []

        if not all(
            part.isidentifier() and not keyword.iskeyword(part)
            for part in config.package_name.split(".")
        ):
            problems.append(f"Invalid package name: {config.package_name}")

        if not config.registry_module.isidentifier():
            problems.append(f"Invalid registry module name: {config.registry_module}")

        for name in ("codec_suffix", "fields_suffix"):
            suffix = getattr(config, name)
            if not suffix.isidentifier():
                problems.append(f"Invalid {name}: {suffix!r}")

        if config.map_fields not in MAP_FIELD_POLICIES:
            problems.append(
                f"Invalid map_fields: {config.map_fields} "
                f"(expected one of {', '.join(MAP_FIELD_POLICIES)})"
            )

        return problems


_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """Return the process-wide ConfigManager."""
    global _manager
    if _manager is None:
        _manager = ConfigManager()
    return _manager


def load_config(
    custom_config: Optional[Dict[str, Any]] = None,
    config_file: Optional[PathLike] = None,
) -> GeneratorConfig:
    """
    Load and validate settings.

    Raises:
        ConfigError: If the file is unreadable or the merged settings are invalid
    """
    manager = get_config_manager()
    config = manager.get_config(custom_config, config_file)
    problems = manager.validate_config(config)
    if problems:
        raise ConfigError("; ".join(problems))
    return config
