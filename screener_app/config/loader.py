"""Configuration loader with 3-tier parameter precedence."""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

import yaml

from ..errors import ConfigurationError
from .defaults import (
    AcquisitionParams,
    DefaultConfig,
    EvaluationParams,
    IndicatorParams,
    PipelineParams,
    ProviderParams,
    QualityParams,
    SessionParams,
    TimeframeParams,
    get_default_config,
)
from .validation import ConfigValidator

CONFIG_FILENAME = "screener.yaml"

_SECTION_TYPES: dict[str, type] = {
    "timeframes": TimeframeParams,
    "indicators": IndicatorParams,
    "acquisition": AcquisitionParams,
    "session": SessionParams,
    "quality": QualityParams,
    "evaluation": EvaluationParams,
    "pipeline": PipelineParams,
    "provider": ProviderParams,
}


@dataclass(frozen=True)
class ConfigLoader:
    """Manages configuration loading with 3-tier precedence."""

    config_dir: Path
    defaults: DefaultConfig

    @classmethod
    def create(cls, config_dir: Optional[Path] = None) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent / "config"

        return cls(
            config_dir=Path(config_dir),
            defaults=get_default_config(),
        )

    def load_file_config(self) -> dict[str, Any]:
        """Load the on-disk configuration file, empty if absent."""
        config_file = self.config_dir / CONFIG_FILENAME

        if not config_file.exists():
            return {}

        with open(config_file) as f:
            file_config = yaml.safe_load(f)

        return file_config or {}

    def merge_config(
        self,
        ticker: Optional[str] = None,
        overrides: Optional[dict[str, Any]] = None
    ) -> dict[str, Any]:
        """
        Merge configuration with 3-tier precedence.

        Priority order:
        1. Explicit overrides (highest priority)
        2. Configuration file, with its per-ticker section applied on top
        3. Global defaults (lowest priority)
        """
        config = self._dataclass_to_dict(self.defaults)

        file_config = dict(self.load_file_config())
        ticker_sections = file_config.pop("tickers", None) or {}
        config = self._deep_merge(config, file_config)

        if ticker:
            config = self._deep_merge(config, ticker_sections.get(ticker.upper(), {}))

        if overrides:
            config = self._deep_merge(config, overrides)

        return config

    def load_config(
        self,
        ticker: Optional[str] = None,
        overrides: Optional[dict[str, Any]] = None
    ) -> DefaultConfig:
        """
        Build a validated DefaultConfig from the merged configuration.

        Raises:
            ConfigurationError: If any parameter fails validation
        """
        merged = self.merge_config(ticker, overrides)

        errors = ConfigValidator.validate_config(merged)
        if errors:
            summary = "; ".join(f"{err.field}: {err.message}" for err in errors)
            raise ConfigurationError(f"Invalid configuration: {summary}", errors=errors)

        return self._dict_to_config(merged)

    def _dict_to_config(self, config: dict[str, Any]) -> DefaultConfig:
        """Convert a merged dictionary back into frozen dataclasses."""
        sections = {}
        for section_name, section_type in _SECTION_TYPES.items():
            values = dict(config.get(section_name) or {})
            known = {field.name for field in fields(section_type)}
            unknown = sorted(set(values) - known)
            if unknown:
                raise ConfigurationError(
                    f"Unknown parameters in '{section_name}': {', '.join(unknown)}",
                    context={"section": section_name, "unknown": unknown}
                )
            for field in fields(section_type):
                if isinstance(values.get(field.name), list):
                    values[field.name] = tuple(values[field.name])
            sections[section_name] = section_type(**values)
        return DefaultConfig(**sections)

    def _dataclass_to_dict(self, obj: Any) -> dict[str, Any]:
        """Convert nested dataclasses to dictionary."""
        if hasattr(obj, '__dataclass_fields__'):
            result = {}
            for field_name, _field in obj.__dataclass_fields__.items():
                value = getattr(obj, field_name)
                if hasattr(value, '__dataclass_fields__'):
                    result[field_name] = self._dataclass_to_dict(value)
                else:
                    result[field_name] = value
            return result
        return obj  # type: ignore[no-any-return]

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result


def load_config(
    config_dir: Optional[Path] = None,
    overrides: Optional[dict[str, Any]] = None
) -> DefaultConfig:
    """Load the validated configuration from ``config_dir`` (or the project default)."""
    return ConfigLoader.create(config_dir).load_config(overrides=overrides)
