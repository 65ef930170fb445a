"""Configuration loader with 3-tier parameter precedence."""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from .defaults import (
    ContractParams,
    DefaultConfig,
    GasParams,
    NetworkParams,
    OrchestratorParams,
    VenueParams,
    get_default_config,
)

VENUE_API_KEY_ENV = "VAULT_VENUE_API_KEY"


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

    def load_network_config(self, network: str) -> dict[str, Any]:
        """Load network-specific configuration overrides."""
        networks_file = self.config_dir / "networks.yaml"

        if not networks_file.exists():
            return {}

        with open(networks_file) as f:
            networks_config = yaml.safe_load(f) or {}

        return networks_config.get("networks", {}).get(network, {}) or {}  # type: ignore[no-any-return]

    def merge_config(
        self,
        network: Optional[str] = None,
        overrides: Optional[dict[str, Any]] = None
    ) -> dict[str, Any]:
        """
        Merge configuration with 3-tier precedence.

        Priority order:
        1. Explicit overrides (highest priority)
        2. Network-specific overrides from networks.yaml
        3. Global defaults (lowest priority)
        """
        network = network or self.defaults.orchestrator.network

        # Start with global defaults
        config = self._dataclass_to_dict(self.defaults)

        # Apply network-specific overrides
        network_config = self.load_network_config(network)
        config = self._deep_merge(config, network_config)

        # Apply explicit overrides
        if overrides:
            config = self._deep_merge(config, overrides)

        config["orchestrator"]["network"] = network
        return config

    def load(
        self,
        network: Optional[str] = None,
        overrides: Optional[dict[str, Any]] = None
    ) -> DefaultConfig:
        """Merge configuration and rebuild the typed config objects."""
        merged = self.merge_config(network, overrides)

        venue = dict(merged["venue"])
        if not venue.get("api_key"):
            venue["api_key"] = os.environ.get(VENUE_API_KEY_ENV) or None

        return DefaultConfig(
            contract=ContractParams(**merged["contract"]),
            gas=GasParams(**merged["gas"]),
            network=NetworkParams(**merged["network"]),
            venue=VenueParams(**venue),
            orchestrator=OrchestratorParams(**merged["orchestrator"]),
        )

    def _dataclass_to_dict(self, obj: Any) -> Any:
        """Convert nested dataclasses and frozen mappings to dictionaries."""
        if hasattr(obj, '__dataclass_fields__'):
            result = {}
            for field_name in obj.__dataclass_fields__:
                result[field_name] = self._dataclass_to_dict(getattr(obj, field_name))
            return result
        if isinstance(obj, Mapping):
            return {key: self._dataclass_to_dict(value) for key, value in obj.items()}
        return obj

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
