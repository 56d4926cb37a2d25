"""
Configuration Loader
Loads ledger configuration from various sources
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from medledger.config.ledger_config import LedgerConfig, ENV_VAR_MAPPING
from medledger.config.config_validator import ConfigValidator
from medledger.exceptions import ConfigError


class ConfigLoader:
    """
    ConfigLoader class
    Provides multiple ways to load and merge configuration
    """

    def __init__(self) -> None:
        self._validator = ConfigValidator()

    def from_file(self, path: Union[str, Path]) -> Dict[str, Any]:
        """
        Load configuration from a JSON file

        Args:
            path: Path to JSON configuration file

        Returns:
            Loaded configuration dictionary

        Raises:
            ConfigError: If file not found or invalid JSON
        """
        file_path = Path(path).resolve()

        if not file_path.exists():
            raise ConfigError(
                f"Configuration file not found: {file_path}",
                code="CONFIG_FILE_NOT_FOUND"
            )

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(
                f"Invalid JSON in configuration file: {file_path}",
                code="CONFIG_PARSE_ERROR"
            ) from e

        if not isinstance(config, dict):
            raise ConfigError(
                f"Configuration file must contain a JSON object: {file_path}",
                code="CONFIG_PARSE_ERROR"
            )

        return self._process_relative_paths(config, file_path.parent)

    def from_environment(self) -> Dict[str, Any]:
        """
        Load configuration from environment variables

        Returns:
            Configuration dictionary from environment variables
        """
        config: Dict[str, Any] = {}

        for env_var, config_key in ENV_VAR_MAPPING.items():
            value = os.environ.get(env_var)
            if value is not None and value != "":
                config[config_key] = self._parse_env_value(config_key, value)

        return config

    def from_dict(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Load configuration from a dictionary

        Returns:
            Copy of configuration dictionary
        """
        return config.copy()

    def merge(self, *sources: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge multiple configuration sources
        Priority: later sources override earlier sources

        Args:
            sources: Configuration dictionaries in order of increasing priority

        Returns:
            Merged configuration dictionary
        """
        merged: Dict[str, Any] = {}

        for source in sources:
            merged.update(self._filter_none(source))

        return merged

    def resolve(self, config: Dict[str, Any]) -> LedgerConfig:
        """
        Resolve configuration with defaults and validation

        Args:
            config: Partial configuration dictionary

        Returns:
            Fully resolved LedgerConfig object

        Raises:
            ValidationError: If configuration is invalid
        """
        self._validator.validate_or_raise(config)

        # Pydantic handles defaults
        return LedgerConfig(**config)

    def load(
        self,
        file: Optional[Union[str, Path]] = None,
        env: bool = True,
        config: Optional[Dict[str, Any]] = None,
    ) -> LedgerConfig:
        """
        Load, merge, and resolve configuration from multiple sources

        Args:
            file: Path to JSON configuration file (optional)
            env: Whether to load from environment variables (default: True)
            config: Programmatic configuration dictionary (optional)

        Returns:
            Fully resolved LedgerConfig object
        """
        sources: List[Dict[str, Any]] = []

        if file is not None:
            sources.append(self.from_file(file))

        if env:
            sources.append(self.from_environment())

        if config is not None:
            sources.append(config)

        return self.resolve(self.merge(*sources))

    def create_template(self, path: Union[str, Path]) -> None:
        """
        Create a configuration template file

        Args:
            path: Path to write template
        """
        template = {
            "owner": "YOUR_OWNER_IDENTITY",
            "state_store_path": "./data/ledger-state.json",
            "enable_audit_log": True,
            "audit_signing_key": "./keys/audit-signing.pem",
            "audit_signing_key_password": "",
            "log_level": "INFO",
            "log_json": False,
        }

        file_path = Path(path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        with open(file_path, "w", encoding="utf-8") as f:
            json.dump(template, f, indent=2)

    def _parse_env_value(self, key: str, value: str) -> Any:
        """Parse environment variable value to appropriate type"""
        if key in ("enable_audit_log", "log_json"):
            return value.lower() in ("true", "1", "yes")

        if key == "log_level":
            return value.upper()

        return value

    def _process_relative_paths(
        self, config: Dict[str, Any], base_path: Path
    ) -> Dict[str, Any]:
        """Resolve file paths relative to the config file"""
        processed = config.copy()

        store = processed.get("state_store_path")
        if isinstance(store, str) and store and not Path(store).is_absolute():
            processed["state_store_path"] = str(base_path / store)

        key = processed.get("audit_signing_key")
        if isinstance(key, str) and key and "-----BEGIN" not in key:
            if not Path(key).is_absolute():
                processed["audit_signing_key"] = str(base_path / key)

        # Empty password in a template means "no password"
        if processed.get("audit_signing_key_password") == "":
            processed["audit_signing_key_password"] = None

        return processed

    def _filter_none(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Filter out None values from config dictionary"""
        return {k: v for k, v in config.items() if v is not None}
