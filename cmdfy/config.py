"""
Configuration management for cmdfy
"""

import os
import json
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, ValidationError
from rich.console import Console
from rich.table import Table

from cmdfy.core.errors import ConfigError, ProviderInitError
from cmdfy.core.models import ProviderSettings

console = Console()

DEFAULT_CONFIG_DIR = Path.home() / ".cmdfy"

# Extra environment variables accepted for a provider's key
API_KEY_ALIASES = {
    'gemini': ('GOOGLE_API_KEY',),
}


class Config(BaseModel):
    """Configuration model for cmdfy"""

    model_config = ConfigDict(validate_assignment=True, arbitrary_types_allowed=True)

    # Default settings
    current_provider: str = "gemini"
    providers: Dict[str, ProviderSettings] = {}
    log_level: str = "warning"
    timeout: float = 30.0
    history_limit: int = 5

    # Paths
    config_file: Path = DEFAULT_CONFIG_DIR / "config.json"

    @property
    def config_dir(self) -> Path:
        return self.config_file.parent

    @property
    def log_file(self) -> Path:
        return self.config_dir / "cmdfy.log"

    @property
    def history_file(self) -> Path:
        return self.config_dir / "brain.jsonl"

    @classmethod
    def load(cls, config_file: Optional[Path] = None, use_env: bool = True) -> "Config":
        """Load configuration from file and environment"""
        config = cls(config_file=config_file) if config_file else cls()
        config.load_from_file()
        if use_env:
            config.load_from_env()
        return config

    def ensure_config_dir(self) -> None:
        """Create config directory if it doesn't exist"""
        self.config_dir.mkdir(parents=True, exist_ok=True)

    def load_from_file(self) -> None:
        """Load configuration from JSON file; a missing file keeps the defaults"""
        if not self.config_file.exists():
            return

        try:
            with open(self.config_file, 'r') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"failed to parse config file {self.config_file}: {e}") from e
        except OSError as e:
            raise ConfigError(f"failed to read config file {self.config_file}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"config file {self.config_file} must contain a JSON object")

        try:
            for key, value in data.items():
                if key in type(self).model_fields and key != 'config_file':
                    setattr(self, key, value)
        except ValidationError as e:
            raise ConfigError(f"invalid config file {self.config_file}: {e}") from e

    def load_from_env(self) -> None:
        """Load configuration from environment variables"""
        # Load .env file if it exists
        load_dotenv()

        # Map of environment variables to config keys
        env_mapping = {
            'CMDFY_PROVIDER': 'current_provider',
            'CMDFY_LOG_LEVEL': 'log_level',
            'CMDFY_TIMEOUT': 'timeout',
        }

        try:
            for env_var, config_key in env_mapping.items():
                value = os.getenv(env_var)
                if value:
                    setattr(self, config_key, value)
        except ValidationError as e:
            raise ConfigError(f"invalid environment override: {e}") from e

    def save_to_file(self) -> None:
        """Save current configuration to JSON file"""
        config_data = {
            'current_provider': self.current_provider,
            'providers': {
                name: settings.model_dump() for name, settings in self.providers.items()
            },
            'log_level': self.log_level,
            'timeout': self.timeout,
            'history_limit': self.history_limit,
        }

        try:
            self.ensure_config_dir()
            with open(self.config_file, 'w') as f:
                json.dump(config_data, f, indent=2)
            # Keys live in here
            os.chmod(self.config_file, 0o600)
        except OSError as e:
            raise ConfigError(f"failed to write config file {self.config_file}: {e}") from e

    def get_current_provider(self) -> str:
        """Get the default LLM provider"""
        if not self.current_provider:
            raise ConfigError(
                "No provider configured. Run 'cmdfy config set --provider <name> --key <key>' or use --provider."
            )
        return self.current_provider

    def is_configured(self, name: str) -> bool:
        return name in self.providers or name == self.current_provider

    def get_api_key(self, provider: str) -> str:
        """API key from the config file, falling back to <NAME>_API_KEY"""
        settings = self.providers.get(provider)
        if settings and settings.api_key:
            return settings.api_key

        for env_var in (f"{provider.upper()}_API_KEY",) + API_KEY_ALIASES.get(provider, ()):
            value = os.getenv(env_var)
            if value:
                return value
        return ""

    def provider_settings(self, name: str) -> ProviderSettings:
        settings = self.providers.get(name) or ProviderSettings()
        return settings.model_copy(update={'api_key': self.get_api_key(name)})

    def resolve_credentials(self, name: str, requires_api_key: bool = True) -> ProviderSettings:
        """Settings for `name`, or ProviderInitError when no key can be found"""
        settings = self.provider_settings(name)
        if requires_api_key and not settings.api_key:
            raise ProviderInitError(
                f"No API key found for provider '{name}'. "
                f"Set it with 'cmdfy config set' or the {name.upper()}_API_KEY env var.",
                name
            )
        return settings

    def set_provider(
        self,
        name: str,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None
    ) -> None:
        """Update a provider's settings, make it current and save"""
        settings = self.providers.get(name) or ProviderSettings()
        updates = {
            key: value for key, value in
            (('api_key', api_key), ('base_url', base_url), ('model', model))
            if value
        }
        providers = dict(self.providers)
        providers[name] = settings.model_copy(update=updates)
        self.providers = providers
        self.current_provider = name
        self.save_to_file()

    def show(self) -> None:
        """Display current configuration"""
        table = Table(title="cmdfy Configuration")
        table.add_column("Setting", style="cyan")
        table.add_column("Value", style="green")
        table.add_column("Source", style="dim")

        table.add_row(
            "Current Provider",
            self.current_provider or "[dim]Not set[/dim]",
            "config" if self.config_file.exists() else "default"
        )
        table.add_row("Log Level", self.log_level, "config")
        table.add_row("Timeout", f"{self.timeout:g}s", "config")

        for name, settings in sorted(self.providers.items()):
            key = self.get_api_key(name)
            table.add_row(f"{name} API Key", mask_key(key) if key else "[dim]Not set[/dim]", "config")
            if settings.model:
                table.add_row(f"{name} Model", settings.model, "config")
            if settings.base_url:
                table.add_row(f"{name} Base URL", settings.base_url, "config")

        table.add_row("Config File", str(self.config_file), "system")
        table.add_row("Log File", str(self.log_file), "system")
        table.add_row("History File", str(self.history_file), "system")

        console.print(table)


def mask_key(key: str) -> str:
    return f"{key[:8]}{'*' * (len(key) - 8)}" if len(key) > 8 else "***"
