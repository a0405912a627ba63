"""Configuration management for snapshell with multi-source loading."""

import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import toml
from pydantic import BaseModel, Field, ValidationError, field_validator


class LogLevel(str, Enum):
    """Available logging levels."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LLMProvider(str, Enum):
    """Available LLM providers."""

    OPENROUTER = "openrouter"
    OPENAI = "openai"


class Mode(str, Enum):
    """Output shape requested from the model."""

    SINGLE = "single"
    MULTILINE = "multiline"


class ReasoningLevel(str, Enum):
    """Reasoning effort hint forwarded to the model."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


DEFAULT_OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"

# Secrets are never written back to disk
SECRET_FIELDS = {"openrouter_api_key", "openai_api_key"}


class SnapshellConfig(BaseModel):
    """Main configuration class with validation and multi-source loading."""

    # LLM Configuration
    llm_provider: LLMProvider = Field(
        default=LLMProvider.OPENROUTER, description="Default LLM provider"
    )
    openrouter_api_key: Optional[str] = Field(
        default=None, description="OpenRouter API key"
    )
    openrouter_model: str = Field(
        default="openai/gpt-oss-20b", description="Default OpenRouter model"
    )
    openrouter_base_url: str = Field(
        default=DEFAULT_OPENROUTER_BASE_URL, description="OpenRouter API base URL"
    )
    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API key")
    openai_model: str = Field(default="gpt-5-nano", description="Default OpenAI model")
    request_timeout: float = Field(
        default=60.0, description="Model request timeout in seconds"
    )
    max_completion_tokens: int = Field(
        default=2048, description="Upper bound on generated tokens"
    )

    # Generation Configuration
    reasoning: ReasoningLevel = Field(
        default=ReasoningLevel.LOW, description="Reasoning effort hint"
    )
    show_reasoning: bool = Field(
        default=False, description="Ask the model for a trailing reasoning line"
    )
    multiline: bool = Field(
        default=False, description="Allow multi-line shell scripts"
    )
    system: Optional[str] = Field(
        default=None, description="System instruction override for both modes"
    )
    system_single: Optional[str] = Field(
        default=None, description="System instruction override for single-line mode"
    )
    system_multiline: Optional[str] = Field(
        default=None, description="System instruction override for multiline mode"
    )

    # History Configuration
    history_enabled: bool = Field(default=True, description="Record generated commands")
    history_file: Optional[Path] = Field(
        default=None,
        validate_default=True,
        description="History file location (JSON lines)",
    )

    # Output Configuration
    copy_to_clipboard: bool = Field(
        default=True, description="Copy generated commands to the clipboard"
    )
    show_debug: bool = Field(default=False, description="Show debug information")
    log_level: LogLevel = Field(default=LogLevel.WARNING, description="Logging level")

    @field_validator("history_file", mode="before")
    @classmethod
    def set_default_history_file(cls, v):
        """Set default history file if not provided."""
        if v is None:
            return Path.home() / ".snapshell" / "history.jsonl"
        return Path(v).expanduser() if isinstance(v, str) else v

    @field_validator("openrouter_api_key", "openai_api_key", mode="before")
    @classmethod
    def validate_api_keys(cls, v):
        """Validate and sanitize API keys."""
        if v and isinstance(v, str):
            return v.strip()
        return v

    @field_validator("reasoning", "llm_provider", "log_level", mode="before")
    @classmethod
    def lowercase_choices(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @property
    def mode(self) -> Mode:
        """Output mode selected by the multiline flag."""
        return Mode.MULTILINE if self.multiline else Mode.SINGLE

    def get_current_model(self) -> str:
        """Get the current model for the selected provider."""
        if self.llm_provider == LLMProvider.OPENROUTER:
            return self.openrouter_model
        elif self.llm_provider == LLMProvider.OPENAI:
            return self.openai_model
        else:
            raise ValueError(f"Unknown provider: {self.llm_provider}")

    def set_current_model(self, model: str) -> None:
        """Override the model of the selected provider."""
        if self.llm_provider == LLMProvider.OPENROUTER:
            self.openrouter_model = model
        else:
            self.openai_model = model

    def get_current_api_key(self) -> Optional[str]:
        """Get the API key for the current provider."""
        if self.llm_provider == LLMProvider.OPENROUTER:
            return self.openrouter_api_key
        elif self.llm_provider == LLMProvider.OPENAI:
            return self.openai_api_key
        else:
            raise ValueError(f"Unknown provider: {self.llm_provider}")

    def validate_current_setup(self) -> bool:
        """Validate that current provider has necessary configuration."""
        api_key = self.get_current_api_key()
        return api_key is not None and len(api_key.strip()) > 0

    def get_system_override(self, mode: Mode) -> Optional[str]:
        """Return the configured system instruction for ``mode``, if any.

        A mode-specific override wins over the generic one.
        """
        specific = self.system_multiline if mode == Mode.MULTILINE else self.system_single
        if specific:
            return specific
        return self.system or None


def get_config_paths() -> List[Path]:
    """Get configuration file paths in priority order."""
    paths = []

    # User config directory
    user_config_dir = Path.home() / ".snapshell"
    paths.append(user_config_dir / "config.toml")

    # System config directory
    if os.name == "posix":  # Unix/Linux/macOS
        paths.append(Path("/etc/snapshell/config.toml"))
    elif os.name == "nt":  # Windows
        paths.append(
            Path(os.environ.get("ProgramData", "C:/ProgramData"))
            / "snapshell"
            / "config.toml"
        )

    return paths


def load_config_file(config_path: Path) -> Dict[str, Any]:
    """Load configuration from a TOML file."""
    if not config_path.exists():
        return {}
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            return toml.load(f)
    except (OSError, toml.TomlDecodeError) as e:
        raise ConfigurationError(f"Cannot read config file {config_path}: {e}") from e


def load_environment_variables() -> Dict[str, Any]:
    """Load configuration from environment variables."""
    config = {}
    prefix = "SNAPSHELL_"

    for key, value in os.environ.items():
        if key.startswith(prefix):
            config_key = key[len(prefix) :].lower()

            # Handle boolean values
            if value.lower() in ("true", "1", "yes", "on"):
                config[config_key] = True
            elif value.lower() in ("false", "0", "no", "off"):
                config[config_key] = False
            else:
                config[config_key] = value

    return config


def load_configuration(
    config_file: Optional[str] = None,
    debug: bool = False,
    model_override: Optional[str] = None,
) -> SnapshellConfig:
    """Load configuration from multiple sources with priority handling.

    Priority order (highest to lowest):
    1. Function parameters (config_file, debug, model_override)
    2. Environment variables (SNAPSHELL_*)
    3. User config file (~/.snapshell/config.toml)
    4. System config file (/etc/snapshell/config.toml)
    5. Default values
    """
    primary_config_path = Path.home() / ".snapshell" / "config.toml"

    merged_config: Dict[str, Any] = {}
    config_loaded_from_file = False

    # Load from config files (lowest priority)
    config_paths = get_config_paths()
    if config_file:
        config_paths.insert(0, Path(config_file))

    for path in reversed(config_paths):  # Reverse to maintain priority
        file_config = load_config_file(path)
        if file_config:
            merged_config.update(file_config)
            config_loaded_from_file = True

    # Load from environment variables (higher priority)
    merged_config.update(load_environment_variables())

    # Apply function parameters (highest priority)
    if debug:
        merged_config["show_debug"] = True
        merged_config["log_level"] = LogLevel.DEBUG

    try:
        config = SnapshellConfig(**merged_config)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e

    if model_override:
        config.set_current_model(model_override)

    # Provider-standard key names are a fallback for the prefixed ones
    if not config.openrouter_api_key:
        config.openrouter_api_key = os.environ.get("OPENROUTER_API_KEY")

    if not config.openai_api_key:
        config.openai_api_key = os.environ.get("OPENAI_API_KEY")

    if not config_loaded_from_file:
        # Only defaults are written; env values and flags stay per-invocation
        save_config(SnapshellConfig(), primary_config_path)

    return config


def save_config(config: SnapshellConfig, config_path: Optional[Path] = None) -> bool:
    """Save configuration to file."""
    if config_path is None:
        config_path = Path.home() / ".snapshell" / "config.toml"

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)

        config_dict = config.model_dump(exclude_none=True, exclude=SECRET_FIELDS)

        # Convert enums and paths for TOML serialization
        for key, value in config_dict.items():
            if isinstance(value, Enum):
                config_dict[key] = value.value
            elif isinstance(value, Path):
                config_dict[key] = str(value)

        with open(config_path, "w", encoding="utf-8") as f:
            toml.dump(config_dict, f)

        return True

    except OSError:
        return False


def apply_system_overrides(
    config: SnapshellConfig,
    system: Optional[str] = None,
    system_single: Optional[str] = None,
    system_multiline: Optional[str] = None,
) -> None:
    """Apply command-line system instructions on top of loaded configuration.

    Command-line values outrank anything from files or the environment, so a
    generic ``--system`` also hides mode-specific values that came from there.
    """
    if system is not None:
        config.system = system
        config.system_single = system_single
        config.system_multiline = system_multiline
        return
    if system_single is not None:
        config.system_single = system_single
    if system_multiline is not None:
        config.system_multiline = system_multiline


class ConfigurationError(Exception):
    """Configuration-related errors."""

    pass


def validate_api_setup(config: SnapshellConfig) -> None:
    """Validate that API setup is correct for current provider."""
    if not config.validate_current_setup():
        provider = config.llm_provider.value
        env_var = f"SNAPSHELL_{provider.upper()}_API_KEY"
        raise ConfigurationError(
            f"No API key configured for {provider}. "
            f"Set {env_var} environment variable or add to config file."
        )
