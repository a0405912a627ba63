"""Unit tests for configuration management."""

from pathlib import Path

import pytest

from snapshell.config import (
    ConfigurationError,
    LLMProvider,
    LogLevel,
    Mode,
    ReasoningLevel,
    SnapshellConfig,
    apply_system_overrides,
    get_config_paths,
    load_configuration,
    load_environment_variables,
    save_config,
    validate_api_setup,
)


class TestSnapshellConfig:
    """Test the SnapshellConfig class."""

    def test_default_configuration(self):
        """Test default configuration values."""
        config = SnapshellConfig()

        assert config.llm_provider == LLMProvider.OPENROUTER
        assert config.openrouter_model == "openai/gpt-oss-20b"
        assert config.reasoning == ReasoningLevel.LOW
        assert config.mode == Mode.SINGLE
        assert config.show_reasoning is False
        assert config.copy_to_clipboard is True
        assert config.history_enabled is True
        assert config.history_file == Path.home() / ".snapshell" / "history.jsonl"

    def test_history_file_from_string(self, temp_dir):
        config = SnapshellConfig(history_file=str(temp_dir / "h.jsonl"))

        assert config.history_file == temp_dir / "h.jsonl"

    def test_mode_follows_multiline_flag(self):
        assert SnapshellConfig(multiline=True).mode == Mode.MULTILINE

    def test_choices_are_case_insensitive(self):
        config = SnapshellConfig(reasoning="HIGH", llm_provider="OpenAI")

        assert config.reasoning == ReasoningLevel.HIGH
        assert config.llm_provider == LLMProvider.OPENAI

    def test_get_current_model(self):
        """Test getting current model for different providers."""
        config = SnapshellConfig(openrouter_model="meta/llama")
        assert config.get_current_model() == "meta/llama"

        config = SnapshellConfig(llm_provider=LLMProvider.OPENAI, openai_model="gpt-5-mini")
        assert config.get_current_model() == "gpt-5-mini"

    def test_set_current_model(self):
        config = SnapshellConfig()
        config.set_current_model("x-ai/grok")
        assert config.openrouter_model == "x-ai/grok"

        config.llm_provider = LLMProvider.OPENAI
        config.set_current_model("gpt-5")
        assert config.openai_model == "gpt-5"

    def test_api_keys_are_stripped(self):
        config = SnapshellConfig(openrouter_api_key="  key  ")

        assert config.get_current_api_key() == "key"

    def test_validate_current_setup(self):
        """Test configuration validation."""
        assert SnapshellConfig(openrouter_api_key="valid-key").validate_current_setup() is True
        assert SnapshellConfig(openrouter_api_key=None).validate_current_setup() is False
        assert SnapshellConfig(openrouter_api_key="").validate_current_setup() is False

    def test_validate_api_setup_raises(self):
        with pytest.raises(ConfigurationError, match="SNAPSHELL_OPENROUTER_API_KEY"):
            validate_api_setup(SnapshellConfig())

        validate_api_setup(SnapshellConfig(openrouter_api_key="key"))


class TestSystemOverrides:
    """Test system instruction override resolution."""

    def test_no_override(self):
        assert SnapshellConfig().get_system_override(Mode.SINGLE) is None

    def test_specific_beats_generic(self):
        config = SnapshellConfig(system="generic", system_multiline="multi")

        assert config.get_system_override(Mode.MULTILINE) == "multi"
        assert config.get_system_override(Mode.SINGLE) == "generic"

    def test_cli_specific_beats_everything(self):
        config = SnapshellConfig(system="env generic", system_single="env single")
        apply_system_overrides(config, system="cli generic", system_single="cli single")

        assert config.get_system_override(Mode.SINGLE) == "cli single"
        assert config.get_system_override(Mode.MULTILINE) == "cli generic"

    def test_cli_generic_beats_configured_specific(self):
        config = SnapshellConfig(system_single="env single", system_multiline="env multi")
        apply_system_overrides(config, system="cli generic")

        assert config.get_system_override(Mode.SINGLE) == "cli generic"
        assert config.get_system_override(Mode.MULTILINE) == "cli generic"

    def test_cli_specific_keeps_configured_generic(self):
        config = SnapshellConfig(system="env generic")
        apply_system_overrides(config, system_multiline="cli multi")

        assert config.get_system_override(Mode.MULTILINE) == "cli multi"
        assert config.get_system_override(Mode.SINGLE) == "env generic"


class TestConfigurationLoading:
    """Test configuration loading from various sources."""

    def test_load_environment_variables(self, monkeypatch):
        """Test loading configuration from environment variables."""
        monkeypatch.setenv("SNAPSHELL_LLM_PROVIDER", "openai")
        monkeypatch.setenv("SNAPSHELL_SYSTEM", "Use zsh.")
        monkeypatch.setenv("SNAPSHELL_COPY_TO_CLIPBOARD", "false")
        monkeypatch.setenv("SNAPSHELL_MULTILINE", "yes")

        env_config = load_environment_variables()

        assert env_config["llm_provider"] == "openai"
        assert env_config["system"] == "Use zsh."
        assert env_config["copy_to_clipboard"] is False
        assert env_config["multiline"] is True
        assert env_config["openrouter_api_key"] == "test-key-openrouter"

    def test_environment_overrides_reach_config(self, monkeypatch):
        monkeypatch.setenv("SNAPSHELL_SYSTEM_MULTILINE", "Write fish scripts.")
        monkeypatch.setenv("SNAPSHELL_REASONING", "medium")
        monkeypatch.setenv("SNAPSHELL_REQUEST_TIMEOUT", "15")

        config = load_configuration()

        assert config.openrouter_api_key == "test-key-openrouter"
        assert config.system_multiline == "Write fish scripts."
        assert config.reasoning == ReasoningLevel.MEDIUM
        assert config.request_timeout == 15.0

    def test_load_configuration_with_overrides(self):
        """Test configuration loading with parameter overrides."""
        config = load_configuration(debug=True, model_override="qwen/qwen3-coder")

        assert config.show_debug is True
        assert config.openrouter_model == "qwen/qwen3-coder"

    def test_config_file_is_read(self, temp_dir):
        config_path = temp_dir / "custom.toml"
        config_path.write_text('openrouter_model = "mistral/devstral"\nmultiline = true\n')

        config = load_configuration(config_file=str(config_path))

        assert config.openrouter_model == "mistral/devstral"
        assert config.mode == Mode.MULTILINE

    def test_environment_beats_config_file(self, temp_dir, monkeypatch):
        config_path = temp_dir / "custom.toml"
        config_path.write_text('openrouter_model = "from/file"\n')
        monkeypatch.setenv("SNAPSHELL_OPENROUTER_MODEL", "from/env")

        config = load_configuration(config_file=str(config_path))

        assert config.openrouter_model == "from/env"

    def test_broken_config_file_raises(self, temp_dir):
        config_path = temp_dir / "broken.toml"
        config_path.write_text("this is = = not toml")

        with pytest.raises(ConfigurationError):
            load_configuration(config_file=str(config_path))

    def test_invalid_value_raises(self, monkeypatch):
        monkeypatch.setenv("SNAPSHELL_REASONING", "extreme")

        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            load_configuration()

    def test_default_config_file_is_written_without_secrets(self):
        load_configuration()

        written = Path.home() / ".snapshell" / "config.toml"
        assert written.exists()
        content = written.read_text()
        assert 'openrouter_model = "openai/gpt-oss-20b"' in content
        assert "api_key" not in content

    def test_first_run_does_not_persist_flags_or_environment(self, monkeypatch):
        monkeypatch.setenv("SNAPSHELL_SYSTEM", "temporary override")
        first = load_configuration(debug=True)
        assert first.show_debug is True
        assert first.system == "temporary override"

        monkeypatch.delenv("SNAPSHELL_SYSTEM")
        second = load_configuration()

        assert second.show_debug is False
        assert second.log_level == LogLevel.WARNING
        assert second.system is None
        content = (Path.home() / ".snapshell" / "config.toml").read_text()
        assert "temporary override" not in content
        assert "show_debug = false" in content

    def test_save_and_load_config(self, temp_dir):
        """Test saving and loading configuration files."""
        config = SnapshellConfig(
            llm_provider=LLMProvider.OPENAI,
            openai_model="gpt-5-mini",
            openai_api_key="secret",
            copy_to_clipboard=False,
        )
        config_path = temp_dir / "test_config.toml"

        assert save_config(config, config_path) is True

        content = config_path.read_text()
        assert 'llm_provider = "openai"' in content
        assert 'openai_model = "gpt-5-mini"' in content
        assert "copy_to_clipboard = false" in content
        assert "secret" not in content

    def test_get_config_paths(self):
        """Test getting configuration file paths."""
        paths = get_config_paths()

        assert len(paths) >= 1
        assert all(isinstance(p, Path) for p in paths)
        assert any(p.name == "config.toml" for p in paths)

    def test_load_standard_api_keys_from_env(self, monkeypatch):
        """Test that standard API keys are loaded from the environment."""
        monkeypatch.delenv("SNAPSHELL_OPENROUTER_API_KEY", raising=False)
        monkeypatch.setenv("OPENROUTER_API_KEY", "test-openrouter-key")
        monkeypatch.setenv("OPENAI_API_KEY", "test-openai-key")

        config = load_configuration()

        assert config.openrouter_api_key == "test-openrouter-key"
        assert config.openai_api_key == "test-openai-key"


class TestEnums:
    """Test the configuration enums."""

    def test_provider_creation_from_string(self):
        assert LLMProvider("openrouter") == LLMProvider.OPENROUTER
        assert LLMProvider("openai") == LLMProvider.OPENAI

        with pytest.raises(ValueError):
            LLMProvider("invalid_provider")

    def test_reasoning_levels(self):
        assert [level.value for level in ReasoningLevel] == ["low", "medium", "high"]
