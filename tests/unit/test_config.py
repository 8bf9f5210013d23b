# tests/unit/test_config.py
"""Tests for config schema, YAML loading, env overrides and validation."""

from unittest.mock import AsyncMock, MagicMock

import pytest
import yaml

from dialect_bridge.backend.factory import create_orchestrator, create_registry
from dialect_bridge.capabilities import Dialect
from dialect_bridge.config import (
    BridgeConfig,
    check_setup,
    ensure_valid,
    env_overrides,
    load_config,
    validate_config,
)
from dialect_bridge.errors import ConfigurationError, ConnectivityError


class TestBridgeConfigDefaults:
    def test_defaults(self):
        config = BridgeConfig()
        assert config.base_url == "http://localhost:11434"
        assert config.api_prefix == "/api"
        assert config.default_model == "qwen2.5-coder:32b"
        assert config.timeout_ms == 120_000
        assert config.max_retries == 3
        assert config.generation.temperature == 0.7
        assert config.validator.suspicious_name_tokens == ["follow", "next"]

    def test_unknown_keys_ignored(self):
        config = BridgeConfig(**{"base_url": "http://x:1", "mystery": True})
        assert config.base_url == "http://x:1"


class TestLoadConfig:
    def test_creates_default_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        config = load_config(path, environ={})

        assert path.exists()
        assert config == BridgeConfig()
        assert yaml.safe_load(path.read_text())["default_model"] == "qwen2.5-coder:32b"

    def test_reads_existing_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            yaml.safe_dump(
                {
                    "default_model": "llama3.1:latest",
                    "generation": {"temperature": 0.2},
                    "capability_overrides": {"my-model": {"supports_tools": True, "max_tools": 4}},
                }
            )
        )
        config = load_config(path, environ={})

        assert config.default_model == "llama3.1:latest"
        assert config.generation.temperature == 0.2
        assert config.generation.top_p == 0.9
        assert config.capability_overrides["my-model"].max_tools == 4

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_config(path, environ={}) == BridgeConfig()

    def test_precedence_explicit_over_env_over_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({"default_model": "from-file", "timeout_ms": 1000}))
        environ = {"OLLAMA_MODEL": "from-env", "OLLAMA_TIMEOUT": "2000"}

        config = load_config(path, overrides={"default_model": "explicit"}, environ=environ)

        assert config.default_model == "explicit"
        assert config.timeout_ms == 2000


class TestEnvOverrides:
    def test_all_variables(self):
        result = env_overrides(
            {
                "OLLAMA_BASE_URL": "http://gpu:11434",
                "OLLAMA_MODEL": "kimi-k2",
                "OLLAMA_TIMEOUT": "5000",
                "OLLAMA_SKIP_CONNECTION_TEST": "true",
                "OLLAMA_TEMPERATURE": "0.3",
                "OLLAMA_TOP_P": "0.8",
                "OLLAMA_MAX_TOKENS": "256",
            }
        )
        assert result == {
            "base_url": "http://gpu:11434",
            "default_model": "kimi-k2",
            "timeout_ms": 5000,
            "connection_test_enabled": False,
            "generation": {"temperature": 0.3, "top_p": 0.8, "max_tokens": 256},
        }

    def test_invalid_values_ignored(self):
        result = env_overrides({"OLLAMA_TIMEOUT": "soon", "OLLAMA_TEMPERATURE": "warm"})
        assert result == {}

    def test_skip_connection_test_false(self):
        assert env_overrides({"OLLAMA_SKIP_CONNECTION_TEST": "0"}) == {
            "connection_test_enabled": True
        }


class TestValidateConfig:
    def test_defaults_valid(self):
        report = validate_config(BridgeConfig())
        assert report.is_valid
        assert report.warnings == []

    @pytest.mark.parametrize(
        "changes",
        [
            {"base_url": "localhost:11434"},
            {"default_model": " "},
            {"timeout_ms": 0},
            {"max_retries": -1},
        ],
    )
    def test_errors(self, changes):
        assert not validate_config(BridgeConfig(**changes)).is_valid

    def test_generation_ranges(self):
        config = BridgeConfig(generation={"temperature": 3.0, "top_p": 1.5, "max_tokens": 0})
        assert len(validate_config(config).errors) == 3

    def test_advisory_warnings(self):
        report = validate_config(BridgeConfig(timeout_ms=1000, max_retries=20))
        assert report.is_valid
        assert len(report.warnings) == 2

    def test_ensure_valid_raises(self):
        with pytest.raises(ConfigurationError) as exc_info:
            ensure_valid(BridgeConfig(base_url="nope"))
        assert exc_info.value.details["errors"]


class TestCheckSetup:
    @pytest.mark.asyncio
    async def test_model_available(self):
        discovery = MagicMock()
        discovery.is_model_available = AsyncMock(return_value=True)
        report = await check_setup(BridgeConfig(), discovery)
        assert report.is_valid

    @pytest.mark.asyncio
    async def test_model_missing(self):
        discovery = MagicMock()
        discovery.is_model_available = AsyncMock(return_value=False)
        report = await check_setup(BridgeConfig(), discovery)
        assert "ollama pull qwen2.5-coder:32b" in report.errors[0]

    @pytest.mark.asyncio
    async def test_server_unreachable(self):
        discovery = MagicMock()
        discovery.is_model_available = AsyncMock(
            side_effect=ConnectivityError(
                server_url="http://localhost:11434", model=None, operation="tags", attempts=1
            )
        )
        report = await check_setup(BridgeConfig(), discovery)
        assert "Cannot connect" in report.errors[0]

    @pytest.mark.asyncio
    async def test_connection_test_disabled(self):
        discovery = MagicMock()
        discovery.is_model_available = AsyncMock()
        report = await check_setup(BridgeConfig(connection_test_enabled=False), discovery)
        assert report.is_valid
        discovery.is_model_available.assert_not_awaited()


class TestFactory:
    def test_registry_applies_overrides(self):
        config = BridgeConfig(
            capability_overrides={"my-model": {"supports_tools": True, "dialect": "hermes", "max_tools": 2}}
        )
        caps = create_registry(config).get("my-model")
        assert caps.supports_tools is True
        assert caps.dialect is Dialect.HERMES
        assert caps.max_tools == 2

    def test_orchestrator_wiring(self):
        config = BridgeConfig(
            validator={"poor_multi_turn_heuristic": False},
            generation={"system_prompt": "Hi"},
        )
        orchestrator = create_orchestrator(config)

        assert orchestrator.validator.settings.poor_multi_turn_heuristic is False
        assert orchestrator.generation.system_prompt == "Hi"
        assert orchestrator.transport.url("chat") == "http://localhost:11434/api/chat"
