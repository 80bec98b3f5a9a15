"""Tests for neurolint.core.config module."""

import json
from pathlib import Path

import pytest
import yaml

from neurolint.core.config import (
    ApiConfig,
    NeuroLintConfig,
    RetryConfig,
    find_config_path,
    load_config,
    parse_layers,
    validate_layer_numbers,
)
from neurolint.core.errors import ConfigurationError


class TestDefaults:
    def test_execution_defaults(self):
        config = NeuroLintConfig()
        assert config.batch.batch_size == 3
        assert config.batch.max_concurrent == 2
        assert config.retry.max_attempts == 2
        assert config.retry.delay_seconds == 2.0
        assert config.validation.max_files == 500
        assert config.validation.max_file_size == 10 * 1024 * 1024
        assert config.backup.max_backups == 10
        assert config.layers.enabled == [1, 2, 3, 4]

    def test_layer_name(self):
        config = NeuroLintConfig()
        assert config.layer_name(1) == "Configuration Validation"
        assert config.layer_name(42) == "Layer 42"

    def test_api_key_alias(self):
        config = NeuroLintConfig.model_validate({"apiKey": "secret"})
        assert config.api_key == "secret"


class TestValidators:
    def test_api_url_requires_scheme(self):
        with pytest.raises(ValueError):
            ApiConfig(url="ftp://example.com")

    def test_api_url_requires_host(self):
        with pytest.raises(ValueError):
            ApiConfig(url="https://")

    def test_api_url_trailing_slash_stripped(self):
        assert ApiConfig(url="https://api.example.com/").url == "https://api.example.com"

    def test_retry_delay_must_not_exceed_max(self):
        with pytest.raises(ValueError):
            RetryConfig(delay_seconds=30, max_delay_seconds=10)

    def test_invalid_enabled_layers(self):
        with pytest.raises(ValueError):
            NeuroLintConfig.model_validate({"layers": {"enabled": [0, 7]}})


class TestLayerNumbers:
    def test_valid_selection(self):
        assert validate_layer_numbers("1,2,4") == []
        assert parse_layers("1, 3") == [1, 3]

    def test_out_of_range(self):
        errors = validate_layer_numbers("1,9")
        assert errors and "9" in errors[0]

    def test_non_integer(self):
        assert validate_layer_numbers("1,x")

    def test_duplicates(self):
        assert "Duplicate layer numbers are not allowed" in validate_layer_numbers([1, 1])

    def test_parse_raises_configuration_error(self):
        with pytest.raises(ConfigurationError):
            parse_layers("0")


class TestLoadConfig:
    def test_defaults_without_file(self, tmp_path: Path):
        config = load_config(cwd=tmp_path)
        assert config == NeuroLintConfig()

    def test_json_file(self, tmp_path: Path):
        (tmp_path / ".neurolint.json").write_text(json.dumps({
            "apiKey": "k",
            "batch": {"batch_size": 5},
            "api": {"url": "https://api.example.com"},
        }))
        config = load_config(cwd=tmp_path)
        assert config.api_key == "k"
        assert config.batch.batch_size == 5
        assert config.batch.max_concurrent == 2
        assert config.api.url == "https://api.example.com"

    def test_yaml_file(self, tmp_path: Path):
        (tmp_path / ".neurolint.yaml").write_text(yaml.safe_dump({
            "retry": {"max_attempts": 4, "retry_on_server_error": False},
        }))
        config = load_config(cwd=tmp_path)
        assert config.retry.max_attempts == 4
        assert config.retry.retry_on_server_error is False

    def test_package_json_section(self, tmp_path: Path):
        (tmp_path / "package.json").write_text(json.dumps({
            "name": "app",
            "neurolint": {"backup": {"max_backups": 2}},
        }))
        assert load_config(cwd=tmp_path).backup.max_backups == 2

    def test_package_json_without_section(self, tmp_path: Path):
        (tmp_path / "package.json").write_text(json.dumps({"name": "app"}))
        assert load_config(cwd=tmp_path) == NeuroLintConfig()

    def test_search_order(self, tmp_path: Path):
        (tmp_path / ".neurolint.json").write_text(json.dumps({"batch": {"batch_size": 7}}))
        (tmp_path / ".neurolint.yaml").write_text("batch:\n  batch_size: 9\n")
        assert find_config_path(tmp_path) == tmp_path / ".neurolint.json"
        assert load_config(cwd=tmp_path).batch.batch_size == 7

    def test_explicit_path(self, tmp_path: Path):
        path = tmp_path / "custom.json"
        path.write_text(json.dumps({"batch": {"max_concurrent": 1}}))
        assert load_config(path, cwd=tmp_path).batch.max_concurrent == 1

    def test_explicit_path_missing(self, tmp_path: Path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(tmp_path / "nope.json", cwd=tmp_path)

    def test_invalid_json(self, tmp_path: Path):
        (tmp_path / ".neurolint.json").write_text("{oops")
        with pytest.raises(ConfigurationError):
            load_config(cwd=tmp_path)

    def test_invalid_values(self, tmp_path: Path):
        (tmp_path / ".neurolint.json").write_text(json.dumps({"batch": {"batch_size": 0}}))
        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            load_config(cwd=tmp_path)

    def test_environment_overrides(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        (tmp_path / ".neurolint.json").write_text(json.dumps({"apiKey": "from-file"}))
        monkeypatch.setenv("NEUROLINT_API_KEY", "from-env")
        monkeypatch.setenv("NEUROLINT_API_URL", "https://env.example.com")

        config = load_config(cwd=tmp_path)

        assert config.api_key == "from-env"
        assert config.api.url == "https://env.example.com"
