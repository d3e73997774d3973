"""Unit tests for config loading, env substitution and schema validation."""

import json

import pytest

from delegateAgent.config import DelegateConfig, load_config, substitute_env_vars
from delegateAgent.utils.error_handler import ConfigError

VALID_CONFIG = {
    "mcps": {
        "fs": {"command": "npx", "args": ["-y", "@modelcontextprotocol/server-filesystem", "/tmp"]},
        "remote": {"transport": "sse", "url": "http://localhost:9000/sse"},
    },
    "providers": {
        "local": {"provider": "openai", "endpoint": "http://localhost:1234/v1", "api_key": "${TEST_API_KEY}"},
    },
    "tools": [
        {
            "name": "summarize_dir",
            "description": "Summarize a directory",
            "arguments": {"type": "object", "properties": {"path": {"type": "string"}}},
            "internal_tools": {"fs": ["list_directory", "read_file"]},
            "provider": "local",
            "model": "qwen2.5-7b",
        }
    ],
}


@pytest.fixture
def write_config(tmp_path):
    def _write(data, name="config.json"):
        path = tmp_path / name
        if isinstance(data, str):
            path.write_text(data, encoding="utf-8")
        else:
            path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write


class TestSubstituteEnvVars:

    def test_nested_substitution(self, monkeypatch):
        monkeypatch.setenv("HOST", "example.com")
        monkeypatch.setenv("PORT", "8080")

        result = substitute_env_vars({"url": "http://${HOST}:${PORT}", "list": ["${HOST}", 3]})

        assert result == {"url": "http://example.com:8080", "list": ["example.com", 3]}

    def test_missing_variable(self, monkeypatch):
        monkeypatch.delenv("DEFINITELY_UNSET_VAR", raising=False)

        with pytest.raises(ConfigError, match="DEFINITELY_UNSET_VAR"):
            substitute_env_vars("${DEFINITELY_UNSET_VAR}")

    def test_plain_values_untouched(self):
        assert substitute_env_vars("$HOME and {x}") == "$HOME and {x}"
        assert substitute_env_vars(None) is None


class TestLoadConfig:

    def test_load_json(self, write_config, monkeypatch):
        monkeypatch.setenv("TEST_API_KEY", "sk-local")

        config = load_config(write_config(VALID_CONFIG))

        assert isinstance(config, DelegateConfig)
        assert config.mcps["fs"].transport == "stdio"
        assert config.mcps["remote"].url == "http://localhost:9000/sse"
        assert config.providers["local"].api_key == "sk-local"

        task = config.tools[0]
        assert task.internal_tools == {"fs": ["list_directory", "read_file"]}
        assert task.temperature == 0.2
        assert task.interactive is False
        assert task.system_prompt is None

    def test_load_yaml(self, write_config):
        config = load_config(
            write_config(
                """
mcps:
  echo:
    command: python
    args: [server.py]
tools:
  - name: ask
    description: Ask something
    internal_tools:
      echo: [echo]
    provider: openai
    model: gpt-4o-mini
    interactive: true
""",
                name="config.yaml",
            )
        )

        assert config.tools[0].interactive is True
        assert config.providers == {}

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="Config file not found"):
            load_config(tmp_path / "nope.json")

    def test_invalid_syntax(self, write_config):
        with pytest.raises(ConfigError, match="Invalid config syntax"):
            load_config(write_config("mcps: [unclosed", name="bad.yaml"))

    def test_root_must_be_mapping(self, write_config):
        with pytest.raises(ConfigError, match="mapping"):
            load_config(write_config("[1, 2]"))

    def test_substitution_failure(self, write_config, monkeypatch):
        monkeypatch.delenv("TEST_API_KEY", raising=False)

        with pytest.raises(ConfigError, match="substitution failed"):
            load_config(write_config(VALID_CONFIG))

    def test_validation_lists_issue_paths(self, write_config):
        broken = {"mcps": {"fs": {"transport": "stdio"}}, "tools": [{"name": "x"}]}

        with pytest.raises(ConfigError) as exc_info:
            load_config(write_config(broken))

        message = str(exc_info.value)
        assert message.startswith("Config validation failed:")
        assert "mcps.fs" in message
        assert "tools.0.description" in message


class TestSchemaRules:

    def _config(self, **overrides):
        data = json.loads(json.dumps(VALID_CONFIG))
        data["providers"] = {}
        data["tools"][0]["provider"] = "openai"
        data.update(overrides)
        return data

    def test_separator_in_server_id_rejected(self):
        data = self._config(mcps={"my__fs": {"command": "x"}})
        with pytest.raises(ValueError, match="server id"):
            DelegateConfig.model_validate(data)

    def test_trailing_underscore_server_id_rejected(self):
        data = self._config(mcps={"fs_": {"command": "x"}})
        with pytest.raises(ValueError, match="server id"):
            DelegateConfig.model_validate(data)

    def test_separator_in_tool_name_rejected(self):
        data = self._config()
        data["tools"][0]["internal_tools"] = {"fs": ["read__file"]}
        with pytest.raises(ValueError, match="internal tool"):
            DelegateConfig.model_validate(data)

    def test_duplicate_task_names_rejected(self):
        data = self._config()
        data["tools"].append(dict(data["tools"][0]))
        with pytest.raises(ValueError, match="duplicate"):
            DelegateConfig.model_validate(data)

    def test_reply_is_reserved(self):
        data = self._config()
        data["tools"][0]["name"] = "reply"
        with pytest.raises(ValueError, match="reserved"):
            DelegateConfig.model_validate(data)

    def test_sse_requires_url(self):
        data = self._config(mcps={"remote": {"transport": "sse"}})
        with pytest.raises(ValueError, match="url"):
            DelegateConfig.model_validate(data)

    def test_temperature_range(self):
        data = self._config()
        data["tools"][0]["temperature"] = 3.5
        with pytest.raises(ValueError):
            DelegateConfig.model_validate(data)
