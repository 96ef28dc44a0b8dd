"""Tests for documate.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from documate.config import ConfigError, DocumateConfig, load_config


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path, environ={})

    assert isinstance(config, DocumateConfig)
    assert config.source is None
    assert config.llm.api == "ollama"
    assert config.llm.base_url is None
    assert config.llm.model is None
    assert config.storage.endpoint == "localhost:9000"
    assert config.storage.secure is False
    assert config.metadata.database == "file_service"
    assert config.metadata.collection == "files"
    assert config.extraction.strict_syntax is True
    assert config.prompting.templates_dir is None
    assert config.locale == "en"


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / "documate.yml"
    config_file.write_text(
        """
llm:
  api: OpenAI
  base_url: "https://api.example.com/v1"
  model: "gpt-4o-mini"
  api_key: "test-key"
  temperature: 0.2
  request_timeout: 60
storage:
  endpoint: "minio:9000"
  access_key: "minio"
  secret_key: "minio123"
  secure: true
metadata:
  uri: "mongodb://mongo:27017"
  database: "docs"
extraction:
  exclude_paths:
    - "tests/"
  strict_syntax: false
prompting:
  templates_dir: "templates"
locale: ru
log_file: "logs/documate.log"
""",
        encoding="utf-8",
    )

    config = load_config(config_file, environ={})

    assert config.source == config_file.resolve()
    assert config.llm.api == "openai"
    assert config.llm.model == "gpt-4o-mini"
    assert config.llm.api_key == "test-key"
    assert config.llm.temperature == 0.2
    assert config.llm.request_timeout == 60.0
    assert config.storage.endpoint == "minio:9000"
    assert config.storage.secure is True
    assert config.metadata.uri == "mongodb://mongo:27017"
    assert config.metadata.database == "docs"
    assert config.metadata.collection == "files"
    assert config.extraction.exclude_paths == ["tests/"]
    assert config.extraction.strict_syntax is False
    assert config.prompting.templates_dir == (tmp_path / "templates").resolve()
    assert config.locale == "ru"
    assert config.log_file == (tmp_path / "logs" / "documate.log").resolve()


def test_environment_overrides_file_values(tmp_path: Path) -> None:
    (tmp_path / "documate.yml").write_text("llm:\n  model: from-file\n", encoding="utf-8")

    config = load_config(
        tmp_path,
        environ={
            "DOCUMATE_LLM_MODEL": "from-env",
            "DOCUMATE_MINIO_ENDPOINT": "objects:9000",
            "DOCUMATE_MINIO_SECURE": "yes",
            "DOCUMATE_MONGO_URI": "mongodb://db:27017",
            "DOCUMATE_LOCALE": "RU",
        },
    )

    assert config.llm.model == "from-env"
    assert config.storage.endpoint == "objects:9000"
    assert config.storage.secure is True
    assert config.metadata.uri == "mongodb://db:27017"
    assert config.locale == "ru"


def test_config_path_can_come_from_environment(tmp_path: Path) -> None:
    config_file = tmp_path / "custom.yml"
    config_file.write_text("locale: ru\n", encoding="utf-8")

    config = load_config(environ={"DOCUMATE_CONFIG": str(config_file)})

    assert config.locale == "ru"
    assert config.source == config_file.resolve()


def test_malformed_yaml_raises_config_error(tmp_path: Path) -> None:
    config_file = tmp_path / "documate.yml"
    config_file.write_text("llm: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(config_file, environ={})


def test_non_mapping_root_is_rejected(tmp_path: Path) -> None:
    config_file = tmp_path / "documate.yml"
    config_file.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(config_file, environ={})


@pytest.mark.parametrize(
    "environ",
    [
        {"DOCUMATE_LLM_API": "carrier-pigeon"},
        {"DOCUMATE_LOCALE": "fr"},
        {"DOCUMATE_MINIO_SECURE": "maybe"},
    ],
)
def test_invalid_values_raise_config_error(tmp_path: Path, environ) -> None:
    with pytest.raises(ConfigError):
        load_config(tmp_path, environ=environ)
