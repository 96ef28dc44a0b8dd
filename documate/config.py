"""Configuration loading for documate (documate.yml plus environment overrides)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

CONFIG_FILENAME = "documate.yml"
CONFIG_ENV_KEY = "DOCUMATE_CONFIG"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class LLMConfig:
    """Generation service settings."""

    api: str = "ollama"
    base_url: Optional[str] = None
    model: Optional[str] = None
    api_key: Optional[str] = None
    temperature: Optional[float] = None
    request_timeout: Optional[float] = 300.0


@dataclass
class StorageConfig:
    """MinIO / S3 object store settings."""

    endpoint: str = "localhost:9000"
    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    secure: bool = False
    region: Optional[str] = None


@dataclass
class MetadataConfig:
    """MongoDB settings for artifact metadata rows."""

    uri: str = "mongodb://localhost:27017"
    database: str = "file_service"
    collection: str = "files"


@dataclass
class ExtractionConfig:
    """Source scanning and parsing behaviour."""

    exclude_paths: List[str] = field(default_factory=list)
    strict_syntax: bool = True


@dataclass
class PromptingConfig:
    """Prompt templates location."""

    templates_dir: Optional[Path] = None


@dataclass
class DocumateConfig:
    """Represents the settings defined in documate.yml."""

    source: Optional[Path] = None
    llm: LLMConfig = field(default_factory=LLMConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    metadata: MetadataConfig = field(default_factory=MetadataConfig)
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
    prompting: PromptingConfig = field(default_factory=PromptingConfig)
    locale: str = "en"
    log_file: Optional[Path] = None


_ENV_OVERRIDES: tuple[tuple[str, str, str], ...] = (
    ("DOCUMATE_LLM_API", "llm", "api"),
    ("DOCUMATE_LLM_BASE_URL", "llm", "base_url"),
    ("DOCUMATE_LLM_MODEL", "llm", "model"),
    ("DOCUMATE_LLM_API_KEY", "llm", "api_key"),
    ("DOCUMATE_MINIO_ENDPOINT", "storage", "endpoint"),
    ("DOCUMATE_MINIO_ACCESS_KEY", "storage", "access_key"),
    ("DOCUMATE_MINIO_SECRET_KEY", "storage", "secret_key"),
    ("DOCUMATE_MINIO_SECURE", "storage", "secure"),
    ("DOCUMATE_MONGO_URI", "metadata", "uri"),
    ("DOCUMATE_MONGO_DATABASE", "metadata", "database"),
)

_SUPPORTED_APIS = {"ollama", "openai"}
_SUPPORTED_LOCALES = {"en", "ru"}


def load_config(
    config_path: Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> DocumateConfig:
    """Load configuration from disk and apply environment overrides.

    Resolution order for the file: explicit ``config_path``, then the
    ``DOCUMATE_CONFIG`` variable, then ``documate.yml`` in the working
    directory. A missing file yields the defaults.
    """
    env = os.environ if environ is None else environ
    config_file = _resolve_config_path(config_path, env)

    data: Dict[str, Any] = {}
    if config_file is not None and config_file.exists():
        data = _read_config(config_file)

    base_dir = config_file.parent if config_file is not None else Path.cwd()
    config = _build_config(data, base_dir)
    config.source = config_file if config_file is not None and config_file.exists() else None
    _apply_env_overrides(config, env)
    _validate(config)
    return config


def _resolve_config_path(config_path: Path | None, env: Mapping[str, str]) -> Path | None:
    if config_path is None:
        env_value = env.get(CONFIG_ENV_KEY)
        config_path = Path(env_value) if env_value else Path.cwd() / CONFIG_FILENAME
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")
    return loaded


def _build_config(data: Dict[str, Any], base_dir: Path) -> DocumateConfig:
    config = DocumateConfig()

    llm_data = _as_dict(data.get("llm"))
    if llm_data:
        llm = config.llm
        llm.api = (_as_str(llm_data.get("api")) or llm.api).lower()
        llm.base_url = _as_str(llm_data.get("base_url")) or llm.base_url
        llm.model = _as_str(llm_data.get("model")) or llm.model
        llm.api_key = _as_str(llm_data.get("api_key"))
        llm.temperature = _as_float(llm_data.get("temperature"))
        if "request_timeout" in llm_data:
            llm.request_timeout = _as_float(llm_data.get("request_timeout"))

    storage_data = _as_dict(data.get("storage"))
    if storage_data:
        storage = config.storage
        storage.endpoint = _as_str(storage_data.get("endpoint")) or storage.endpoint
        storage.access_key = _as_str(storage_data.get("access_key"))
        storage.secret_key = _as_str(storage_data.get("secret_key"))
        secure = _as_bool(storage_data.get("secure"))
        storage.secure = storage.secure if secure is None else secure
        storage.region = _as_str(storage_data.get("region"))

    metadata_data = _as_dict(data.get("metadata"))
    if metadata_data:
        metadata = config.metadata
        metadata.uri = _as_str(metadata_data.get("uri")) or metadata.uri
        metadata.database = _as_str(metadata_data.get("database")) or metadata.database
        metadata.collection = _as_str(metadata_data.get("collection")) or metadata.collection

    extraction_data = _as_dict(data.get("extraction"))
    if extraction_data:
        config.extraction.exclude_paths = _as_str_list(extraction_data.get("exclude_paths"))
        strict = _as_bool(extraction_data.get("strict_syntax"))
        if strict is not None:
            config.extraction.strict_syntax = strict

    prompting_data = _as_dict(data.get("prompting"))
    templates_dir = _as_str(prompting_data.get("templates_dir")) if prompting_data else None
    if templates_dir:
        config.prompting.templates_dir = (base_dir / templates_dir).resolve()

    config.locale = (_as_str(data.get("locale")) or config.locale).lower()
    log_file = _as_str(data.get("log_file"))
    if log_file:
        config.log_file = (base_dir / log_file).resolve()

    return config


def _apply_env_overrides(config: DocumateConfig, env: Mapping[str, str]) -> None:
    for key, section_name, attribute in _ENV_OVERRIDES:
        value = env.get(key)
        if not value:
            continue
        section = getattr(config, section_name)
        if attribute == "secure":
            parsed = _as_bool(value)
            if parsed is None:
                raise ConfigError(f"{key} must be a boolean, got '{value}'")
            setattr(section, attribute, parsed)
        elif attribute == "api":
            setattr(section, attribute, value.lower())
        else:
            setattr(section, attribute, value)
    locale = env.get("DOCUMATE_LOCALE")
    if locale:
        config.locale = locale.lower()


def _validate(config: DocumateConfig) -> None:
    if config.llm.api not in _SUPPORTED_APIS:
        supported = ", ".join(sorted(_SUPPORTED_APIS))
        raise ConfigError(f"llm.api must be one of: {supported} (got '{config.llm.api}')")
    if config.locale not in _SUPPORTED_LOCALES:
        supported = ", ".join(sorted(_SUPPORTED_LOCALES))
        raise ConfigError(f"locale must be one of: {supported} (got '{config.locale}')")


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "ConfigError",
    "DocumateConfig",
    "ExtractionConfig",
    "LLMConfig",
    "MetadataConfig",
    "PromptingConfig",
    "StorageConfig",
    "load_config",
]
