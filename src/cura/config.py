"""Configuration management for cura.

Settings come from a TOML file (``cura.toml``) and are resolved in layers:
an explicit override wins, then the environment, then the file, then the
built-in default.
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from cura.sources.base import DEFAULT_FILE_PATTERN, DEFAULT_FOLDER, SourceConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "cura.toml"

DEFAULT_BASE_URL = "https://api.together.xyz/v1"
DEFAULT_MODEL = "meta-llama/Llama-3.3-70B-Instruct-Turbo-Free"

ENV_DATA_DIR = "CURA_DATA_DIR"
ENV_STRICT = "CURA_STRICT"
ENV_API_KEY = "TOGETHER_API_KEY"
ENV_MODEL = "TOGETHER_MODEL"
ENV_BASE_URL = "TOGETHER_BASE_URL"

DEFAULT_CONFIG_TEMPLATE = """\
# cura configuration

[data]
# Folder scanned (recursively) for FHIR bundle files. Relative paths are
# resolved against the directory holding this file.
folder = "{folder}"
# Regex matched against file names (case-insensitive)
file_pattern = '{file_pattern}'
# Abort the whole load on the first unreadable file
strict = true

[summarizer]
base_url = "{base_url}"
model = "{model}"
# Prefer the TOGETHER_API_KEY environment variable over storing a key here
api_key = ""
"""

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


class ConfigurationError(Exception):
    """A required setting is missing or invalid."""


@dataclass
class SummarizerSettings:
    """Connection settings handed to an AI summarizer."""

    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    api_key: str = ""

    def require_api_key(self) -> str:
        if not self.api_key or not self.api_key.strip():
            raise ConfigurationError(f"{ENV_API_KEY} not configured.")
        return self.api_key


@dataclass
class CuraConfig:
    source: SourceConfig = field(default_factory=SourceConfig)
    summarizer: SummarizerSettings = field(default_factory=SummarizerSettings)


def resolve_setting(
    override: Any = None,
    env_var: str | None = None,
    file_value: Any = None,
    default: Any = None,
) -> Any:
    """Return the first configured value: override, environment, file, default.

    Empty strings count as unset at every layer.
    """
    if override is not None and override != "":
        return override
    if env_var:
        env_value = os.environ.get(env_var)
        if env_value:
            return env_value
    if file_value is not None and file_value != "":
        return file_value
    return default


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConfigurationError(f"Not a boolean: {value!r}")


def read_config_file(config_path: str = DEFAULT_CONFIG_PATH) -> dict:
    """Read the raw TOML tables; an absent file reads as empty."""
    path = Path(config_path)
    if not path.exists():
        logger.warning("Config file '%s' not found, using defaults.", config_path)
        return {}
    with open(path, "rb") as f:
        return tomllib.load(f)


def load_config(
    config_path: str = DEFAULT_CONFIG_PATH,
    data_dir: str | None = None,
    strict: bool | None = None,
    api_key: str | None = None,
    model: str | None = None,
    base_url: str | None = None,
) -> CuraConfig:
    """Build a CuraConfig from explicit overrides, the environment and a file.

    A relative data folder from the file is resolved against the file's
    directory; one given as an override or via the environment is resolved
    against the working directory.
    """
    raw = read_config_file(config_path)
    data = raw.get("data", {})
    summ = raw.get("summarizer", {})

    folder = resolve_setting(data_dir, ENV_DATA_DIR)
    if folder:
        folder_path = Path(folder).expanduser().resolve()
    else:
        folder_path = Path(data.get("folder") or DEFAULT_FOLDER).expanduser()
        if not folder_path.is_absolute():
            folder_path = Path(config_path).resolve().parent / folder_path

    source = SourceConfig(
        folder=str(folder_path),
        file_pattern=data.get("file_pattern", DEFAULT_FILE_PATTERN),
        strict=parse_bool(resolve_setting(strict, ENV_STRICT, data.get("strict"), True)),
    )
    summarizer = SummarizerSettings(
        base_url=resolve_setting(base_url, ENV_BASE_URL, summ.get("base_url"), DEFAULT_BASE_URL),
        model=resolve_setting(model, ENV_MODEL, summ.get("model"), DEFAULT_MODEL),
        api_key=resolve_setting(api_key, ENV_API_KEY, summ.get("api_key"), ""),
    )
    return CuraConfig(source=source, summarizer=summarizer)


def generate_config(config_path: str = DEFAULT_CONFIG_PATH, folder: str = DEFAULT_FOLDER) -> str:
    """Write a starter config file and return its path."""
    content = DEFAULT_CONFIG_TEMPLATE.format(
        folder=folder,
        file_pattern=DEFAULT_FILE_PATTERN,
        base_url=DEFAULT_BASE_URL,
        model=DEFAULT_MODEL,
    )
    Path(config_path).write_text(content)
    return config_path
