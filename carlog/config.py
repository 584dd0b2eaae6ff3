"""Configuration file loading and schema validation."""

import logging
import os
from pathlib import Path
from typing import Optional, Union

import yaml
from jsonschema import validate, ValidationError

from .insights import (
    DEFAULT_MODEL,
    DEFAULT_TEMPERATURE,
    DEFAULT_TOP_P,
    OpenAIInsightProvider,
)
from .storage import FileStorage

DEFAULT_CONFIG_PATH = "~/.carlog/config.yaml"
DEFAULT_DATA_DIR = "~/.carlog"
DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_API_KEY_ENV = "OPENAI_API_KEY"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class Config:
    """Resolved settings for storage, logging and the insight provider."""

    def __init__(
        self,
        data_dir: str = DEFAULT_DATA_DIR,
        log_level: str = DEFAULT_LOG_LEVEL,
        insight_model: str = DEFAULT_MODEL,
        insight_temperature: float = DEFAULT_TEMPERATURE,
        insight_top_p: float = DEFAULT_TOP_P,
        api_key_env: str = DEFAULT_API_KEY_ENV,
    ):
        self.data_dir = data_dir
        self.log_level = log_level
        self.insight_model = insight_model
        self.insight_temperature = insight_temperature
        self.insight_top_p = insight_top_p
        self.api_key_env = api_key_env

    @property
    def api_key(self) -> Optional[str]:
        return os.environ.get(self.api_key_env) or None

    def storage(self) -> FileStorage:
        return FileStorage(self.data_dir)

    def insight_provider(self) -> OpenAIInsightProvider:
        return OpenAIInsightProvider(
            api_key=self.api_key,
            model=self.insight_model,
            temperature=self.insight_temperature,
            top_p=self.insight_top_p,
        )


def load_schema() -> dict:
    """Load the JSON schema from schema.yaml."""
    schema_path = Path(__file__).parent / "schema.yaml"
    with open(schema_path) as f:
        return yaml.safe_load(f)


def validate_config_file(filepath: Path, schema: dict) -> list[str]:
    """Validate a single configuration file. Returns list of errors."""
    errors = []
    try:
        with open(filepath) as f:
            data = yaml.safe_load(f) or {}
        validate(instance=data, schema=schema)
    except yaml.YAMLError as e:
        errors.append(f"YAML parse error: {e}")
    except ValidationError as e:
        errors.append(f"Schema validation error: {e.message}")
        if e.path:
            errors.append(f"  at path: {'.'.join(str(p) for p in e.path)}")
    except OSError as e:
        errors.append(f"Error: {e}")
    return errors


def config_path(path: Union[str, Path, None] = None) -> Path:
    """Explicit path, else $CARLOG_CONFIG, else ~/.carlog/config.yaml."""
    chosen = path or os.environ.get("CARLOG_CONFIG") or DEFAULT_CONFIG_PATH
    return Path(chosen).expanduser()


def load_config(path: Union[str, Path, None] = None) -> Config:
    """
    Load configuration, falling back to defaults when the file is missing.

    Raises yaml.YAMLError or jsonschema.ValidationError for a bad file.
    $CARLOG_DATA_DIR overrides dataDir.
    """
    filepath = config_path(path)
    data = {}
    if filepath.exists():
        with open(filepath) as f:
            data = yaml.safe_load(f) or {}
        validate(instance=data, schema=load_schema())

    insight = data.get("insight") or {}
    return Config(
        data_dir=os.environ.get("CARLOG_DATA_DIR") or data.get("dataDir", DEFAULT_DATA_DIR),
        log_level=data.get("logLevel", DEFAULT_LOG_LEVEL),
        insight_model=insight.get("model", DEFAULT_MODEL),
        insight_temperature=insight.get("temperature", DEFAULT_TEMPERATURE),
        insight_top_p=insight.get("topP", DEFAULT_TOP_P),
        api_key_env=insight.get("apiKeyEnv", DEFAULT_API_KEY_ENV),
    )


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING), format=LOG_FORMAT
    )
