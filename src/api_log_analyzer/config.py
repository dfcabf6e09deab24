"""Settings for the analyzer, loaded from an optional YAML file and the environment."""

import os
from pathlib import Path

import yaml
from pydantic import BaseModel

from api_log_analyzer.parser.junk import JunkClassifier, load_patterns

CONFIG_ENV = "API_LOG_ANALYZER_CONFIG"
STORE_ENV = "API_LOG_ANALYZER_STORE"

DEFAULT_STORE_PATH = Path.home() / ".api-log-analyzer" / "analyses.json"


class Settings(BaseModel):
    store_path: Path = DEFAULT_STORE_PATH
    max_analyses: int = 50
    max_store_bytes: int = 5 * 1024 * 1024
    max_input_bytes: int = 10 * 1024 * 1024
    junk_patterns_file: Path | None = None  # replaces the built-in patterns
    extra_junk_patterns: list[str] = []
    client_name: str = "apiClient"
    client_import: str = "./apiClient"

    def junk_patterns(self) -> list[str]:
        if self.junk_patterns_file:
            patterns = load_patterns(self.junk_patterns_file)
        else:
            patterns = load_patterns()
        return patterns + self.extra_junk_patterns

    def classifier(self) -> JunkClassifier:
        return JunkClassifier(self.junk_patterns())


def load_settings(config_path: Path | None = None) -> Settings:
    """Load settings from `config_path` or $API_LOG_ANALYZER_CONFIG, then apply env overrides."""
    if config_path is None and os.getenv(CONFIG_ENV):
        config_path = Path(os.environ[CONFIG_ENV])

    data = {}
    if config_path is not None:
        loaded = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        if loaded is not None and not isinstance(loaded, dict):
            raise ValueError(f"{config_path}: expected a YAML mapping")
        data = loaded or {}

    if os.getenv(STORE_ENV):
        data["store_path"] = os.environ[STORE_ENV]

    return Settings(**data)
