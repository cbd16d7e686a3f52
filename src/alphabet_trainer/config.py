"""Application configuration using pydantic-settings."""

import functools
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict


def _find_project_root() -> Path:
    """Find project root by locating pyproject.toml."""
    current = Path(__file__).resolve()
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            return parent
    return Path(__file__).resolve().parent.parent.parent


class YamlSettingsSource(PydanticBaseSettingsSource):
    """Custom settings source that loads from settings.yaml."""

    def get_field_value(self, field_name: str) -> tuple[Any, str, bool]:
        """Not used - we implement __call__ instead."""
        return None, "", False

    def __call__(self) -> dict[str, Any]:
        """Load settings from YAML file."""
        yaml_path = _find_project_root() / "config" / "settings.yaml"
        if not yaml_path.exists():
            return {}

        with open(yaml_path, encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

        # Flatten nested structure to match Settings field names
        flattened = {}
        if 'server' in data:
            flattened['host'] = data['server'].get('host')
            flattened['port'] = data['server'].get('port')
        if 'storage' in data:
            storage = data['storage']
            flattened['data_dir'] = storage.get('data_dir')
            flattened['progress_filename'] = storage.get('progress_filename')
            flattened['legacy_stats_filename'] = storage.get('legacy_stats_filename')
            flattened['save_debounce_seconds'] = storage.get('save_debounce_seconds')
            flattened['max_session_history'] = storage.get('max_session_history')
        if 'practice' in data:
            practice = data['practice']
            flattened['questions_per_session'] = practice.get('questions_per_session')
            flattened['choices_per_question'] = practice.get('choices_per_question')
            flattened['quiz_id'] = practice.get('quiz_id')
        if 'logging' in data:
            flattened['log_json'] = data['logging'].get('json')

        # Remove None values
        return {k: v for k, v in flattened.items() if v is not None}


class Settings(BaseSettings):
    """Application settings loaded from environment and config files."""

    model_config = SettingsConfigDict(
        env_prefix="TRAINER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Server
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8000)

    # Storage
    data_dir: Path | None = Field(default=None)
    progress_filename: str = Field(default="progress.json")
    legacy_stats_filename: str = Field(default="stats.json")
    save_debounce_seconds: float = Field(default=0.5)
    max_session_history: int = Field(default=50)

    # Practice
    questions_per_session: int = Field(default=10)
    choices_per_question: int = Field(default=4)
    quiz_id: str = Field(default="fatha-quiz")

    # Logging
    log_json: bool = Field(default=False)

    # Paths
    project_root: Path = Field(default_factory=_find_project_root)

    @property
    def resolved_data_dir(self) -> Path:
        d = self.data_dir or self.project_root / "data"
        d.mkdir(parents=True, exist_ok=True)
        return d

    @property
    def progress_path(self) -> Path:
        return self.resolved_data_dir / self.progress_filename

    @property
    def legacy_stats_path(self) -> Path:
        return self.resolved_data_dir / self.legacy_stats_filename

    @property
    def vocabulary_path(self) -> Path:
        return self.project_root / "config" / "vocabulary.yaml"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customise settings sources to include YAML file.

        Priority order (highest to lowest):
        1. init_settings (arguments passed to Settings())
        2. env_settings (TRAINER_* environment variables)
        3. dotenv_settings (.env file)
        4. YamlSettingsSource (settings.yaml)
        5. file_secret_settings
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlSettingsSource(settings_cls),
            file_secret_settings,
        )


@functools.lru_cache
def get_settings() -> Settings:
    """Get application settings singleton."""
    return Settings()


def load_vocabulary(path: Path | None = None) -> list[str]:
    """Load the practice vocabulary (item ids) from YAML."""
    vocab_path = path or _find_project_root() / "config" / "vocabulary.yaml"
    if not vocab_path.exists():
        raise FileNotFoundError(f"Vocabulary file not found: {vocab_path}")
    with open(vocab_path, encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}
    return [str(item) for item in data.get('items', [])]
