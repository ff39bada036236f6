"""Configuration de Liste2Films, lue depuis l'environnement (et un éventuel .env)."""
import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

DEFAULT_EDIT_PASSWORD = 'MineCraft77A'
DEFAULT_ASSISTANT_ID = 'asst_5udElzUvSKfSV3o97hwWzHiB'


def _env_int(name, default):
    value = os.getenv(name)
    if value is None or value.strip() == '':
        return default
    return int(value)


@dataclass
class Settings:
    host: str = '0.0.0.0'
    port: int = 3005
    movies_file: str = 'movies.json'
    ai_daily_limit: int = 20
    ai_max_prompt_length: int = 128
    retention_days: int = 3
    cleanup_interval_minutes: int = 60
    edit_password: str = DEFAULT_EDIT_PASSWORD
    openai_api_key: str = None
    openai_assistant_id: str = DEFAULT_ASSISTANT_ID
    imdb_timeout_seconds: int = 10
    log_level: str = 'INFO'

    @property
    def retention_ms(self):
        return self.retention_days * 24 * 60 * 60 * 1000

    @classmethod
    def from_env(cls):
        return cls(
            host=os.getenv('HOST', '0.0.0.0'),
            port=_env_int('PORT', 3005),
            movies_file=os.getenv('MOVIES_FILE', 'movies.json'),
            ai_daily_limit=_env_int('AI_DAILY_LIMIT', 20),
            ai_max_prompt_length=_env_int('AI_MAX_PROMPT_LENGTH', 128),
            retention_days=_env_int('RETENTION_DAYS', 3),
            cleanup_interval_minutes=_env_int('CLEANUP_INTERVAL_MINUTES', 60),
            edit_password=os.getenv('EDIT_PASSWORD', DEFAULT_EDIT_PASSWORD),
            openai_api_key=os.getenv('OPENAI_APIKEY') or None,
            openai_assistant_id=os.getenv('OPENAI_ASSISTANT_ID', DEFAULT_ASSISTANT_ID),
            imdb_timeout_seconds=_env_int('IMDB_TIMEOUT_SECONDS', 10),
            log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
        )
