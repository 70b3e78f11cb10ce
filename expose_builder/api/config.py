"""
Exposé Builder Configuration

All settings are read from the environment (a `.env` file at the project
root is loaded first) so the CLI, the dashboard and the tests share one
source of truth.
"""
import os
from pathlib import Path
from dotenv import load_dotenv


def _clean_env(value: str) -> str:
    """Trim whitespace and surrounding quotes from env values."""
    if value is None:
        return ''
    value = value.strip()
    if (value.startswith('"') and value.endswith('"')) or (value.startswith("'") and value.endswith("'")):
        value = value[1:-1]
    return value.strip()


def _env_int(name: str, default: int) -> int:
    raw = _clean_env(os.getenv(name, ''))
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


# Load environment variables
env_path = Path(__file__).parent.parent.parent / '.env'
load_dotenv(env_path)


class Config:
    """Configuration class for the Exposé Builder"""

    # Storage (SQLite file by default, any SQLAlchemy URL works)
    DATABASE_URL = _clean_env(os.getenv('EXPOSE_DATABASE_URL', 'sqlite:///data/exposes.db'))

    # Photo pipeline
    JPEG_QUALITY = _env_int('EXPOSE_JPEG_QUALITY', 90)
    MAX_WIDTH = _env_int('EXPOSE_MAX_WIDTH', 1920)
    MAX_HEIGHT = _env_int('EXPOSE_MAX_HEIGHT', 1280)
    PIPELINE_WORKERS = _env_int('EXPOSE_PIPELINE_WORKERS', 4)
    QUALITY_SAMPLE_SIZE = 256

    # Geocoding (OpenStreetMap Nominatim compatible search endpoint)
    GEOCODER_URL = _clean_env(os.getenv('EXPOSE_GEOCODER_URL', 'https://nominatim.openstreetmap.org/search'))
    USER_AGENT = _clean_env(os.getenv('EXPOSE_USER_AGENT', 'expose-builder/1.0 (+https://localhost)'))
    REQUEST_TIMEOUT = _env_int('EXPOSE_REQUEST_TIMEOUT', 15)

    # Presentation
    LANGUAGE = _clean_env(os.getenv('EXPOSE_LANGUAGE', 'de')) or 'de'
    DEFAULT_THEME = _clean_env(os.getenv('EXPOSE_THEME', 'blue')) or 'blue'

    # Runtime
    LOG_LEVEL = (_clean_env(os.getenv('EXPOSE_LOG_LEVEL', 'INFO')) or 'INFO').upper()
    DEBUG = _clean_env(os.getenv('EXPOSE_DEBUG', 'false')).lower() == 'true'
    SECRET_KEY = _clean_env(os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production'))

    @classmethod
    def validate(cls) -> bool:
        """Validate configuration values that cannot be defaulted silently"""
        problems = []
        if not 1 <= cls.JPEG_QUALITY <= 95:
            problems.append("EXPOSE_JPEG_QUALITY must be between 1 and 95")
        if cls.MAX_WIDTH <= 0 or cls.MAX_HEIGHT <= 0:
            problems.append("EXPOSE_MAX_WIDTH and EXPOSE_MAX_HEIGHT must be positive")
        if cls.PIPELINE_WORKERS <= 0:
            problems.append("EXPOSE_PIPELINE_WORKERS must be positive")

        for problem in problems:
            print(f"Configuration problem: {problem}")
        return not problems
