"""Application settings and configuration management"""

import os
from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Load environment-specific .env file
environment = os.getenv('ENVIRONMENT', 'development')
env_file = f'.env.{environment}'
if os.path.exists(env_file):
    load_dotenv(env_file)
else:
    load_dotenv()  # Fallback to .env

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
SENTIMENT_ENGINES = ("afinn", "keyword")
ENVIRONMENTS = ("development", "staging", "production")
LANGUAGES = ("id", "en")


class Settings(BaseSettings):
    """
    Application configuration settings using Pydantic Settings.

    Environment variables will automatically override default values.
    """

    # YouTube Data API Settings
    youtube_api_key: str = Field(
        default="",
        alias="YOUTUBE_API_KEY",
        description="YouTube Data API key from Google Cloud Console"
    )
    youtube_api_base_url: str = Field(
        default="https://www.googleapis.com/youtube/v3",
        description="Base URL of the YouTube Data API"
    )

    # Discovery Settings
    request_timeout: float = Field(
        default=10.0,
        description="Hard timeout in seconds for a single outbound call"
    )
    default_language: str = Field(
        default="en",
        description="Language used when a request does not specify one"
    )

    # Sentiment Settings
    sentiment_engine: str = Field(
        default="afinn",
        alias="SENTIMENT_ENGINE",
        description="Sentiment engine to use (afinn, keyword)"
    )
    sentiment_lexicon_language: str = Field(
        default="en",
        description="AFINN lexicon language"
    )

    # Client Retry Settings
    max_retries: int = Field(
        default=3,
        description="Maximum attempts made by the resilient discovery client"
    )
    retry_base_delay: float = Field(
        default=1.0,
        description="Base delay in seconds, multiplied by the attempt number"
    )
    api_base_url: str = Field(
        default="http://localhost:8000",
        alias="MOODTUNES_API_URL",
        description="Base URL of the discovery API used by the resilient client"
    )

    # Server Settings
    host: str = Field(default="0.0.0.0", description="Bind address for the API server")
    port: int = Field(default=8000, description="Port for the API server")

    # Logging Settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    log_to_file: bool = Field(
        default=False,
        description="Also write rotating log files under logs/"
    )

    # Environment and Runtime Settings
    environment: str = Field(
        default="development",
        description="Runtime environment (development, staging, production)"
    )

    @field_validator('log_level')
    def validate_log_level(cls, v):
        """Normalize and check the log level name"""
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f'log_level must be one of {LOG_LEVELS}')
        return level

    @field_validator('sentiment_engine')
    def validate_sentiment_engine(cls, v):
        """Only the AFINN lexicon and the keyword heuristic are available"""
        engine = v.lower()
        if engine not in SENTIMENT_ENGINES:
            raise ValueError(f'sentiment_engine must be one of {SENTIMENT_ENGINES}')
        return engine

    @field_validator('default_language')
    def validate_default_language(cls, v):
        language = v.lower()
        if language not in LANGUAGES:
            raise ValueError(f'default_language must be one of {LANGUAGES}')
        return language

    @field_validator('environment')
    def validate_environment(cls, v):
        if v not in ENVIRONMENTS:
            raise ValueError(f'environment must be one of {ENVIRONMENTS}')
        return v

    @field_validator('request_timeout', 'retry_base_delay')
    def validate_positive_seconds(cls, v):
        if v <= 0:
            raise ValueError('must be a positive number of seconds')
        return v

    @field_validator('max_retries')
    def validate_max_retries(cls, v):
        if v < 1:
            raise ValueError('max_retries must allow at least one attempt')
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode"""
        return self.environment == 'development'

    @property
    def is_production(self) -> bool:
        """Check if running in production mode"""
        return self.environment == 'production'

    @property
    def has_youtube_api_key(self) -> bool:
        """Check whether an external-source access key is configured"""
        return bool(self.youtube_api_key and self.youtube_api_key.strip())

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "env_prefix": "",
        "extra": "ignore",
        "populate_by_name": True
    }


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use"""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    """Discard the cached settings and load them again from the environment"""
    global _settings
    _settings = None
    return get_settings()
