"""Runtime settings for the query pipeline.

Limits may also be changed at runtime on a ``GraphQLManager``; these values
only seed a new manager.
"""

from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    GRAPHQL_ENABLED: bool = True
    # None disables the corresponding check
    GRAPHQL_MAX_QUERY_COMPLEXITY: Optional[int] = None
    GRAPHQL_MAX_QUERY_DEPTH: Optional[int] = None
    # Check resolver arguments against declared argument types
    GRAPHQL_STRICT_ARGUMENTS: bool = False
    # Attach exception class names to error extensions
    GRAPHQL_DEBUG: bool = False

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True
    SERVICE_NAME: str = "gqlflow"
    ENVIRONMENT: str = "development"

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
        "extra": "ignore",
    }


_settings_cache: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings_cache
    if _settings_cache is None:
        _settings_cache = Settings()
    return _settings_cache


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings_cache
    _settings_cache = None
