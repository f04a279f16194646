"""
Configuration for the query-exposure layer, loaded from environment variables.
"""

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings read from ``GRAPH_REPOSITORY_*`` environment variables."""

    model_config = SettingsConfigDict(env_prefix='GRAPH_REPOSITORY_', extra='ignore')

    # Database
    database_url: str = 'sqlite+aiosqlite:///./blogging.db'
    sql_echo: bool = False

    # Logging
    debug: bool = False
    log_level: str = 'INFO'

    # Paging
    default_page_size: int = Field(default=10, ge=0)
    max_page_size: int = Field(default=50, ge=1)
    include_total_count: bool = True
    max_cursor_length: int = Field(default=2048, ge=16)

    @model_validator(mode='after')
    def _check_page_sizes(self) -> 'Settings':
        if self.default_page_size > self.max_page_size:
            raise ValueError('default_page_size must not exceed max_page_size.')
        return self


@lru_cache
def get_settings() -> Settings:
    return Settings()
