"""Configuration for todo-list."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from todo_list.offline.strategies import CacheStrategy


class Config(BaseSettings):
    """Application configuration (env vars prefixed with TODO_LIST_)."""

    model_config = SettingsConfigDict(env_prefix="TODO_LIST_")

    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8000)

    # Key-value file standing in for browser storage
    storage_path: str = Field(default="~/.local/share/todo-list/storage.json")

    # Offline cache
    cache_name: str = Field(default="todo-list-v1")
    cache_strategy: CacheStrategy = Field(default=CacheStrategy.CACHE_FIRST)
    scope: str = Field(default="/todo-list/")
    upstream_url: str = Field(default="http://127.0.0.1:8080")
    fetch_timeout: float = Field(default=10.0)
    manifest_path: str | None = Field(default=None)
    skip_waiting_on_install: bool = Field(default=True)

    # Localization
    locales_dir: str = Field(default="locales")
    default_language: str = Field(default="en")
    i18n_ready_timeout: float = Field(default=1.0)
    watch_locales: bool = Field(default=False)
