"""Application configuration helpers."""

from __future__ import annotations

from functools import lru_cache
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.concept_map import LayoutSettings

PROJECT_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_VAULT_BASE = PROJECT_ROOT / "data" / "vaults"
DEFAULT_LLM_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_LLM_MODEL = "openai/gpt-4o-mini"


class AppConfig(BaseModel):
    """Runtime configuration loaded from environment variables."""

    model_config = ConfigDict(frozen=True)

    vault_base_path: Path = Field(..., description="Base directory for per-user vaults")
    enable_local_mode: bool = Field(
        default=True,
        description="Fall back to default_user_id when no X-User-Id header is sent",
    )
    default_user_id: str = Field(default="demo-user", min_length=1)
    seed_demo_vault: bool = Field(
        default=True, description="Write demo notes into an empty default vault on startup"
    )
    llm_api_key: Optional[str] = Field(
        default=None, description="API key for the chat-completions endpoint"
    )
    llm_base_url: str = Field(default=DEFAULT_LLM_BASE_URL)
    llm_model: str = Field(default=DEFAULT_LLM_MODEL)
    llm_timeout_seconds: float = Field(default=60.0, gt=0)
    canvas_width: float = Field(default=1200.0, description="Logical canvas width")
    canvas_height: float = Field(default=900.0, description="Logical canvas height")

    @field_validator("vault_base_path", mode="before")
    @classmethod
    def _normalize_vault_path(cls, value: str | Path | None) -> Path:
        if value is None or value == "":
            raise ValueError("VAULT_BASE_PATH is required")
        if isinstance(value, Path):
            path = value
        else:
            path = Path(value)
        return path.expanduser().resolve()

    @field_validator("canvas_width", "canvas_height")
    @classmethod
    def _positive_canvas(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("Canvas dimensions must be positive")
        return value

    @field_validator("llm_api_key", mode="before")
    @classmethod
    def _blank_key_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None

    def layout_settings(self) -> LayoutSettings:
        return LayoutSettings(canvas_width=self.canvas_width, canvas_height=self.canvas_height)


def _read_env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(key, default)


def _read_flag(key: str, default: str = "true") -> bool:
    return (_read_env(key, default) or "").lower() not in {"0", "false", "no"}


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Load and cache application configuration."""
    config = AppConfig(
        vault_base_path=_read_env("VAULT_BASE_PATH", str(DEFAULT_VAULT_BASE)),
        enable_local_mode=_read_flag("ENABLE_LOCAL_MODE"),
        default_user_id=_read_env("DEFAULT_USER_ID", "demo-user"),
        seed_demo_vault=_read_flag("SEED_DEMO_VAULT"),
        llm_api_key=_read_env("OPENROUTER_API_KEY"),
        llm_base_url=_read_env("LLM_BASE_URL", DEFAULT_LLM_BASE_URL),
        llm_model=_read_env("LLM_MODEL", DEFAULT_LLM_MODEL),
        llm_timeout_seconds=_read_env("LLM_TIMEOUT_SECONDS", "60"),
        canvas_width=_read_env("CANVAS_WIDTH", "1200"),
        canvas_height=_read_env("CANVAS_HEIGHT", "900"),
    )
    # Ensure vault base directory exists for downstream services.
    config.vault_base_path.mkdir(parents=True, exist_ok=True)
    return config


def reload_config() -> AppConfig:
    """Clear cached config (useful for tests) and reload."""
    get_config.cache_clear()
    return get_config()


__all__ = ["AppConfig", "get_config", "reload_config", "PROJECT_ROOT", "DEFAULT_VAULT_BASE"]
