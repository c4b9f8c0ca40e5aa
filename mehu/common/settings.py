# mehu/common/settings.py
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional
from pydantic import BaseModel, Field, AliasChoices, field_validator, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict
from mehu.common.strings.splitters import csv_to_list
from mehu.domain.enums.media_kind import MediaKind


def _to_bool(v: str | bool | int | None, default: bool = False) -> bool:
    if isinstance(v, bool):
        return v
    if v is None:
        return default
    s = str(v).strip().lower()
    return s in {"1", "true", "yes", "y", "on"}


class TelegramConfig(BaseModel):
    base_url: str = "https://api.telegram.org"
    poll_timeout_sec: int = Field(60, ge=0, description="Long-poll hold time passed to getUpdates")
    retry_delay_sec: float = Field(1.0, ge=0, description="Fixed delay before retrying a failed poll")
    request_timeout_sec: float = Field(30.0, gt=0, description="Timeout for outbound send calls")
    queue_maxsize: int = Field(100, ge=1, description="Capacity of the poller -> dispatcher channel")
    allowed_updates: List[str] = Field(
        default_factory=lambda: ["message", "inline_query", "chosen_inline_result", "callback_query"]
    )

    @field_validator("allowed_updates", mode="before")
    @classmethod
    def _split_csv(cls, v):
        return csv_to_list(v)


class DBConfig(BaseModel):
    # Optional explicit URL; when empty we use <data_root>/database.sqlite
    url: Optional[str] = None
    echo: bool = False
    auto_create: bool = True

    @field_validator("echo", mode="before")
    @classmethod
    def _echo_bool(cls, v):
        return _to_bool(v, default=False)

    @field_validator("auto_create", mode="before")
    @classmethod
    def _auto_create_bool(cls, v):
        return _to_bool(v, default=True)


class DispatchConfig(BaseModel):
    record_access: bool = False
    inline_results_limit: int = Field(50, ge=1, le=50)
    inline_cache_time_sec: int = Field(0, ge=0)
    tag_prompt_text: str = "How should this be tagged? Reply with words separated by spaces."
    tag_button_text: str = "Tag"
    # MIME type -> MediaKind value; anything else is ignored
    document_kinds: Dict[str, str] = Field(default_factory=lambda: {"video/mp4": "animated_gif"})

    @field_validator("record_access", mode="before")
    @classmethod
    def _boolify(cls, v):
        return _to_bool(v)

    @field_validator("document_kinds")
    @classmethod
    def _known_kinds(cls, v: Dict[str, str]) -> Dict[str, str]:
        return {mime.strip().lower(): MediaKind(kind).value for mime, kind in v.items()}


class Settings(BaseSettings):
    # -------- App / Env --------
    app_name: str = "mehu"
    app_env: str = "development"  # development|test|staging|production
    log_level: str = "INFO"

    data_root: Path = Path("./data")

    # -------- Credentials --------
    telegram_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("MEHU_TELEGRAM_APIKEY", "TELEGRAM_API_KEY", "telegram_api_key"),
    )

    # -------- Sub-configs --------
    telegram: TelegramConfig = TelegramConfig()
    db: DBConfig = DBConfig()
    dispatch: DispatchConfig = DispatchConfig()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @computed_field  # type: ignore[misc]
    @property
    def database_url(self) -> str:
        if self.db.url:
            return self.db.url
        return f"sqlite:///{(self.data_root / 'database.sqlite').as_posix()}"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Global settings accessor (cached). Use this everywhere you need config:
        from mehu.common.settings import get_settings
        cfg = get_settings()
    """
    s = Settings()  # pydantic_settings will read from .env automatically
    if s.app_env in ("development", "test"):
        s.data_root.mkdir(parents=True, exist_ok=True)
    return s
