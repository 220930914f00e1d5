from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """應用程式環境設定。"""

    db_url: str = Field("sqlite:///./stores.db", alias="DB_URL")
    db_echo: bool = Field(False, alias="DB_ECHO")

    low_stock_limit: Annotated[int, Field(ge=1)] = Field(10, alias="LOW_STOCK_LIMIT")
    performance_limit: Annotated[int, Field(ge=1)] = Field(10, alias="PERFORMANCE_LIMIT")
    priority_limit: Annotated[int, Field(ge=1)] = Field(10, alias="PRIORITY_LIMIT")
    customer_limit: Annotated[int, Field(ge=1)] = Field(5, alias="CUSTOMER_LIMIT")
    projection_new_customers: Annotated[int, Field(ge=0)] = Field(10, alias="PROJECTION_NEW_CUSTOMERS")

    integrity_policy: Literal["exclude", "abort"] = Field("exclude", alias="INTEGRITY_POLICY")

    report_dir: str = Field("reports", alias="REPORT_DIR")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    timezone: str = Field("Europe/Berlin", alias="TZ")

    model_config = SettingsConfigDict(env_file=(".env",), env_file_encoding="utf-8", extra="ignore")

    @property
    def report_path(self) -> Path:
        """取得報表輸出目錄。"""

        return Path(self.report_dir)

    @property
    def abort_on_integrity_violation(self) -> bool:
        return self.integrity_policy == "abort"

    @field_validator("integrity_policy", mode="before")
    @classmethod
    def _normalize_policy(cls, value: str) -> str:
        if isinstance(value, str):
            return value.strip().lower()
        return value


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """載入並快取設定。"""

    return AppSettings()
