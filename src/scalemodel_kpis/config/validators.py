from __future__ import annotations

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..core.errors import ConfigurationError
from .settings import AppSettings


def validate_settings(settings: AppSettings) -> None:
    """確認排名上限與時區設定位於合理區間。"""

    limits = {
        "LOW_STOCK_LIMIT": settings.low_stock_limit,
        "PERFORMANCE_LIMIT": settings.performance_limit,
        "PRIORITY_LIMIT": settings.priority_limit,
        "CUSTOMER_LIMIT": settings.customer_limit,
    }
    for name, value in limits.items():
        if value <= 0:
            raise ConfigurationError(f"{name} 必須為正整數")

    try:
        ZoneInfo(settings.timezone)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigurationError(f"無效的時區設定 TZ={settings.timezone}") from exc
