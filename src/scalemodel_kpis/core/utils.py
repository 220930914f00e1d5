from __future__ import annotations

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Iterable, List, Sequence, TypeVar

from .errors import ConfigurationError, NoDataError


T = TypeVar("T")


def utc_now() -> datetime:
    """回傳目前 UTC 時間。"""

    return datetime.now(tz=timezone.utc)


def round_half_up(value: float, digits: int = 2) -> float:
    """與 SQL ROUND 相同的四捨五入（0.125 -> 0.13），避免 round() 的銀行家捨入。"""

    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def top_n(items: Iterable[T], key: Callable[[T], tuple], limit: int) -> List[T]:
    """依排序鍵取出前 N 筆，排序鍵需包含唯一值以確保結果穩定。"""

    if limit <= 0:
        raise ConfigurationError("limit 必須為正整數")
    return sorted(items, key=key)[:limit]


def mean(values: Sequence[float]) -> float:
    if not values:
        raise NoDataError("無法對空序列取平均")
    return sum(values) / len(values)
