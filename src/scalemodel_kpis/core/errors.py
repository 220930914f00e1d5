from __future__ import annotations


class KpiError(Exception):
    """報表計算時的基底例外。"""


class ConfigurationError(KpiError):
    """設定或環境變數錯誤。"""


class SchemaMismatchError(KpiError):
    """資料庫缺少必要的資料表或欄位。"""


class IntegrityViolationError(KpiError):
    """資料存在懸空的外鍵參照。"""


class NoDataError(KpiError):
    """輸入資料為空，彙總結果無定義。"""
