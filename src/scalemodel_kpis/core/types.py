from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field


class TableCensusRow(BaseModel):
    """單一資料表的欄位數與筆數。"""

    table_name: str
    number_of_attributes: int
    number_of_rows: int


class StockRatioRow(BaseModel):
    """庫存銷售比，數值越低越接近缺貨。"""

    product_code: str
    low_stock: float


class ProductPerformanceRow(BaseModel):
    """商品總銷售額。"""

    product_code: str
    product_performance: float


class PriorityProductRow(BaseModel):
    """優先補貨商品與其描述欄位。"""

    product_code: str
    product_name: str
    product_line: str
    product_scale: Optional[str] = None
    product_vendor: Optional[str] = None
    product_description: Optional[str] = None
    product_performance: float


class CustomerProfitRow(BaseModel):
    """單一客戶的累積利潤。"""

    customer_number: int
    contact_last_name: str
    contact_first_name: str
    city: str
    country: str
    profit: float


class LifetimeValue(BaseModel):
    """客戶終身價值（平均客戶利潤）。"""

    ltv: float
    customers: int


class AcquisitionProjection(BaseModel):
    """新客戶預期帶來的終身利潤。"""

    ltv: float
    new_customers: int
    projected_profit: float


class IntegrityFinding(BaseModel):
    """懸空外鍵統計。"""

    relation: str
    dangling_rows: int
    affects: List[str] = Field(default_factory=list)

    def describe(self) -> str:
        return f"{self.relation}: {self.dangling_rows} 筆參照不存在"


class ReportOutcome(BaseModel):
    """單一報表的執行結果；失敗時 rows 為空並記錄錯誤。"""

    name: str
    title: str
    rows: List[Any] = Field(default_factory=list)
    error: Optional[str] = None
    error_kind: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None

    def summarize(self) -> str:
        """回傳單行摘要。"""

        if not self.ok:
            return f"{self.name} FAILED ({self.error_kind}): {self.error}"
        return f"{self.name} rows={len(self.rows)}"


class RunSummary(BaseModel):
    """一次報表執行的總覽。"""

    generated_at: datetime
    generated_at_local: datetime
    outcomes: List[ReportOutcome] = Field(default_factory=list)
    integrity: List[IntegrityFinding] = Field(default_factory=list)
