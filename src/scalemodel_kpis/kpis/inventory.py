from __future__ import annotations

from typing import List, Optional, Sequence

from ..core.errors import NoDataError
from ..core.types import PriorityProductRow, ProductPerformanceRow, StockRatioRow
from ..core.utils import round_half_up, top_n
from ..data.repos import SalesRepository


class InventoryKpiService:
    """計算庫存銷售比、商品績效與優先補貨清單。

    庫存銷售比 = quantityInStock / Σ quantityOrdered，四捨五入至小數第二位；
    比值越低代表越接近缺貨。總訂購量為 0 的商品沒有銷售速度可言，
    不參與排名。商品績效 = Σ quantityOrdered × priceEach。
    """

    def __init__(
        self,
        repo: SalesRepository,
        low_stock_limit: int = 10,
        performance_limit: int = 10,
        priority_limit: int = 10,
    ) -> None:
        self._repo = repo
        self._low_stock_limit = low_stock_limit
        self._performance_limit = performance_limit
        self._priority_limit = priority_limit

    def stock_ratios(self) -> List[StockRatioRow]:
        """回傳所有有銷售紀錄的商品比值，依比值遞增排序。"""

        rows = [
            StockRatioRow(product_code=code, low_stock=round_half_up(stock / total_ordered, 2))
            for code, stock, total_ordered in self._repo.demand_with_stock()
        ]
        return sorted(rows, key=lambda row: (row.low_stock, row.product_code))

    def low_stock(self) -> List[StockRatioRow]:
        ratios = self.stock_ratios()
        if not ratios:
            raise NoDataError("沒有任何訂購量大於 0 的商品，庫存銷售比無定義")
        return ratios[: self._low_stock_limit]

    def product_performance(self) -> List[ProductPerformanceRow]:
        totals = self._repo.product_performance()
        if not totals:
            raise NoDataError("沒有任何訂單明細，商品績效無定義")
        ranked = top_n(totals, key=lambda item: (-item[1], item[0]), limit=self._performance_limit)
        return [ProductPerformanceRow(product_code=code, product_performance=total) for code, total in ranked]

    def priority_restocking(self, low_stock: Optional[Sequence[StockRatioRow]] = None) -> List[PriorityProductRow]:
        """在低庫存商品中依績效遞減排序，附上商品描述欄位。"""

        if low_stock is None:
            low_stock = self.low_stock()
        codes = [row.product_code for row in low_stock]
        if not codes:
            raise NoDataError("低庫存清單為空，無法產生優先補貨清單")

        totals = self._repo.product_performance(product_codes=codes)
        ranked = top_n(totals, key=lambda item: (-item[1], item[0]), limit=self._priority_limit)
        products = self._repo.products_by_code([code for code, _ in ranked])
        result: List[PriorityProductRow] = []
        for code, total in ranked:
            product = products[code]
            result.append(
                PriorityProductRow(
                    product_code=code,
                    product_name=product.product_name,
                    product_line=product.product_line,
                    product_scale=product.product_scale,
                    product_vendor=product.product_vendor,
                    product_description=product.product_description,
                    product_performance=total,
                )
            )
        return result
