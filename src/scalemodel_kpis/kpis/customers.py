from __future__ import annotations

from typing import List

from ..core.errors import ConfigurationError, NoDataError
from ..core.types import AcquisitionProjection, CustomerProfitRow, LifetimeValue
from ..core.utils import mean, top_n
from ..data.repos import CustomerProfitRepository


class CustomerKpiService:
    """客戶利潤相關指標。

    客戶利潤 = Σ quantityOrdered × (priceEach − buyPrice)，每次執行只彙總一次，
    VIP、最低互動客戶、LTV 與新客預估皆共用同一份結果。
    沒有任何訂單的客戶不會出現在利潤表中，也不計入 LTV 平均。
    """

    def __init__(self, repo: CustomerProfitRepository, limit: int = 5) -> None:
        self._repo = repo
        self._limit = limit
        self._profit_table: List[CustomerProfitRow] | None = None

    def profit_table(self) -> List[CustomerProfitRow]:
        if self._profit_table is None:
            self._profit_table = [
                CustomerProfitRow(
                    customer_number=number,
                    contact_last_name=last_name,
                    contact_first_name=first_name,
                    city=city,
                    country=country,
                    profit=profit,
                )
                for number, last_name, first_name, city, country, profit in self._repo.profit_by_customer()
            ]
        return self._profit_table

    def customer_profit(self) -> List[CustomerProfitRow]:
        return list(self._require_profits())

    def top_vip(self) -> List[CustomerProfitRow]:
        """利潤最高的客戶（忠誠方案對象）。"""

        return top_n(self._require_profits(), key=lambda row: (-row.profit, row.customer_number), limit=self._limit)

    def least_engaged(self) -> List[CustomerProfitRow]:
        """利潤最低的客戶；此處「互動度」僅以利潤定義，不考慮下單次數或時間。"""

        return top_n(self._require_profits(), key=lambda row: (row.profit, row.customer_number), limit=self._limit)

    def lifetime_value(self) -> LifetimeValue:
        profits = [row.profit for row in self._require_profits()]
        return LifetimeValue(ltv=mean(profits), customers=len(profits))

    def acquisition_projection(self, new_customers: int) -> AcquisitionProjection:
        """估算 N 位新客戶的終身利潤，作為獲客成本上限的參考。"""

        if new_customers < 0:
            raise ConfigurationError("new_customers 不可為負數")
        ltv = self.lifetime_value().ltv
        return AcquisitionProjection(
            ltv=ltv,
            new_customers=new_customers,
            projected_profit=ltv * new_customers,
        )

    def _require_profits(self) -> List[CustomerProfitRow]:
        rows = self.profit_table()
        if not rows:
            raise NoDataError("沒有任何客戶具訂單紀錄，客戶利潤無定義")
        return rows
