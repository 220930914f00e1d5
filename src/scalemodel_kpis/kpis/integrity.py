from __future__ import annotations

import logging
from typing import Dict, List

from ..core.errors import IntegrityViolationError
from ..core.types import IntegrityFinding
from ..data.repos import IntegrityRepository

logger = logging.getLogger(__name__)

CUSTOMER_REPORTS = (
    "customer_profit",
    "top_vip_customers",
    "least_engaged_customers",
    "customer_ltv",
    "acquisition_projection",
)
PRODUCT_REPORTS = (
    "low_stock",
    "product_performance",
    "priority_restocking",
)
SALES_REPORTS = PRODUCT_REPORTS + CUSTOMER_REPORTS


class IntegrityChecker:
    """掃描訂單明細與訂單的懸空外鍵，並依政策決定排除或中止。"""

    def __init__(self, repo: IntegrityRepository, abort_on_violation: bool = False) -> None:
        self._repo = repo
        self._abort = abort_on_violation
        self._findings: List[IntegrityFinding] | None = None

    def scan(self) -> List[IntegrityFinding]:
        """回傳所有違規的關聯；同一次執行只查詢一次。"""

        if self._findings is not None:
            return self._findings

        counts = {
            "orderdetails.orderNumber -> orders": (self._repo.order_lines_without_order(), SALES_REPORTS),
            "orderdetails.productCode -> products": (self._repo.order_lines_without_product(), SALES_REPORTS),
            "orders.customerNumber -> customers": (self._repo.orders_without_customer(), CUSTOMER_REPORTS),
        }
        findings: List[IntegrityFinding] = []
        for relation, (dangling, affects) in counts.items():
            if not dangling:
                continue
            findings.append(IntegrityFinding(relation=relation, dangling_rows=dangling, affects=list(affects)))
            logger.warning("integrity_violation", extra={"relation": relation, "dangling_rows": dangling})
        self._findings = findings
        return findings

    def findings_for(self, report_name: str) -> List[IntegrityFinding]:
        return [finding for finding in self.scan() if report_name in finding.affects]

    def enforce(self, report_name: str) -> List[str]:
        """abort 政策下拋出例外；exclude 政策下回傳警告訊息（違規資料列已由 inner join 排除）。"""

        findings = self.findings_for(report_name)
        if not findings:
            return []
        descriptions = [finding.describe() for finding in findings]
        if self._abort:
            raise IntegrityViolationError("；".join(descriptions))
        return [f"已排除違規資料列 {text}" for text in descriptions]

    def summary(self) -> Dict[str, int]:
        return {finding.relation: finding.dangling_rows for finding in self.scan()}
