from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Optional, Sequence
from zoneinfo import ZoneInfo

from ..config.settings import AppSettings
from ..core.errors import KpiError
from ..core.types import ReportOutcome, RunSummary
from ..core.utils import utc_now
from ..data import db
from ..data.repos import (
    CensusRepository,
    CustomerProfitRepository,
    IntegrityRepository,
    SalesRepository,
)
from ..reports.generator import ReportGenerator
from .census import TableCensusService
from .customers import CustomerKpiService
from .integrity import IntegrityChecker
from .inventory import InventoryKpiService

REPORT_TITLES: Dict[str, str] = {
    "table_census": "Table Layout Summary",
    "low_stock": "Low Stock (Stock to Sales Ratio)",
    "product_performance": "Product Performance",
    "priority_restocking": "Priority Products for Restocking",
    "customer_profit": "Profit by Customer",
    "top_vip_customers": "Top {customer_limit} VIP Customers",
    "least_engaged_customers": "{customer_limit} Least Engaged Customers",
    "customer_ltv": "Customer Lifetime Value",
    "acquisition_projection": "New Customer Profit Projection",
}


@dataclass
class PipelineResult:
    """封裝報表執行結果。"""

    summary: RunSummary
    report_path: Path | None = None
    data_path: Path | None = None
    stats: dict[str, object] | None = None

    def outcome(self, name: str) -> ReportOutcome:
        for outcome in self.summary.outcomes:
            if outcome.name == name:
                return outcome
        raise KeyError(name)


class ReportingPipeline:
    """讀取 stores 資料庫並依序產出所有 KPI 報表。"""

    def __init__(self, settings: AppSettings) -> None:
        self._settings = settings
        self._engine = db.create_db_engine(settings.db_url, echo=settings.db_echo)
        self._session_factory = db.create_session_factory(self._engine)
        self._logger = logging.getLogger(__name__)

    def run_once(
        self,
        reports: Optional[Sequence[str]] = None,
        new_customers: Optional[int] = None,
        write_report: bool = True,
    ) -> PipelineResult:
        """執行一次報表計算；結構不符時直接中止，其餘錯誤只影響對應報表。"""

        selected = list(reports) if reports else list(REPORT_TITLES)
        unknown = [name for name in selected if name not in REPORT_TITLES]
        if unknown:
            raise ValueError(f"未知的報表名稱：{', '.join(unknown)}")
        if new_customers is None:
            new_customers = self._settings.projection_new_customers

        db.verify_schema(self._engine)
        timezone = ZoneInfo(self._settings.timezone)
        run_time = utc_now()

        with db.read_only_scope(self._session_factory) as session:
            checker = IntegrityChecker(
                IntegrityRepository(session),
                abort_on_violation=self._settings.abort_on_integrity_violation,
            )
            census = TableCensusService(CensusRepository(session))
            inventory = InventoryKpiService(
                SalesRepository(session),
                low_stock_limit=self._settings.low_stock_limit,
                performance_limit=self._settings.performance_limit,
                priority_limit=self._settings.priority_limit,
            )
            customers = CustomerKpiService(
                CustomerProfitRepository(session),
                limit=self._settings.customer_limit,
            )

            low_stock_cache: dict[str, list] = {}

            def _low_stock() -> list:
                if "rows" not in low_stock_cache:
                    low_stock_cache["rows"] = inventory.low_stock()
                return low_stock_cache["rows"]

            producers: Dict[str, Callable[[], list]] = {
                "table_census": census.census,
                "low_stock": _low_stock,
                "product_performance": inventory.product_performance,
                "priority_restocking": lambda: inventory.priority_restocking(_low_stock()),
                "customer_profit": customers.customer_profit,
                "top_vip_customers": customers.top_vip,
                "least_engaged_customers": customers.least_engaged,
                "customer_ltv": lambda: [customers.lifetime_value()],
                "acquisition_projection": lambda: [customers.acquisition_projection(new_customers)],
            }

            findings = checker.scan()
            outcomes = [self._run_report(name, producers[name], checker) for name in selected]

        summary = RunSummary(
            generated_at=run_time,
            generated_at_local=run_time.astimezone(timezone),
            outcomes=outcomes,
            integrity=findings,
        )
        stats: dict[str, object] = {
            "reports": len(outcomes),
            "failed_reports": sum(1 for outcome in outcomes if not outcome.ok),
            "integrity_violations": checker.summary(),
        }

        report_path: Path | None = None
        data_path: Path | None = None
        if write_report:
            generator = ReportGenerator(self._settings.report_path, self._settings.timezone)
            report_path, data_path = generator.generate(summary)
            stats["report_path"] = str(report_path)

        if self._logger.isEnabledFor(logging.INFO):
            self._logger.info("pipeline_stats", extra={"stats": stats})
        return PipelineResult(summary=summary, report_path=report_path, data_path=data_path, stats=stats)

    def dispose(self) -> None:
        self._engine.dispose()

    def _run_report(
        self,
        name: str,
        producer: Callable[[], list],
        checker: IntegrityChecker,
    ) -> ReportOutcome:
        outcome = ReportOutcome(name=name, title=self._title(name))
        try:
            outcome.warnings = checker.enforce(name)
            outcome.rows = list(producer())
        except KpiError as error:
            outcome.rows = []
            outcome.error = str(error)
            outcome.error_kind = type(error).__name__
            self._logger.warning(
                "report_failed",
                extra={"report": name, "error_kind": outcome.error_kind, "error": outcome.error},
            )
        return outcome

    def _title(self, name: str) -> str:
        return REPORT_TITLES[name].format(customer_limit=self._settings.customer_limit)
