from __future__ import annotations

from typing import Optional, Sequence

import typer
from pydantic import ValidationError

from ..config.settings import AppSettings, get_settings
from ..config.validators import validate_settings
from ..core.errors import ConfigurationError, KpiError, SchemaMismatchError
from ..core.logging import configure_logging
from ..kpis.pipeline import PipelineResult, ReportingPipeline

app = typer.Typer(help="Scale Model Cars KPI Reporter CLI")


@app.callback()
def main_callback() -> None:
    """載入設定並初始化日誌。"""

    settings = _load_settings()
    configure_logging(settings.log_level)


@app.command("report")
def command_report(
    new_customers: Optional[int] = typer.Option(None, min=0, help="預估獲客利潤時的新客戶數"),
    write: bool = typer.Option(True, help="是否寫入 Markdown/JSON 報表檔案"),
) -> None:
    """執行全部 KPI 報表。"""

    result = _run(new_customers=new_customers, write_report=write)
    _print_result(result)


@app.command("census")
def command_census() -> None:
    """列出八張資料表的欄位數與筆數。"""

    result = _run(reports=["table_census"], write_report=False)
    outcome = result.outcome("table_census")
    if not outcome.ok:
        _exit_with_error(f"[{outcome.error_kind}] {outcome.error}", code=1)
    for row in outcome.rows:
        typer.echo(f"{row.table_name:<14} attributes={row.number_of_attributes:<3} rows={row.number_of_rows}")


@app.command("ltv")
def command_ltv(
    new_customers: Optional[int] = typer.Option(None, min=0, help="新客戶數，預設為 PROJECTION_NEW_CUSTOMERS"),
) -> None:
    """計算客戶終身價值與新客戶預期利潤。"""

    result = _run(
        reports=["customer_ltv", "acquisition_projection"],
        new_customers=new_customers,
        write_report=False,
    )
    ltv_outcome = result.outcome("customer_ltv")
    if not ltv_outcome.ok:
        _exit_with_error(f"[{ltv_outcome.error_kind}] {ltv_outcome.error}", code=1)
    ltv = ltv_outcome.rows[0]
    typer.echo(f"LTV: {ltv.ltv:,.2f} (customers={ltv.customers})")
    projection_outcome = result.outcome("acquisition_projection")
    if projection_outcome.ok:
        projection = projection_outcome.rows[0]
        typer.echo(f"Projected profit for {projection.new_customers} new customers: {projection.projected_profit:,.2f}")


@app.command("check-integrity")
def command_check_integrity() -> None:
    """檢查訂單與訂單明細的外鍵參照。"""

    result = _run(reports=["table_census"], write_report=False)
    findings = result.summary.integrity
    if not findings:
        typer.echo("No dangling references found.")
        return
    for finding in findings:
        typer.echo(finding.describe())
    raise typer.Exit(code=1)


def _load_settings() -> AppSettings:
    try:
        settings = get_settings()
        validate_settings(settings)
    except (ValidationError, ConfigurationError) as error:
        _exit_with_error(f"[CONFIG] {error}", code=2)
    return settings


def _run(
    reports: Optional[Sequence[str]] = None,
    new_customers: Optional[int] = None,
    write_report: bool = True,
) -> PipelineResult:
    pipeline = ReportingPipeline(settings=_load_settings())
    try:
        return pipeline.run_once(reports=reports, new_customers=new_customers, write_report=write_report)
    except SchemaMismatchError as error:
        _exit_with_error(f"[SCHEMA] {error}", code=2)
    except KpiError as error:
        _exit_with_error(f"[{type(error).__name__}] {error}", code=1)
    finally:
        pipeline.dispose()


def _exit_with_error(message: str, code: int) -> None:
    """輸出錯誤訊息並以指定代碼結束程式。"""

    typer.echo(message, err=True)
    raise typer.Exit(code=code)


def _print_result(result: PipelineResult) -> None:
    """輸出報表摘要。"""

    typer.echo("=== KPI Report Summary ===")
    for outcome in result.summary.outcomes:
        typer.echo(outcome.summarize())
        for warning in outcome.warnings:
            typer.echo(f"  warning: {warning}")
    for name in ("customer_ltv", "acquisition_projection"):
        try:
            outcome = result.outcome(name)
        except KeyError:
            continue
        if outcome.ok and outcome.rows:
            typer.echo(f"{name}: {outcome.rows[0].model_dump()}")
    if result.report_path:
        typer.echo(f"Report: {result.report_path}")
    if result.stats:
        typer.echo("--- Stats ---")
        for key in ("reports", "failed_reports", "integrity_violations"):
            if key in result.stats:
                typer.echo(f"{key}: {result.stats[key]}")
