"""將一次報表執行的結果輸出為 Markdown 與 JSON。"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, List

from pydantic import BaseModel

from ..core.types import ReportOutcome, RunSummary

NO_DATA_KIND = "NoDataError"


class ReportGenerator:
    def __init__(self, report_dir: Path, timezone_name: str = "UTC") -> None:
        self._report_dir = Path(report_dir)
        self._timezone_name = timezone_name

    def generate(self, summary: RunSummary) -> tuple[Path, Path]:
        """寫入最新報表與歷史紀錄，回傳 (Markdown 路徑, JSON 路徑)。"""

        self._report_dir.mkdir(parents=True, exist_ok=True)
        report_path = self._report_dir / "kpi_latest.md"
        markdown_content = self.render_markdown(summary)
        report_path.write_text(markdown_content, encoding="utf-8")

        history_dir = self._report_dir / "history"
        history_dir.mkdir(exist_ok=True)
        history_filename = summary.generated_at.strftime("kpi_%Y%m%dT%H%M%SZ")
        (history_dir / f"{history_filename}.md").write_text(markdown_content, encoding="utf-8")

        data_path = history_dir / f"{history_filename}.json"
        data_path.write_text(
            json.dumps(summary.model_dump(mode="json"), ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
        return report_path, data_path

    def render_markdown(self, summary: RunSummary) -> str:
        lines = [
            "# Scale Model Cars KPI Report",
            "",
            f"產出時間 (UTC): {summary.generated_at.isoformat()}",
            f"當地時間 ({self._timezone_name}): {summary.generated_at_local.isoformat()}",
            "",
        ]

        if summary.integrity:
            lines.append("## 資料完整性")
            lines.append("")
            for finding in summary.integrity:
                lines.append(f"- {finding.describe()}（影響：{', '.join(finding.affects)}）")
            lines.append("")

        for outcome in summary.outcomes:
            lines.extend(self._render_outcome(outcome))
        return "\n".join(lines)

    def _render_outcome(self, outcome: ReportOutcome) -> List[str]:
        lines = [f"## {outcome.title}", ""]
        for warning in outcome.warnings:
            lines.append(f"> 警告：{warning}")
        if outcome.warnings:
            lines.append("")

        if not outcome.ok:
            if outcome.error_kind == NO_DATA_KIND:
                lines.append(f"無資料：{outcome.error}")
            else:
                lines.append(f"[{outcome.error_kind}] {outcome.error}")
            lines.append("")
            return lines

        rows = [_as_dict(row) for row in outcome.rows]
        if not rows:
            lines.append("（無資料列）")
            lines.append("")
            return lines

        lines.extend(_markdown_table(rows))
        lines.append("")
        return lines


def _as_dict(row: Any) -> dict:
    if isinstance(row, BaseModel):
        return row.model_dump()
    return dict(row)


def _format_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        return f"{value:,.2f}"
    text = str(value).replace("|", "\\|").replace("\n", " ")
    if len(text) > 80:
        text = text[:77] + "..."
    return text


def _markdown_table(rows: Iterable[dict]) -> List[str]:
    rows = list(rows)
    headers = list(rows[0].keys())
    lines = [
        "| " + " | ".join(headers) + " |",
        "| " + " | ".join("---" for _ in headers) + " |",
    ]
    for row in rows:
        lines.append("| " + " | ".join(_format_cell(row.get(header)) for header in headers) + " |")
    return lines
