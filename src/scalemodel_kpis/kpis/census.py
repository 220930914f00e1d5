from __future__ import annotations

from typing import List

from ..core.types import TableCensusRow
from ..data import schemas
from ..data.repos import CensusRepository


class TableCensusService:
    """列出八張資料表的欄位數與目前筆數。"""

    def __init__(self, repo: CensusRepository) -> None:
        self._repo = repo

    def census(self) -> List[TableCensusRow]:
        return [
            TableCensusRow(
                table_name=display_name,
                number_of_attributes=self._repo.attribute_count(model),
                number_of_rows=self._repo.count_rows(model),
            )
            for display_name, model in schemas.CENSUS_TABLES
        ]
