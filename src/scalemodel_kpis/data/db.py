from __future__ import annotations

from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from sqlalchemy import create_engine, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from ..core.errors import SchemaMismatchError

Base = declarative_base()


def create_db_engine(url: str, echo: bool = False) -> Engine:
    """建立資料庫引擎。"""

    return create_engine(url, echo=echo, future=True)


def create_session_factory(engine: Engine) -> sessionmaker:
    """依據引擎建立 Session Factory。"""

    return sessionmaker(bind=engine, expire_on_commit=False, class_=Session)


@contextmanager
def read_only_scope(session_factory: sessionmaker) -> Iterator[Session]:
    """產生唯讀的查詢範圍，結束時一律回滾。"""

    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


def verify_schema(engine: Engine, case_sensitive: Optional[bool] = None) -> None:
    """確認資料庫包含所有對應資料表與欄位。

    SQLite 的識別字不分大小寫（orderDetails 與 orderdetails 視為同一張表）；
    其他資料庫會以引號輸出混合大小寫的識別字，因此預設逐字比對。
    """

    if case_sensitive is None:
        case_sensitive = engine.dialect.name != "sqlite"

    def fold(name: str) -> str:
        return name if case_sensitive else name.lower()

    inspector = inspect(engine)
    existing_tables = {fold(name): name for name in inspector.get_table_names()}
    missing: Dict[str, List[str]] = {}

    for table in Base.metadata.sorted_tables:
        actual_name = existing_tables.get(fold(table.name))
        if actual_name is None:
            missing[table.name] = ["<table>"]
            continue
        columns = {fold(column["name"]) for column in inspector.get_columns(actual_name)}
        absent = [column.name for column in table.columns if fold(column.name) not in columns]
        if absent:
            missing[table.name] = absent

    if missing:
        details = "; ".join(f"{table}: {', '.join(columns)}" for table, columns in sorted(missing.items()))
        raise SchemaMismatchError(f"資料庫結構不符：{details}")
