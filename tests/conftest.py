"""共用 fixture：以 ORM 建立暫存的 SQLite stores 資料庫。"""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Iterable, Tuple

import pytest
from sqlalchemy.orm import Session, sessionmaker

from scalemodel_kpis.config.settings import get_settings
from scalemodel_kpis.data import schemas
from scalemodel_kpis.data.db import create_db_engine, create_session_factory


class StoreBuilder:
    """寫入八張 stores 資料表的輔助類別。"""

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory
        self._line_number = 0
        with self._session() as session:
            session.add(schemas.OfficeModel(
                office_code="1",
                city="San Francisco",
                phone="+1 650 219 4782",
                address_line1="100 Market Street",
                country="USA",
                postal_code="94080",
                territory="NA",
            ))
            session.add(schemas.EmployeeModel(
                employee_number=1002,
                last_name="Murphy",
                first_name="Diane",
                extension="x5800",
                email="dmurphy@example.com",
                office_code="1",
                job_title="President",
            ))
            for line in ("Classic Cars", "Motorcycles", "Vintage Cars"):
                session.add(schemas.ProductLineModel(product_line=line, text_description=line))
            session.commit()

    def _session(self) -> Session:
        return self._session_factory()

    def product(
        self,
        code: str,
        stock: int,
        buy_price: float,
        line: str = "Classic Cars",
        name: str | None = None,
    ) -> None:
        with self._session() as session:
            session.add(schemas.ProductModel(
                product_code=code,
                product_name=name or f"Model {code}",
                product_line=line,
                product_scale="1:18",
                product_vendor="Min Lin Diecast",
                product_description=f"Description of {code}",
                quantity_in_stock=stock,
                buy_price=buy_price,
                msrp=buy_price * 2,
            ))
            session.commit()

    def customer(self, number: int, last_name: str | None = None, city: str = "Nantes", country: str = "France") -> None:
        with self._session() as session:
            session.add(schemas.CustomerModel(
                customer_number=number,
                customer_name=f"Customer {number}",
                contact_last_name=last_name or f"Last{number}",
                contact_first_name=f"First{number}",
                phone="40.32.2555",
                address_line1="54, rue Royale",
                city=city,
                country=country,
                sales_rep_employee_number=1002,
                credit_limit=21000.0,
            ))
            session.commit()

    def order(self, number: int, customer: int, lines: Iterable[Tuple[str, int, float]] = ()) -> None:
        with self._session() as session:
            session.add(schemas.OrderModel(
                order_number=number,
                order_date=date(2004, 1, 2),
                required_date=date(2004, 1, 10),
                status="Shipped",
                customer_number=customer,
            ))
            session.commit()
        self.lines(number, lines)

    def lines(self, order_number: int, lines: Iterable[Tuple[str, int, float]]) -> None:
        with self._session() as session:
            for code, quantity, price in lines:
                self._line_number += 1
                session.add(schemas.OrderDetailModel(
                    order_number=order_number,
                    product_code=code,
                    quantity_ordered=quantity,
                    price_each=price,
                    order_line_number=self._line_number,
                ))
            session.commit()

    def payment(self, customer: int, check_number: str, amount: float) -> None:
        with self._session() as session:
            session.add(schemas.PaymentModel(
                customer_number=customer,
                check_number=check_number,
                payment_date=date(2004, 2, 1),
                amount=amount,
            ))
            session.commit()


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def db_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'stores.db'}"


@pytest.fixture()
def session_factory(db_url: str):
    engine = create_db_engine(db_url)
    schemas.Base.metadata.create_all(engine)
    yield create_session_factory(engine)
    engine.dispose()


@pytest.fixture()
def store(session_factory: sessionmaker) -> StoreBuilder:
    return StoreBuilder(session_factory)
