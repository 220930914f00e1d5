from __future__ import annotations

from typing import Collection, List, Optional, Sequence, Tuple, Type

from sqlalchemy import Float, func, select, type_coerce
from sqlalchemy.orm import Session

from . import schemas


class BaseRepository:
    """封裝共同的 Session 行為。"""

    def __init__(self, session: Session) -> None:
        self.session = session


class CensusRepository(BaseRepository):
    """資料表筆數統計。"""

    def count_rows(self, model: Type[schemas.Base]) -> int:
        return int(self.session.execute(select(func.count()).select_from(model)).scalar_one())

    @staticmethod
    def attribute_count(model: Type[schemas.Base]) -> int:
        return len(model.__table__.columns)


class IntegrityRepository(BaseRepository):
    """以 LEFT JOIN 找出懸空的外鍵參照。"""

    def order_lines_without_order(self) -> int:
        detail = schemas.OrderDetailModel
        order = schemas.OrderModel
        stmt = (
            select(func.count())
            .select_from(detail)
            .outerjoin(order, detail.order_number == order.order_number)
            .where(order.order_number.is_(None))
        )
        return int(self.session.execute(stmt).scalar_one())

    def order_lines_without_product(self) -> int:
        detail = schemas.OrderDetailModel
        product = schemas.ProductModel
        stmt = (
            select(func.count())
            .select_from(detail)
            .outerjoin(product, detail.product_code == product.product_code)
            .where(product.product_code.is_(None))
        )
        return int(self.session.execute(stmt).scalar_one())

    def orders_without_customer(self) -> int:
        order = schemas.OrderModel
        customer = schemas.CustomerModel
        stmt = (
            select(func.count())
            .select_from(order)
            .outerjoin(customer, order.customer_number == customer.customer_number)
            .where(customer.customer_number.is_(None))
        )
        return int(self.session.execute(stmt).scalar_one())


class SalesRepository(BaseRepository):
    """商品銷售彙總查詢。"""

    def demand_with_stock(self) -> List[Tuple[str, int, int]]:
        """回傳 (productCode, quantityInStock, 總訂購量)，排除總訂購量為 0 的商品。"""

        detail = schemas.OrderDetailModel
        product = schemas.ProductModel
        total_ordered = func.sum(detail.quantity_ordered)
        stmt = (
            select(product.product_code, product.quantity_in_stock, total_ordered)
            .join(detail, detail.product_code == product.product_code)
            .join(schemas.OrderModel, detail.order_number == schemas.OrderModel.order_number)
            .group_by(product.product_code, product.quantity_in_stock)
            .having(total_ordered > 0)
        )
        return [(code, int(stock), int(total)) for code, stock, total in self.session.execute(stmt)]

    def product_performance(self, product_codes: Optional[Collection[str]] = None) -> List[Tuple[str, float]]:
        """回傳 (productCode, Σ quantityOrdered × priceEach)，可限縮於指定商品。"""

        detail = schemas.OrderDetailModel
        product = schemas.ProductModel
        performance = type_coerce(func.sum(detail.quantity_ordered * detail.price_each), Float)
        stmt = (
            select(detail.product_code, performance)
            .join(product, detail.product_code == product.product_code)
            .join(schemas.OrderModel, detail.order_number == schemas.OrderModel.order_number)
            .group_by(detail.product_code)
        )
        if product_codes is not None:
            stmt = stmt.where(detail.product_code.in_(list(product_codes)))
        return [(code, float(total)) for code, total in self.session.execute(stmt)]

    def products_by_code(self, product_codes: Sequence[str]) -> dict[str, schemas.ProductModel]:
        if not product_codes:
            return {}
        stmt = select(schemas.ProductModel).where(schemas.ProductModel.product_code.in_(list(product_codes)))
        return {model.product_code: model for model in self.session.scalars(stmt)}


class CustomerProfitRepository(BaseRepository):
    """客戶利潤彙總：orders ⋈ orderdetails ⋈ products ⋈ customers。"""

    def profit_by_customer(self) -> List[Tuple[int, str, str, str, str, float]]:
        order = schemas.OrderModel
        detail = schemas.OrderDetailModel
        product = schemas.ProductModel
        customer = schemas.CustomerModel
        profit = type_coerce(
            func.sum(detail.quantity_ordered * (detail.price_each - product.buy_price)),
            Float,
        )
        stmt = (
            select(
                customer.customer_number,
                customer.contact_last_name,
                customer.contact_first_name,
                customer.city,
                customer.country,
                profit,
            )
            .select_from(order)
            .join(detail, order.order_number == detail.order_number)
            .join(product, detail.product_code == product.product_code)
            .join(customer, order.customer_number == customer.customer_number)
            .group_by(
                customer.customer_number,
                customer.contact_last_name,
                customer.contact_first_name,
                customer.city,
                customer.country,
            )
            .order_by(customer.customer_number)
        )
        return [
            (int(number), last, first, city, country, float(value))
            for number, last, first, city, country, value in self.session.execute(stmt)
        ]
