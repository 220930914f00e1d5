from __future__ import annotations

from datetime import date

from sqlalchemy import Date, ForeignKey, Integer, LargeBinary, Numeric, SmallInteger, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .db import Base


def _money() -> Numeric:
    return Numeric(10, 2, asdecimal=False)


class ProductLineModel(Base):
    """商品系列分類。"""

    __tablename__ = "productlines"

    product_line: Mapped[str] = mapped_column("productLine", String(50), primary_key=True)
    text_description: Mapped[str | None] = mapped_column("textDescription", String(4000))
    html_description: Mapped[str | None] = mapped_column("htmlDescription", Text)
    image: Mapped[bytes | None] = mapped_column("image", LargeBinary)


class ProductModel(Base):
    """比例模型車商品資料表。"""

    __tablename__ = "products"

    product_code: Mapped[str] = mapped_column("productCode", String(15), primary_key=True)
    product_name: Mapped[str] = mapped_column("productName", String(70), nullable=False)
    product_line: Mapped[str] = mapped_column(
        "productLine", ForeignKey("productlines.productLine"), nullable=False
    )
    product_scale: Mapped[str] = mapped_column("productScale", String(10), nullable=False)
    product_vendor: Mapped[str] = mapped_column("productVendor", String(50), nullable=False)
    product_description: Mapped[str] = mapped_column("productDescription", Text, nullable=False)
    quantity_in_stock: Mapped[int] = mapped_column("quantityInStock", SmallInteger, nullable=False)
    buy_price: Mapped[float] = mapped_column("buyPrice", _money(), nullable=False)
    msrp: Mapped[float] = mapped_column("MSRP", _money(), nullable=False)


class OfficeModel(Base):
    """銷售據點資料表。"""

    __tablename__ = "offices"

    office_code: Mapped[str] = mapped_column("officeCode", String(10), primary_key=True)
    city: Mapped[str] = mapped_column("city", String(50), nullable=False)
    phone: Mapped[str] = mapped_column("phone", String(50), nullable=False)
    address_line1: Mapped[str] = mapped_column("addressLine1", String(50), nullable=False)
    address_line2: Mapped[str | None] = mapped_column("addressLine2", String(50))
    state: Mapped[str | None] = mapped_column("state", String(50))
    country: Mapped[str] = mapped_column("country", String(50), nullable=False)
    postal_code: Mapped[str] = mapped_column("postalCode", String(15), nullable=False)
    territory: Mapped[str] = mapped_column("territory", String(10), nullable=False)


class EmployeeModel(Base):
    """員工資料表，reportsTo 指向同表主管。"""

    __tablename__ = "employees"

    employee_number: Mapped[int] = mapped_column("employeeNumber", Integer, primary_key=True)
    last_name: Mapped[str] = mapped_column("lastName", String(50), nullable=False)
    first_name: Mapped[str] = mapped_column("firstName", String(50), nullable=False)
    extension: Mapped[str] = mapped_column("extension", String(10), nullable=False)
    email: Mapped[str] = mapped_column("email", String(100), nullable=False)
    office_code: Mapped[str] = mapped_column("officeCode", ForeignKey("offices.officeCode"), nullable=False)
    reports_to: Mapped[int | None] = mapped_column("reportsTo", ForeignKey("employees.employeeNumber"))
    job_title: Mapped[str] = mapped_column("jobTitle", String(50), nullable=False)


class CustomerModel(Base):
    """客戶資料表。"""

    __tablename__ = "customers"

    customer_number: Mapped[int] = mapped_column("customerNumber", Integer, primary_key=True)
    customer_name: Mapped[str] = mapped_column("customerName", String(50), nullable=False)
    contact_last_name: Mapped[str] = mapped_column("contactLastName", String(50), nullable=False)
    contact_first_name: Mapped[str] = mapped_column("contactFirstName", String(50), nullable=False)
    phone: Mapped[str] = mapped_column("phone", String(50), nullable=False)
    address_line1: Mapped[str] = mapped_column("addressLine1", String(50), nullable=False)
    address_line2: Mapped[str | None] = mapped_column("addressLine2", String(50))
    city: Mapped[str] = mapped_column("city", String(50), nullable=False)
    state: Mapped[str | None] = mapped_column("state", String(50))
    postal_code: Mapped[str | None] = mapped_column("postalCode", String(15))
    country: Mapped[str] = mapped_column("country", String(50), nullable=False)
    sales_rep_employee_number: Mapped[int | None] = mapped_column(
        "salesRepEmployeeNumber", ForeignKey("employees.employeeNumber")
    )
    credit_limit: Mapped[float | None] = mapped_column("creditLimit", _money())


class PaymentModel(Base):
    """客戶付款紀錄。"""

    __tablename__ = "payments"

    customer_number: Mapped[int] = mapped_column(
        "customerNumber", ForeignKey("customers.customerNumber"), primary_key=True
    )
    check_number: Mapped[str] = mapped_column("checkNumber", String(50), primary_key=True)
    payment_date: Mapped[date] = mapped_column("paymentDate", Date, nullable=False)
    amount: Mapped[float] = mapped_column("amount", _money(), nullable=False)


class OrderModel(Base):
    """銷售訂單。"""

    __tablename__ = "orders"

    order_number: Mapped[int] = mapped_column("orderNumber", Integer, primary_key=True)
    order_date: Mapped[date] = mapped_column("orderDate", Date, nullable=False)
    required_date: Mapped[date] = mapped_column("requiredDate", Date, nullable=False)
    shipped_date: Mapped[date | None] = mapped_column("shippedDate", Date)
    status: Mapped[str] = mapped_column("status", String(15), nullable=False)
    comments: Mapped[str | None] = mapped_column("comments", Text)
    customer_number: Mapped[int] = mapped_column(
        "customerNumber", ForeignKey("customers.customerNumber"), nullable=False
    )


class OrderDetailModel(Base):
    """訂單明細（每張訂單的各商品行）。"""

    __tablename__ = "orderdetails"

    order_number: Mapped[int] = mapped_column("orderNumber", ForeignKey("orders.orderNumber"), primary_key=True)
    product_code: Mapped[str] = mapped_column("productCode", ForeignKey("products.productCode"), primary_key=True)
    quantity_ordered: Mapped[int] = mapped_column("quantityOrdered", Integer, nullable=False)
    price_each: Mapped[float] = mapped_column("priceEach", _money(), nullable=False)
    order_line_number: Mapped[int] = mapped_column("orderLineNumber", SmallInteger, nullable=False)


# 報表輸出順序與顯示名稱
CENSUS_TABLES = (
    ("Customers", CustomerModel),
    ("Products", ProductModel),
    ("ProductLines", ProductLineModel),
    ("Orders", OrderModel),
    ("OrderDetails", OrderDetailModel),
    ("Payments", PaymentModel),
    ("Employees", EmployeeModel),
    ("Offices", OfficeModel),
)
