import pytest

from scalemodel_kpis.core.errors import ConfigurationError, NoDataError
from scalemodel_kpis.data.repos import CustomerProfitRepository
from scalemodel_kpis.kpis.customers import CustomerKpiService


def _service(session_factory, limit: int = 5) -> tuple:
    session = session_factory()
    return session, CustomerKpiService(CustomerProfitRepository(session), limit=limit)


def _seed_customers(store, count: int = 12) -> None:
    # 客戶 i 的利潤 = i × (20 - 10) × 1 = 10i
    store.product("P1", stock=100, buy_price=10.0)
    for number in range(1, count + 1):
        store.customer(number, city=f"City{number}", country="USA")
        store.order(1000 + number, customer=number, lines=[("P1", number, 20.0)])


class _CountingRepo:
    def __init__(self, rows) -> None:
        self.rows = rows
        self.calls = 0

    def profit_by_customer(self):
        self.calls += 1
        return self.rows


def test_customer_profit_example(store, session_factory) -> None:
    store.customer(1, last_name="Schmitt")
    store.product("P1", stock=10, buy_price=60.0)
    store.product("P2", stock=10, buy_price=30.0)
    store.order(100, customer=1, lines=[("P1", 2, 100.0), ("P2", 1, 50.0)])

    session, service = _service(session_factory)
    with session:
        rows = service.customer_profit()

    assert len(rows) == 1
    assert rows[0].customer_number == 1
    assert rows[0].contact_last_name == "Schmitt"
    assert rows[0].profit == pytest.approx(100.0)


def test_profit_sums_across_orders(store, session_factory) -> None:
    store.customer(1)
    store.product("P1", stock=10, buy_price=5.0)
    store.order(100, customer=1, lines=[("P1", 1, 10.0)])
    store.order(101, customer=1, lines=[("P1", 3, 10.0)])

    session, service = _service(session_factory)
    with session:
        rows = service.customer_profit()

    assert rows[0].profit == pytest.approx(20.0)


def test_customers_without_orders_are_excluded(store, session_factory) -> None:
    _seed_customers(store, count=3)
    store.customer(99)
    store.payment(99, "HQ336336", 6066.78)

    session, service = _service(session_factory)
    with session:
        numbers = [row.customer_number for row in service.customer_profit()]
        ltv = service.lifetime_value()

    assert numbers == [1, 2, 3]
    assert ltv.customers == 3
    assert ltv.ltv == pytest.approx(20.0)


def test_vip_and_least_engaged_rankings(store, session_factory) -> None:
    _seed_customers(store)

    session, service = _service(session_factory)
    with session:
        vip = service.top_vip()
        least = service.least_engaged()

    assert [row.customer_number for row in vip] == [12, 11, 10, 9, 8]
    assert [row.customer_number for row in least] == [1, 2, 3, 4, 5]
    assert [row.profit for row in vip] == sorted((row.profit for row in vip), reverse=True)
    assert [row.profit for row in least] == sorted(row.profit for row in least)
    assert not {row.customer_number for row in vip} & {row.customer_number for row in least}
    assert vip[0].city == "City12"
    assert vip[0].country == "USA"


def test_lifetime_value_is_mean_profit(store, session_factory) -> None:
    _seed_customers(store, count=4)

    session, service = _service(session_factory)
    with session:
        ltv = service.lifetime_value()
        projection = service.acquisition_projection(10)

    assert ltv.ltv == pytest.approx((10 + 20 + 30 + 40) / 4)
    assert projection.new_customers == 10
    assert projection.projected_profit == pytest.approx(ltv.ltv * 10)


def test_acquisition_projection_rejects_negative_count(store, session_factory) -> None:
    _seed_customers(store, count=2)

    session, service = _service(session_factory)
    with session:
        with pytest.raises(ConfigurationError):
            service.acquisition_projection(-1)


def test_no_orders_raise_no_data(store, session_factory) -> None:
    store.customer(1)

    session, service = _service(session_factory)
    with session:
        with pytest.raises(NoDataError):
            service.lifetime_value()
        with pytest.raises(NoDataError):
            service.top_vip()
        with pytest.raises(NoDataError):
            service.least_engaged()


def test_profit_table_is_aggregated_once() -> None:
    repo = _CountingRepo([(1, "Last", "First", "Nantes", "France", 50.0), (2, "L2", "F2", "Lyon", "France", 10.0)])
    service = CustomerKpiService(repo, limit=1)

    assert service.top_vip()[0].customer_number == 1
    assert service.least_engaged()[0].customer_number == 2
    assert service.lifetime_value().ltv == pytest.approx(30.0)
    assert service.acquisition_projection(2).projected_profit == pytest.approx(60.0)
    assert repo.calls == 1


@pytest.mark.parametrize("reverse", [False, True])
def test_profit_does_not_depend_on_row_order(store, session_factory, reverse: bool) -> None:
    store.product("P1", stock=10, buy_price=60.0)
    store.product("P2", stock=10, buy_price=30.0)
    store.product("P3", stock=10, buy_price=5.0)
    orders = [
        (100, 1, [("P1", 2, 100.0), ("P2", 1, 50.0), ("P3", 4, 7.5)]),
        (101, 1, [("P3", 3, 9.0), ("P1", 1, 80.0)]),
        (102, 2, [("P2", 5, 31.0), ("P1", 1, 65.0)]),
    ]
    if reverse:
        orders = [(number, customer, list(reversed(lines))) for number, customer, lines in reversed(orders)]
    for number in (2, 1) if reverse else (1, 2):
        store.customer(number)
    for number, customer, lines in orders:
        store.order(number, customer=customer, lines=lines)

    session, service = _service(session_factory)
    with session:
        profits = [(row.customer_number, row.profit) for row in service.customer_profit()]
        ltv = service.lifetime_value()

    # 客戶 1：80 + 20 + 10 + 12 + 20 = 142；客戶 2：5 + 5 = 10
    assert profits == [(1, pytest.approx(142.0)), (2, pytest.approx(10.0))]
    assert ltv.ltv == pytest.approx(76.0)
