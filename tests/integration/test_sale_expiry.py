from datetime import timedelta
from models.sales import Sale
from services.pricing_service import PricingService
from services.product_service import ProductService
from utils.dates import utc_now


def test_sweep_marks_ended_sales_expired(session, product, make_sale):
    now = utc_now()
    ended = make_sale(product, start=now - timedelta(days=5), end=now - timedelta(days=1))

    swept = PricingService.sweep_expired_sales(session, now)

    assert swept == 1
    session.refresh(ended)
    assert ended.status == "expired"


def test_sweep_leaves_running_and_future_sales(session, make_product, make_sale):
    now = utc_now()
    running = make_sale(make_product(name="Running"))
    future = make_sale(make_product(name="Future"), start=now + timedelta(days=2), end=now + timedelta(days=4))

    assert PricingService.sweep_expired_sales(session, now) == 0

    assert session.get(Sale, running.id).status == "active"
    assert session.get(Sale, future.id).status == "active"


def test_product_read_sweeps_first(session, product, make_sale):
    now = utc_now()
    ended = make_sale(product, start=now - timedelta(days=3), end=now - timedelta(seconds=1))

    data = ProductService.get_product(session, product.id)

    assert data["isOnSale"] is False
    assert data["price"] == 250.0
    assert session.get(Sale, ended.id).status == "expired"


def test_newest_sale_wins_when_windows_collide(session, product, make_sale):
    make_sale(product, sale_price="210.00")
    newest = make_sale(product, sale_price="190.00")

    sale = PricingService.get_active_sale(session, product.id, utc_now())

    assert sale.id == newest.id
