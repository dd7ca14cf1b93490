import pytest
from datetime import datetime, timedelta
from decimal import Decimal
from models.sales import Sale
from schemas.sale_schemas import CreateSaleRequest, UpdateSaleRequest
from services.sale_service import SaleService, OVERLAP_MESSAGE
from core.exceptions import NotFoundError, ValidationError
from utils.dates import utc_now


def _request(product_id, start, end, quantity=5):
    return CreateSaleRequest(
        product_id=product_id,
        original_price=Decimal("250.00"),
        sale_price=Decimal("200.00"),
        discount_percentage=Decimal("20"),
        quantity_available=quantity,
        start_date=start,
        end_date=end
    )


def test_quantity_equal_to_stock_is_admitted(session, make_product):
    product = make_product(stock=5)

    sale = SaleService.create_sale(session, _request(product.id, datetime(2099, 1, 1), datetime(2099, 1, 10), 5))

    assert sale.id is not None
    assert sale.status == "active"
    assert sale.quantity_sold == 0


def test_quantity_above_stock_is_rejected(session, make_product):
    product = make_product(stock=5)

    with pytest.raises(ValidationError) as exc_info:
        SaleService.create_sale(session, _request(product.id, datetime(2099, 1, 1), datetime(2099, 1, 10), 6))

    assert exc_info.value.status_code == 400
    assert exc_info.value.detail == "Quantity available (6) cannot exceed product stock (5)"
    assert session.query(Sale).count() == 0


def test_unknown_product_is_not_found(session):
    with pytest.raises(NotFoundError):
        SaleService.create_sale(session, _request(999, datetime(2099, 1, 1), datetime(2099, 1, 10)))


def test_overlapping_window_is_rejected(session, product):
    SaleService.create_sale(session, _request(product.id, datetime(2099, 1, 1), datetime(2099, 1, 10)))

    with pytest.raises(ValidationError) as exc_info:
        SaleService.create_sale(session, _request(product.id, datetime(2099, 1, 5), datetime(2099, 1, 15)))

    assert exc_info.value.detail == OVERLAP_MESSAGE


@pytest.mark.parametrize("start, end", [
    (datetime(2098, 12, 25), datetime(2099, 1, 1)),     # touches the first day
    (datetime(2099, 1, 10), datetime(2099, 1, 20)),     # touches the last day
    (datetime(2099, 1, 3), datetime(2099, 1, 4)),       # inside
    (datetime(2098, 12, 1), datetime(2099, 2, 1)),      # encloses
])
def test_overlap_bounds_are_inclusive(session, product, start, end):
    SaleService.create_sale(session, _request(product.id, datetime(2099, 1, 1), datetime(2099, 1, 10)))

    with pytest.raises(ValidationError):
        SaleService.create_sale(session, _request(product.id, start, end))


def test_adjacent_window_is_admitted(session, product):
    SaleService.create_sale(session, _request(product.id, datetime(2099, 1, 1), datetime(2099, 1, 10)))

    sale = SaleService.create_sale(session, _request(product.id, datetime(2099, 1, 11), datetime(2099, 1, 20)))

    assert sale.id is not None
    assert session.query(Sale).count() == 2


def test_expired_sale_does_not_block(session, product, make_sale):
    make_sale(product, start=datetime(2099, 1, 1), end=datetime(2099, 1, 10), status="expired")

    sale = SaleService.create_sale(session, _request(product.id, datetime(2099, 1, 5), datetime(2099, 1, 15)))

    assert sale.id is not None


def test_ended_but_unswept_sale_does_not_block(session, product, make_sale):
    now = utc_now()
    stale = make_sale(product, start=now - timedelta(days=5), end=now - timedelta(days=1), status="active")

    sale = SaleService.create_sale(session, _request(product.id, now - timedelta(days=2), now + timedelta(days=5)))

    session.refresh(stale)
    assert stale.status == "expired"
    assert sale.status == "active"
    assert session.query(Sale).filter(Sale.status == "active").count() == 1


def test_update_sweeps_before_checking_overlap(session, product, make_sale):
    now = utc_now()
    sale = SaleService.create_sale(session, _request(product.id, now + timedelta(days=1), now + timedelta(days=3)))
    make_sale(product, start=now - timedelta(days=5), end=now - timedelta(days=1), status="active")

    updated = SaleService.update_sale(session, sale.id, UpdateSaleRequest(
        original_price=Decimal("250.00"),
        sale_price=Decimal("200.00"),
        discount_percentage=Decimal("20"),
        quantity_available=5,
        start_date=now - timedelta(days=2),
        end_date=now + timedelta(days=3)
    ))

    assert updated.start_date == now - timedelta(days=2)


def test_other_products_do_not_block(session, make_product):
    first = make_product(name="White Eggs")
    second = make_product(name="Duck Eggs")
    SaleService.create_sale(session, _request(first.id, datetime(2099, 1, 1), datetime(2099, 1, 10)))

    sale = SaleService.create_sale(session, _request(second.id, datetime(2099, 1, 1), datetime(2099, 1, 10)))

    assert sale.product_id == second.id


def test_update_excludes_the_sale_itself(session, product):
    sale = SaleService.create_sale(session, _request(product.id, datetime(2099, 1, 1), datetime(2099, 1, 10)))

    updated = SaleService.update_sale(session, sale.id, UpdateSaleRequest(
        original_price=Decimal("250.00"),
        sale_price=Decimal("180.00"),
        discount_percentage=Decimal("28"),
        quantity_available=8,
        start_date=datetime(2099, 1, 2),
        end_date=datetime(2099, 1, 12)
    ))

    assert updated.sale_price == Decimal("180.00")
    assert updated.quantity_available == 8
    assert updated.end_date == datetime(2099, 1, 12)


def test_update_into_another_window_is_rejected(session, product):
    SaleService.create_sale(session, _request(product.id, datetime(2099, 1, 1), datetime(2099, 1, 10)))
    later = SaleService.create_sale(session, _request(product.id, datetime(2099, 2, 1), datetime(2099, 2, 10)))

    with pytest.raises(ValidationError):
        SaleService.update_sale(session, later.id, UpdateSaleRequest(
            original_price=Decimal("250.00"),
            sale_price=Decimal("200.00"),
            discount_percentage=Decimal("20"),
            quantity_available=5,
            start_date=datetime(2099, 1, 9),
            end_date=datetime(2099, 2, 10)
        ))


def test_update_checks_stock(session, make_product):
    product = make_product(stock=12)
    sale = SaleService.create_sale(session, _request(product.id, datetime(2099, 1, 1), datetime(2099, 1, 10)))

    with pytest.raises(ValidationError) as exc_info:
        SaleService.update_sale(session, sale.id, UpdateSaleRequest(
            original_price=Decimal("250.00"),
            sale_price=Decimal("200.00"),
            discount_percentage=Decimal("20"),
            quantity_available=13,
            start_date=datetime(2099, 1, 1),
            end_date=datetime(2099, 1, 10)
        ))

    assert "cannot exceed product stock (12)" in exc_info.value.detail


def test_update_unknown_sale_is_not_found(session):
    with pytest.raises(NotFoundError):
        SaleService.update_sale(session, 404, UpdateSaleRequest(
            original_price=Decimal("250.00"),
            sale_price=Decimal("200.00"),
            discount_percentage=Decimal("20"),
            quantity_available=1,
            start_date=datetime(2099, 1, 1),
            end_date=datetime(2099, 1, 10)
        ))


def test_delete_unknown_sale_is_not_found(session):
    with pytest.raises(NotFoundError):
        SaleService.delete_sale(session, 404)
