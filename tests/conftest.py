import os

# Must be set before the app (and its settings) is imported
os.environ["ENV"] = "testing"
os.environ.setdefault("LOG_DIR", "logs")

import pytest
from datetime import timedelta
from decimal import Decimal
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from typing import Generator

from main import app
from core.config import settings
from core.database import Base
from utils.deps import get_db
from utils.dates import utc_now
from utils.hashing import hash_password
from models.users import User
from models.categories import Category
from models.products import Product
from models.product_images import ProductImage
from models.sales import Sale
from services.token_service import TokenService

# SYNC SQLite for testing (matches sync service layer)
SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False}
)

TestingSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)

TEST_PASSWORD = "password123"


@pytest.fixture
def session() -> Generator[Session, None, None]:
    """
    Creates a fresh, empty database for each test.
    """
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

    Base.metadata.drop_all(bind=engine)


@pytest.fixture
async def client(session: Session):
    """
    Yields an HTTP client that talks to the app using the test database.
    """
    def override_get_db():
        try:
            yield session
        finally:
            pass  # Session cleanup handled by session fixture

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


def _create_user(session: Session, email: str, name: str, role: str) -> User:
    user = User(
        name=name,
        email=email,
        password_hash=hash_password(TEST_PASSWORD),
        phone="09171234567",
        address="12 Poultry Lane, Batangas",
        role=role
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def customer(session):
    return _create_user(session, "customer@example.com", "Juan Dela Cruz", "user")


@pytest.fixture
def other_customer(session):
    return _create_user(session, "maria@example.com", "Maria Santos", "user")


@pytest.fixture
def admin(session):
    return _create_user(session, "admin@eggmart.com", "Store Admin", "admin")


@pytest.fixture
def login_as(client):
    """
    Puts a session cookie for ``user`` on the shared client; the next call
    replaces it.
    """
    def _login(user: User) -> AsyncClient:
        token = TokenService.create_access_token(user.id, user.email, user.role, user.name)
        client.cookies.set(settings.AUTH_COOKIE_NAME, token)
        return client
    return _login


@pytest.fixture
def eggs_category(session):
    category = Category(name="Eggs", description="Fresh farm eggs")
    session.add(category)
    session.commit()
    session.refresh(category)
    return category


@pytest.fixture
def make_product(session, eggs_category):
    def _make(name="Fresh Brown Eggs (Tray of 30)", price="250.00", stock=50,
              status=None, image="/uploads/brown-eggs.jpg") -> Product:
        product = Product(
            category_id=eggs_category.id,
            name=name,
            price=Decimal(price),
            stock=stock,
            status=status or Product.status_for_stock(stock),
            description="Farm fresh"
        )
        if image:
            product.images.append(ProductImage(image_url=image, alt_text=name, sort_order=0, is_primary=True))
        session.add(product)
        session.commit()
        session.refresh(product)
        return product
    return _make


@pytest.fixture
def product(make_product):
    return make_product()


@pytest.fixture
def make_sale(session):
    """Inserts a sale row directly, bypassing admission."""
    def _make(product: Product, sale_price="200.00", discount="20.00", quantity=10,
              start=None, end=None, status="active", quantity_sold=0) -> Sale:
        now = utc_now()
        sale = Sale(
            product_id=product.id,
            original_price=product.price,
            sale_price=Decimal(sale_price),
            discount_percentage=Decimal(discount),
            quantity_available=quantity,
            quantity_sold=quantity_sold,
            start_date=start or now - timedelta(days=1),
            end_date=end or now + timedelta(days=1),
            status=status
        )
        session.add(sale)
        session.commit()
        session.refresh(sale)
        return sale
    return _make
