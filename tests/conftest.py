import pytest
from decimal import Decimal
import uuid

from coffeeshop import create_app
from coffeeshop.database import Base, get_session
from coffeeshop.models import (
    Account, Category, Product, Size, Variant, Delivery, PaymentMethod, CartItem
)
from coffeeshop.services.auth_service import issue_token


@pytest.fixture(scope='session')
def app():
    """Create application instance for testing (in-memory SQLite, cache off)."""
    return create_app('config.TestConfig')


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def session(app):
    """Database session; every table is emptied after the test."""
    session = get_session()
    yield session
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture(scope='function')
def account(session):
    """Account with every contact field on file."""
    suffix = str(uuid.uuid4())[:8]
    account = Account(
        email=f'jane-{suffix}@test.com',
        full_name='Jane Doe',
        address='Jl. Kopi No. 1',
        phone='081234567890',
        active=True
    )
    session.add(account)
    session.commit()
    return account


@pytest.fixture(scope='function')
def other_account(session):
    suffix = str(uuid.uuid4())[:8]
    account = Account(
        email=f'john-{suffix}@test.com',
        full_name='John Roe',
        address='Jl. Teh No. 2',
        phone='089876543210',
        active=True
    )
    session.add(account)
    session.commit()
    return account


@pytest.fixture(scope='function')
def delivery(session):
    """Delivery with a flat fee of 5000."""
    delivery = Delivery(name='Door Delivery', fee=Decimal('5000'))
    session.add(delivery)
    session.commit()
    return delivery


@pytest.fixture(scope='function')
def payment_method(session):
    method = PaymentMethod(name='Cash')
    session.add(method)
    session.commit()
    return method


@pytest.fixture(scope='function')
def size(session):
    size = Size(name='Large')
    session.add(size)
    session.commit()
    return size


@pytest.fixture(scope='function')
def variant(session):
    variant = Variant(name='Ice')
    session.add(variant)
    session.commit()
    return variant


@pytest.fixture(scope='function')
def category(session):
    category = Category(name='Coffee')
    session.add(category)
    session.commit()
    return category


@pytest.fixture(scope='function')
def product_a(session, category):
    """Regular-priced product: 10000, stock 10."""
    product = Product(
        name='Caffe Latte',
        category_id=category.id,
        price_original=Decimal('10000'),
        price_discount=Decimal('9000'),
        flash_sale=False,
        stock=10
    )
    session.add(product)
    session.commit()
    return product


@pytest.fixture(scope='function')
def product_b(session, category):
    """Flash-sale product: 8000 discounted to 6000, stock 5."""
    product = Product(
        name='Hazelnut Latte',
        category_id=category.id,
        price_original=Decimal('8000'),
        price_discount=Decimal('6000'),
        flash_sale=True,
        stock=5
    )
    session.add(product)
    session.commit()
    return product


@pytest.fixture(scope='function')
def add_to_cart(session):
    """Insert cart lines directly, bypassing add-to-cart validation."""
    def _add(account, product, quantity, size=None, variant=None):
        item = CartItem(
            account_id=account.id,
            product_id=product.id,
            quantity=quantity,
            size_id=size.id if size else None,
            variant_id=variant.id if variant else None
        )
        session.add(item)
        session.commit()
        return item
    return _add


@pytest.fixture(scope='function')
def auth_headers(app, account):
    """Bearer headers for the default account."""
    with app.app_context():
        token = issue_token(account.id)
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def stock_of(session):
    """Current stock straight from the database."""
    def _stock(product_id):
        return session.query(Product.stock).filter(Product.id == product_id).scalar()
    return _stock


@pytest.fixture(scope='function')
def admin_account(session):
    suffix = str(uuid.uuid4())[:8]
    admin = Account(email=f'admin-{suffix}@test.com', full_name='Shop Admin', role='admin', active=True)
    session.add(admin)
    session.commit()
    return admin


@pytest.fixture(scope='function')
def admin_headers(app, admin_account):
    """Bearer headers carrying the admin role."""
    with app.app_context():
        token = issue_token(admin_account.id, admin_account.role)
    return {'Authorization': f'Bearer {token}'}
