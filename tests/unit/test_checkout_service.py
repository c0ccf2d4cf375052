"""
Unit tests for the checkout service.
These tests cover pricing, the order invariants and all-or-nothing behaviour.
"""

import re
import pytest
from decimal import Decimal
from unittest.mock import MagicMock
from sqlalchemy.exc import OperationalError
from coffeeshop.models import Order, OrderLine, CartItem, OrderStatus, format_order_number
from coffeeshop.services import checkout_service
from coffeeshop.services.checkout_service import checkout, CheckoutInput
from coffeeshop.services.cache_service import get_cache
from coffeeshop.services.contact_service import ContactData
from coffeeshop.exceptions import (
    ValidationError, CartEmptyError, StockExhaustedError, CheckoutTimeoutError
)

TAX = Decimal('2000')


def _input(delivery, payment_method, **contact):
    return CheckoutInput(
        payment_method_id=payment_method.id,
        delivery_id=delivery.id,
        contact=ContactData(**contact)
    )


class TestCheckoutPricing:
    """Totals and line pricing."""

    def test_flash_sale_and_regular_lines(self, session, account, product_a, product_b,
                                          delivery, payment_method, add_to_cart):
        """2 x 10000 regular + 1 x 6000 flash sale, fee 5000, tax 2000."""
        add_to_cart(account, product_a, 2)
        add_to_cart(account, product_b, 1)

        result = checkout(session, account.id, _input(delivery, payment_method), tax=TAX)

        assert result.subtotal == Decimal('26000')
        assert result.tax == Decimal('2000')
        assert result.delivery_fee == Decimal('5000')
        assert result.total == Decimal('33000')

        by_product = {line.product_id: line for line in result.lines}
        assert by_product[product_a.id].unit_price == Decimal('10000')
        assert by_product[product_a.id].subtotal == Decimal('20000')
        assert by_product[product_b.id].unit_price == Decimal('6000')
        assert by_product[product_b.id].subtotal == Decimal('6000')

    def test_persisted_header_matches_lines(self, session, account, product_a, product_b,
                                            delivery, payment_method, add_to_cart):
        add_to_cart(account, product_a, 3)
        add_to_cart(account, product_b, 2)

        result = checkout(session, account.id, _input(delivery, payment_method), tax=TAX)

        order = session.query(Order).filter_by(id=result.order_id).one()
        lines = session.query(OrderLine).filter_by(order_id=order.id).all()

        assert sum(line.subtotal for line in lines) == order.subtotal
        assert order.total == order.subtotal + order.tax + order.delivery_fee
        assert order.status == OrderStatus.PLACED
        assert len(lines) == 2

    def test_tax_is_flat_amount(self, session, account, product_a, delivery, payment_method, add_to_cart):
        add_to_cart(account, product_a, 1)

        result = checkout(session, account.id, _input(delivery, payment_method), tax=Decimal('1500'))

        assert result.tax == Decimal('1500')
        assert result.total == Decimal('10000') + Decimal('1500') + Decimal('5000')

    def test_size_and_variant_labels_are_captured(self, session, account, product_a, size, variant,
                                                  delivery, payment_method, add_to_cart):
        add_to_cart(account, product_a, 1, size=size, variant=variant)

        result = checkout(session, account.id, _input(delivery, payment_method), tax=TAX)

        line = session.query(OrderLine).filter_by(order_id=result.order_id).one()
        assert line.size == 'Large'
        assert line.variant == 'Ice'

    def test_order_number_format(self, session, account, product_a, delivery, payment_method, add_to_cart):
        add_to_cart(account, product_a, 1)

        result = checkout(session, account.id, _input(delivery, payment_method), tax=TAX)

        assert result.order_number == format_order_number(result.order_id)
        assert re.match(r'^#ORD-\d{3,}$', result.order_number)


class TestCheckoutEffects:
    """Stock, cart and contact side effects of a successful checkout."""

    def test_stock_decremented_by_quantity(self, session, account, product_a, product_b,
                                           delivery, payment_method, add_to_cart, stock_of):
        add_to_cart(account, product_a, 2)
        add_to_cart(account, product_b, 5)

        checkout(session, account.id, _input(delivery, payment_method), tax=TAX)

        assert stock_of(product_a.id) == 8
        assert stock_of(product_b.id) == 0

    def test_cart_is_empty_afterwards(self, session, account, product_a, delivery, payment_method, add_to_cart):
        add_to_cart(account, product_a, 1)

        checkout(session, account.id, _input(delivery, payment_method), tax=TAX)

        assert session.query(CartItem).filter_by(account_id=account.id).count() == 0

    def test_other_accounts_cart_untouched(self, session, account, other_account, product_a,
                                           delivery, payment_method, add_to_cart):
        add_to_cart(account, product_a, 1)
        add_to_cart(other_account, product_a, 1)

        checkout(session, account.id, _input(delivery, payment_method), tax=TAX)

        assert session.query(CartItem).filter_by(account_id=other_account.id).count() == 1

    def test_contact_falls_back_to_account(self, session, account, product_a,
                                           delivery, payment_method, add_to_cart):
        add_to_cart(account, product_a, 1)

        result = checkout(
            session, account.id,
            _input(delivery, payment_method, email='order@test.com'),
            tax=TAX
        )

        order = session.query(Order).filter_by(id=result.order_id).one()
        assert order.full_name == 'Jane Doe'
        assert order.email == 'order@test.com'
        assert result.contact.fullname == 'Jane Doe'


class TestCheckoutFailures:
    """Every failure leaves no order, no stock change and the cart intact."""

    def test_empty_cart(self, session, account, delivery, payment_method):
        with pytest.raises(CartEmptyError) as exc:
            checkout(session, account.id, _input(delivery, payment_method), tax=TAX)

        assert exc.value.status_code == 400
        assert session.query(Order).count() == 0

    def test_missing_email_everywhere(self, session, product_a, delivery, payment_method,
                                      add_to_cart, stock_of):
        from coffeeshop.models import Account
        account = Account(email='', full_name='No Mail', address='Somewhere', phone='081111111111')
        session.add(account)
        session.commit()
        add_to_cart(account, product_a, 1)

        with pytest.raises(ValidationError) as exc:
            checkout(session, account.id, _input(delivery, payment_method), tax=TAX)

        assert exc.value.field == 'email'
        assert 'email' in exc.value.message
        assert session.query(Order).count() == 0
        assert stock_of(product_a.id) == 10

    def test_unknown_delivery(self, session, account, product_a, payment_method, add_to_cart):
        add_to_cart(account, product_a, 1)

        with pytest.raises(ValidationError) as exc:
            checkout(
                session, account.id,
                CheckoutInput(payment_method_id=payment_method.id, delivery_id=9999),
                tax=TAX
            )

        assert exc.value.field == 'id_delivery'
        assert session.query(Order).count() == 0

    def test_unknown_payment_method(self, session, account, product_a, delivery, add_to_cart):
        add_to_cart(account, product_a, 1)

        with pytest.raises(ValidationError) as exc:
            checkout(
                session, account.id,
                CheckoutInput(payment_method_id=9999, delivery_id=delivery.id),
                tax=TAX
            )

        assert exc.value.field == 'id_paymentMethod'

    def test_stock_exhausted_rolls_back_everything(self, session, account, product_a, product_b,
                                                   delivery, payment_method, add_to_cart, stock_of):
        """First line succeeds, second line finds too little stock: nothing persists."""
        add_to_cart(account, product_a, 2)
        add_to_cart(account, product_b, 6)

        with pytest.raises(StockExhaustedError) as exc:
            checkout(session, account.id, _input(delivery, payment_method), tax=TAX)

        assert exc.value.product_id == product_b.id
        assert 'Hazelnut Latte' in exc.value.message
        assert stock_of(product_a.id) == 10
        assert stock_of(product_b.id) == 5
        assert session.query(Order).count() == 0
        assert session.query(OrderLine).count() == 0
        assert session.query(CartItem).filter_by(account_id=account.id).count() == 2

    def test_last_unit_goes_to_first_checkout(self, session, account, other_account, category,
                                              delivery, payment_method, add_to_cart, stock_of):
        """
        Two buyers of the last unit, run one after the other: one order, one
        stock-exhaustion error. Nothing reads stock before the conditional
        decrement, so the second checkout is rejected by the write itself.
        """
        from coffeeshop.models import Product
        product = Product(name='Single Origin', category_id=category.id,
                          price_original=Decimal('25000'), stock=1)
        session.add(product)
        session.commit()
        add_to_cart(account, product, 1)
        add_to_cart(other_account, product, 1)

        winner = checkout(session, account.id, _input(delivery, payment_method), tax=TAX)

        with pytest.raises(StockExhaustedError):
            checkout(session, other_account.id, _input(delivery, payment_method), tax=TAX)

        assert stock_of(product.id) == 0
        assert session.query(Order).count() == 1
        assert session.query(Order).one().id == winner.order_id
        assert session.query(Order).filter_by(account_id=other_account.id).count() == 0

    def test_time_budget_exhausted(self, session, account, product_a, delivery, payment_method,
                                   add_to_cart, stock_of):
        add_to_cart(account, product_a, 1)

        with pytest.raises(CheckoutTimeoutError):
            checkout(session, account.id, _input(delivery, payment_method), tax=TAX, timeout=0)

        assert session.query(Order).count() == 0
        assert stock_of(product_a.id) == 10
        assert session.query(CartItem).filter_by(account_id=account.id).count() == 1


class _PgError(Exception):
    """DBAPI error carrying a PostgreSQL SQLSTATE."""

    def __init__(self, pgcode):
        super().__init__(pgcode)
        self.pgcode = pgcode


class TestCheckoutDatabaseErrors:

    def _fail_decrement(self, monkeypatch, pgcode):
        def fail(session, line):
            raise OperationalError('UPDATE product', {}, _PgError(pgcode))
        monkeypatch.setattr(checkout_service, '_decrement_stock', fail)

    def test_statement_timeout_becomes_checkout_timeout(self, session, account, product_a, delivery,
                                                        payment_method, add_to_cart, stock_of, monkeypatch):
        add_to_cart(account, product_a, 1)
        self._fail_decrement(monkeypatch, '57014')

        with pytest.raises(CheckoutTimeoutError) as exc:
            checkout(session, account.id, _input(delivery, payment_method), tax=TAX)

        assert isinstance(exc.value.__cause__, OperationalError)
        assert session.query(Order).count() == 0
        assert session.query(OrderLine).count() == 0
        assert session.query(CartItem).filter_by(account_id=account.id).count() == 1
        assert stock_of(product_a.id) == 10

    def test_other_operational_errors_propagate(self, session, account, product_a, delivery,
                                                payment_method, add_to_cart, monkeypatch):
        add_to_cart(account, product_a, 1)
        self._fail_decrement(monkeypatch, '08006')

        with pytest.raises(OperationalError):
            checkout(session, account.id, _input(delivery, payment_method), tax=TAX)

        assert session.query(Order).count() == 0

    def test_statement_timeout_set_on_postgresql(self):
        pg_session = MagicMock()
        pg_session.get_bind.return_value.dialect.name = 'postgresql'

        checkout_service._apply_statement_timeout(pg_session, 2.5)

        statement = pg_session.execute.call_args[0][0]
        assert str(statement) == 'SET LOCAL statement_timeout = 2500'

    def test_statement_timeout_skipped_elsewhere(self):
        sqlite_session = MagicMock()
        sqlite_session.get_bind.return_value.dialect.name = 'sqlite'

        checkout_service._apply_statement_timeout(sqlite_session, 2.5)

        sqlite_session.execute.assert_not_called()


class TestCheckoutCacheInvalidation:

    def test_cached_details_of_sold_products_are_dropped(self, session, account, product_a, product_b,
                                                         delivery, payment_method, add_to_cart,
                                                         monkeypatch):
        client = MagicMock()
        monkeypatch.setattr(get_cache(), 'client', client)
        add_to_cart(account, product_a, 1)
        add_to_cart(account, product_b, 2)

        checkout(session, account.id, _input(delivery, payment_method), tax=TAX)

        client.delete.assert_called_once()
        assert set(client.delete.call_args[0]) == {
            f'coffeeshop:products:detail:{product_a.id}',
            f'coffeeshop:products:detail:{product_b.id}',
        }

    def test_failed_checkout_keeps_cache(self, session, account, product_b, delivery, payment_method,
                                         add_to_cart, monkeypatch):
        client = MagicMock()
        monkeypatch.setattr(get_cache(), 'client', client)
        add_to_cart(account, product_b, 6)

        with pytest.raises(StockExhaustedError):
            checkout(session, account.id, _input(delivery, payment_method), tax=TAX)

        client.delete.assert_not_called()
