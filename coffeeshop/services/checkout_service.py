"""
Checkout service with transactional logic.
Turns an account's cart into an order: pricing, order persistence,
guarded stock decrement and cart clearing in one transaction.
"""
import logging
import time
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Dict, Optional, Any, Iterable

from sqlalchemy import text, update
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from coffeeshop.models import (
    CartItem, Product, Size, Variant, Delivery, PaymentMethod,
    Order, OrderLine, OrderStatus, format_order_number, effective_price
)
from coffeeshop.exceptions import (
    ShopError, ValidationError, CartEmptyError, StockExhaustedError, CheckoutTimeoutError
)
from coffeeshop.services.contact_service import ContactData, resolve_contact_data
from coffeeshop.services.catalog_service import invalidate_products

logger = logging.getLogger(__name__)

DEFAULT_TAX = Decimal('2000')
DEFAULT_TIMEOUT_SECONDS = 5.0
MONEY = Decimal('0.01')

# SQLSTATE for query_canceled, raised when statement_timeout fires
PG_QUERY_CANCELED = '57014'


@dataclass
class CheckoutInput:
    payment_method_id: int
    delivery_id: int
    contact: ContactData = field(default_factory=ContactData)


@dataclass
class PricedLine:
    product_id: int
    product_name: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal
    size: Optional[str] = None
    variant: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id_product': self.product_id,
            'name': self.product_name,
            'quantity': self.quantity,
            'price': float(self.unit_price),
            'subtotal': float(self.subtotal),
            'size': self.size,
            'variant': self.variant,
        }


@dataclass
class OrderResult:
    order_id: int
    order_number: str
    contact: ContactData
    payment_method_id: int
    delivery_id: int
    subtotal: Decimal
    tax: Decimal
    delivery_fee: Decimal
    total: Decimal
    status: OrderStatus
    lines: List[PricedLine]

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'id_orders': self.order_id,
            'order_number': self.order_number,
            'id_paymentMethod': self.payment_method_id,
            'id_delivery': self.delivery_id,
            'subtotal': float(self.subtotal),
            'tax': float(self.tax),
            'delivery_fee': float(self.delivery_fee),
            'total': float(self.total),
            'status': self.status.value,
            'products': [line.to_dict() for line in self.lines],
        }
        result.update(self.contact.to_dict())
        return result


class _Deadline:
    """Wall-clock budget for one checkout."""

    def __init__(self, seconds: float):
        self.seconds = seconds
        self._expires_at = time.monotonic() + seconds

    def check(self, step: str) -> None:
        if time.monotonic() >= self._expires_at:
            logger.warning(f"[CHECKOUT] Time budget of {self.seconds}s exceeded at step '{step}'")
            raise CheckoutTimeoutError()


def checkout(
    session: Session,
    account_id: int,
    checkout_input: CheckoutInput,
    tax: Decimal = DEFAULT_TAX,
    timeout: float = DEFAULT_TIMEOUT_SECONDS
) -> OrderResult:
    """
    Place an order from the account's cart.

    Either everything commits (order header, lines, stock decrements and the
    emptied cart) or the session is rolled back and the error re-raised.

    Raises:
        ValidationError: missing contact field, unknown delivery or payment method
        CartEmptyError: nothing to check out
        StockExhaustedError: a product no longer has enough stock
        CheckoutTimeoutError: the time budget ran out
    """
    deadline = _Deadline(timeout)

    try:
        _apply_statement_timeout(session, timeout)

        # 1. Contact data
        contact = resolve_contact_data(session, account_id, checkout_input.contact)

        # 2. Cart with current prices
        lines = _load_priced_cart(session, account_id)
        if not lines:
            raise CartEmptyError()

        # 3. Reference data
        delivery = session.query(Delivery).filter(Delivery.id == checkout_input.delivery_id).first()
        if not delivery:
            raise ValidationError('id_delivery', 'not found')

        payment_method = session.query(PaymentMethod).filter(
            PaymentMethod.id == checkout_input.payment_method_id
        ).first()
        if not payment_method:
            raise ValidationError('id_paymentMethod', 'not found')

        # 4. Totals
        subtotal = sum((line.subtotal for line in lines), Decimal('0')).quantize(MONEY)
        tax = Decimal(str(tax)).quantize(MONEY)
        delivery_fee = Decimal(str(delivery.fee)).quantize(MONEY)
        total = (subtotal + tax + delivery_fee).quantize(MONEY)

        deadline.check('pricing')

        # 5. Order header
        order = Order(
            account_id=account_id,
            email=contact.email,
            full_name=contact.fullname,
            address=contact.address,
            phone=contact.phone,
            delivery_id=delivery.id,
            payment_method_id=payment_method.id,
            subtotal=subtotal,
            tax=tax,
            delivery_fee=delivery_fee,
            total=total,
            status=OrderStatus.PLACED
        )
        session.add(order)
        session.flush()
        order.order_number = format_order_number(order.id)

        # 6. Lines and guarded stock decrement
        for line in lines:
            session.add(OrderLine(
                order_id=order.id,
                product_id=line.product_id,
                quantity=line.quantity,
                subtotal=line.subtotal,
                size=line.size,
                variant=line.variant
            ))
            _decrement_stock(session, line)

        # 7. Empty the cart
        session.query(CartItem).filter(
            CartItem.account_id == account_id
        ).delete(synchronize_session=False)

        deadline.check('commit')
        session.commit()

    except ShopError as e:
        session.rollback()
        logger.info(f"[CHECKOUT] account_id={account_id} rejected: {e.message}")
        raise
    except OperationalError as e:
        session.rollback()
        if _is_statement_timeout(e):
            logger.warning(f"[CHECKOUT] account_id={account_id} statement timeout")
            raise CheckoutTimeoutError() from e
        logger.exception(f"[CHECKOUT] account_id={account_id} database error: {e}")
        raise
    except Exception as e:
        session.rollback()
        logger.exception(f"[CHECKOUT] account_id={account_id} failed: {e}")
        raise

    logger.info(
        f"[CHECKOUT] account_id={account_id} placed order {order.order_number} "
        f"(lines={len(lines)}, total={total})"
    )
    _invalidate_product_cache(line.product_id for line in lines)

    return OrderResult(
        order_id=order.id,
        order_number=order.order_number,
        contact=contact,
        payment_method_id=payment_method.id,
        delivery_id=delivery.id,
        subtotal=subtotal,
        tax=tax,
        delivery_fee=delivery_fee,
        total=total,
        status=order.status,
        lines=lines
    )


# =====================================================
# PRIVATE HELPERS
# =====================================================

def _load_priced_cart(session: Session, account_id: int) -> List[PricedLine]:
    """Cart lines joined with current product pricing and option labels."""
    rows = (
        session.query(
            CartItem.product_id,
            CartItem.quantity,
            Product.name,
            Product.price_original,
            Product.price_discount,
            Product.flash_sale,
            Size.name,
            Variant.name
        )
        .join(Product, Product.id == CartItem.product_id)
        .outerjoin(Size, Size.id == CartItem.size_id)
        .outerjoin(Variant, Variant.id == CartItem.variant_id)
        .filter(CartItem.account_id == account_id)
        .order_by(CartItem.id)
        .all()
    )

    lines = []
    for product_id, quantity, name, price_original, price_discount, flash_sale, size, variant in rows:
        unit_price = Decimal(str(effective_price(price_original, price_discount, flash_sale)))
        lines.append(PricedLine(
            product_id=product_id,
            product_name=name,
            quantity=quantity,
            unit_price=unit_price,
            subtotal=(unit_price * quantity).quantize(MONEY),
            size=size,
            variant=variant
        ))
    return lines


def _decrement_stock(session: Session, line: PricedLine) -> None:
    """Take stock only while enough remains; losing a concurrent race matches no row."""
    result = session.execute(
        update(Product)
        .where(Product.id == line.product_id, Product.stock >= line.quantity)
        .values(stock=Product.stock - line.quantity)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise StockExhaustedError(line.product_id, line.product_name)


def _apply_statement_timeout(session: Session, timeout: float) -> None:
    """Bound every statement of this transaction on PostgreSQL."""
    if session.get_bind().dialect.name != 'postgresql':
        return
    millis = max(int(timeout * 1000), 1)
    session.execute(text(f"SET LOCAL statement_timeout = {millis}"))


def _is_statement_timeout(error: OperationalError) -> bool:
    return getattr(error.orig, 'pgcode', None) == PG_QUERY_CANCELED


def _invalidate_product_cache(product_ids: Iterable[int]) -> None:
    """Drop cached product details whose stock just changed."""
    try:
        invalidate_products(product_ids)
    except RuntimeError:
        logger.debug("[CHECKOUT] Cache not initialized, nothing to invalidate")
