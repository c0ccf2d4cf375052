"""Cart Service - persistent per-account cart operations."""

import logging
from decimal import Decimal
from datetime import datetime
from typing import Optional, Dict, Any, List
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from coffeeshop.models import CartItem, Product, Size, Variant
from coffeeshop.exceptions import BusinessLogicError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

# One retry covers losing the insert race for a new line
MERGE_ATTEMPTS = 2


def add_to_cart(
    session: Session,
    account_id: int,
    product_id: int,
    quantity: int,
    size_id: Optional[int] = None,
    variant_id: Optional[int] = None
) -> CartItem:
    """
    Add product to the cart or merge into the matching line.

    A line is identified by (product, size, variant); adding the same
    combination again increases its quantity. When a concurrent request
    inserts the same line first, the unique constraint rejects our insert
    and the add is merged into that line instead.
    """
    if quantity <= 0:
        raise ValidationError('quantity', 'must be greater than 0')

    for attempt in range(1, MERGE_ATTEMPTS + 1):
        line = _merge_line(session, account_id, product_id, quantity, size_id, variant_id)
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            if attempt == MERGE_ATTEMPTS:
                raise
            logger.info(
                f"[CART] account_id={account_id} product_id={product_id} line created concurrently, merging"
            )
            continue

        logger.info(f"[CART] account_id={account_id} product_id={product_id} qty={line.quantity}")
        return line


def _find_line(
    session: Session,
    account_id: int,
    product_id: int,
    size_id: Optional[int],
    variant_id: Optional[int]
) -> Optional[CartItem]:
    return session.query(CartItem).filter(
        CartItem.account_id == account_id,
        CartItem.product_id == product_id,
        CartItem.size_id.is_(None) if size_id is None else CartItem.size_id == size_id,
        CartItem.variant_id.is_(None) if variant_id is None else CartItem.variant_id == variant_id
    ).first()


def _merge_line(
    session: Session,
    account_id: int,
    product_id: int,
    quantity: int,
    size_id: Optional[int],
    variant_id: Optional[int]
) -> CartItem:
    """Stage the new or increased cart line; the caller commits."""
    product = session.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise NotFoundError('product not found')

    if product.stock <= 0:
        raise BusinessLogicError('product is out of stock')

    if size_id is not None and not session.query(Size).filter(Size.id == size_id).first():
        raise ValidationError('size', 'not found')
    if variant_id is not None and not session.query(Variant).filter(Variant.id == variant_id).first():
        raise ValidationError('variant', 'not found')

    line = _find_line(session, account_id, product_id, size_id, variant_id)

    new_qty = (line.quantity if line else 0) + quantity
    if new_qty > product.stock:
        raise BusinessLogicError(f'insufficient stock {product.stock}')

    if line:
        line.quantity = new_qty
        line.updated_at = datetime.now()
    else:
        line = CartItem(
            account_id=account_id,
            product_id=product_id,
            size_id=size_id,
            variant_id=variant_id,
            quantity=quantity
        )
        session.add(line)
    return line


def get_cart(session: Session, account_id: int) -> List[Dict[str, Any]]:
    """Cart lines priced the way checkout will price them."""
    rows = (
        session.query(CartItem, Product, Size.name, Variant.name)
        .join(Product, Product.id == CartItem.product_id)
        .outerjoin(Size, Size.id == CartItem.size_id)
        .outerjoin(Variant, Variant.id == CartItem.variant_id)
        .filter(CartItem.account_id == account_id)
        .order_by(CartItem.id)
        .all()
    )

    items = []
    for item, product, size, variant in rows:
        price = Decimal(str(product.effective_price))
        items.append({
            'id': item.id,
            'id_product': product.id,
            'name': product.name,
            'images': product.image,
            'qty': item.quantity,
            'size': size,
            'variant': variant,
            'price': float(product.price_original),
            'discount': float(product.price_discount),
            'flash_sale': product.flash_sale,
            'subtotal': float(price * item.quantity),
        })
    return items


def remove_cart_item(session: Session, account_id: int, cart_id: int) -> None:
    """Delete one of the account's cart lines."""
    deleted = session.query(CartItem).filter(
        CartItem.id == cart_id,
        CartItem.account_id == account_id
    ).delete(synchronize_session=False)

    if deleted == 0:
        session.rollback()
        raise NotFoundError(f'cart with id {cart_id} not found')

    session.commit()
    logger.info(f"[CART] account_id={account_id} removed cart line {cart_id}")


def cart_item_to_dict(item: CartItem) -> Dict[str, Any]:
    return {
        'id': item.id,
        'account_id': item.account_id,
        'product_id': item.product_id,
        'size_id': item.size_id,
        'variant_id': item.variant_id,
        'quantity': item.quantity,
    }
