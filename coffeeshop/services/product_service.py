"""Admin product maintenance: create and edit, including stock."""
import logging
from typing import Any, Dict
from sqlalchemy.orm import Session
from coffeeshop.models import Category, Product
from coffeeshop.exceptions import BusinessLogicError, NotFoundError, ValidationError
from coffeeshop.services.catalog_service import invalidate_products

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    'name', 'description', 'category_id', 'price_original',
    'price_discount', 'flash_sale', 'stock',
)


def product_to_dict(product: Product) -> Dict[str, Any]:
    return {
        'id': product.id,
        'name': product.name,
        'description': product.description,
        'category_id': product.category_id,
        'price': float(product.price_original),
        'priceDiscount': float(product.price_discount),
        'flash_sale': product.flash_sale,
        'stock': product.stock,
    }


def _check_category(session: Session, category_id) -> None:
    if category_id is not None and session.get(Category, category_id) is None:
        raise ValidationError('category', 'does not exist')


def create_product(session: Session, data: Dict[str, Any]) -> Product:
    """Insert a product from validated fields (name and price_original are required)."""
    _check_category(session, data.get('category_id'))

    product = Product(**{field: data[field] for field in EDITABLE_FIELDS if data.get(field) is not None})
    session.add(product)
    session.commit()

    logger.info(f"[PRODUCT] Created product_id={product.id} stock={product.stock}")
    return product


def update_product(session: Session, product_id: int, changes: Dict[str, Any]) -> Product:
    """
    Apply the fields that were sent and drop the cached detail.

    Raises:
        BusinessLogicError: nothing to update
        NotFoundError: product does not exist
    """
    changes = {field: changes[field] for field in EDITABLE_FIELDS if changes.get(field) is not None}
    if not changes:
        raise BusinessLogicError('No data to update')

    product = session.get(Product, product_id)
    if not product:
        raise NotFoundError('Product not found')

    if 'category_id' in changes:
        _check_category(session, changes['category_id'])

    for field, value in changes.items():
        setattr(product, field, value)
    session.commit()

    invalidate_products([product_id])
    logger.info(f"[PRODUCT] Updated product_id={product_id} fields={sorted(changes)}")
    return product
