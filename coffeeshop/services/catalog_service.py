"""Catalog reads served through the Redis cache."""
from typing import Dict, Any, List
from sqlalchemy.orm import Session
from coffeeshop.models import Product, Category, Delivery, PaymentMethod
from coffeeshop.exceptions import NotFoundError
from coffeeshop.services.cache_service import get_cache, PRODUCTS, REFERENCE


def product_cache_key(product_id: int) -> str:
    return f'detail:{product_id}'


def get_product_detail(session: Session, product_id: int) -> Dict[str, Any]:
    """Product detail, cached per product until checkout changes its stock."""
    def load() -> Dict[str, Any]:
        row = (
            session.query(Product, Category.name)
            .outerjoin(Category, Category.id == Product.category_id)
            .filter(Product.id == product_id)
            .first()
        )
        if not row:
            raise NotFoundError('product not found')
        product, category = row
        return {
            'id': product.id,
            'name': product.name,
            'desc': product.description,
            'category': category,
            'image': product.image,
            'price': float(product.price_original),
            'priceDiscount': float(product.price_discount),
            'flash_sale': product.flash_sale,
            'stock': product.stock,
        }

    return get_cache().remember(PRODUCTS, product_cache_key(product_id), load)


def list_deliveries(session: Session) -> List[Dict[str, Any]]:
    """Delivery options with their flat fees."""
    return get_cache().remember(
        REFERENCE, 'deliveries',
        lambda: [d.to_dict() for d in session.query(Delivery).order_by(Delivery.id).all()]
    )


def list_payment_methods(session: Session) -> List[Dict[str, Any]]:
    return get_cache().remember(
        REFERENCE, 'payment_methods',
        lambda: [p.to_dict() for p in session.query(PaymentMethod).order_by(PaymentMethod.id).all()]
    )


def invalidate_products(product_ids) -> int:
    """Drop cached details of products whose stock changed."""
    return get_cache().delete(PRODUCTS, *(product_cache_key(pid) for pid in set(product_ids)))


def invalidate_reference_cache() -> int:
    """Drop cached deliveries and payment methods after seeding."""
    return get_cache().clear(REFERENCE)
