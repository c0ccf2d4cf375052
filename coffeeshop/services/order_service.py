"""Order history reads for the account that placed the order."""
from typing import Dict, Any
from sqlalchemy.orm import Session, joinedload
from coffeeshop.models import Order, OrderLine
from coffeeshop.exceptions import NotFoundError


def get_order_detail(session: Session, account_id: int, order_id: int) -> Dict[str, Any]:
    """
    Order header with its lines.

    Orders of other accounts are reported as not found.
    """
    order = (
        session.query(Order)
        .options(
            joinedload(Order.lines).joinedload(OrderLine.product),
            joinedload(Order.delivery),
            joinedload(Order.payment_method)
        )
        .filter(Order.id == order_id, Order.account_id == account_id)
        .first()
    )
    if not order:
        raise NotFoundError('order not found')

    return {
        'id': order.id,
        'order_number': order.order_number,
        'fullname': order.full_name,
        'phone': order.phone,
        'email': order.email,
        'address': order.address,
        'payment': order.payment_method.name,
        'delivery': order.delivery.name,
        'status': order.status.value,
        'subtotal': float(order.subtotal),
        'tax': float(order.tax),
        'delivery_fee': float(order.delivery_fee),
        'total': float(order.total),
        'created_at': order.created_at.isoformat() if order.created_at else None,
        'items': [
            {
                'id': line.product_id,
                'name': line.product.name,
                'image': line.product.image,
                'flash_sale': line.product.flash_sale,
                'quantity': line.quantity,
                'subtotal': float(line.subtotal),
                'size': line.size,
                'variant': line.variant,
            }
            for line in sorted(order.lines, key=lambda l: l.id)
        ],
    }
