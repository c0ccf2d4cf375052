"""Cart blueprint - the authenticated account's persistent cart."""
from flask import Blueprint, current_app, g
from coffeeshop.database import get_session
from coffeeshop.middleware import require_auth
from coffeeshop.services import cart_service
from coffeeshop.utils.http import request_payload, success
from coffeeshop.utils.validators import parse_cart_item

cart_bp = Blueprint('cart', __name__, url_prefix='/cart')


@cart_bp.route('', methods=['POST'])
@require_auth
def add_item():
    """Add a product (optionally with size/variant) to the cart."""
    data = parse_cart_item(request_payload())

    item = cart_service.add_to_cart(
        get_session(),
        g.claims.account_id,
        data['product_id'],
        data['quantity'],
        size_id=data['size_id'],
        variant_id=data['variant_id']
    )
    return success('Product added to cart successfully', cart_service.cart_item_to_dict(item))


@cart_bp.route('', methods=['GET'])
@require_auth
def list_items():
    items = cart_service.get_cart(get_session(), g.claims.account_id)
    return success('Cart data retrieved successfully', items)


@cart_bp.route('/<int:cart_id>', methods=['DELETE'])
@require_auth
def remove_item(cart_id: int):
    cart_service.remove_cart_item(get_session(), g.claims.account_id, cart_id)
    current_app.logger.info(f"[cart] account_id={g.claims.account_id} removed line {cart_id}")
    return success(f'cart with id {cart_id} successfully deleted')
