"""Admin product blueprint - create and edit products, stock included."""
from flask import Blueprint, current_app, g
from coffeeshop.database import get_session
from coffeeshop.middleware import require_role
from coffeeshop.services import product_service
from coffeeshop.utils.http import request_payload, success
from coffeeshop.utils.validators import parse_product

admin_products_bp = Blueprint('admin_products', __name__, url_prefix='/admin/product')


@admin_products_bp.route('', methods=['POST'])
@require_role('admin')
def create_product():
    data = parse_product(request_payload())

    product = product_service.create_product(get_session(), data)
    current_app.logger.info(f"[admin] account_id={g.claims.account_id} created product {product.id}")
    return success('Created Product Succesfully', product_service.product_to_dict(product))


@admin_products_bp.route('/<int:product_id>', methods=['PATCH'])
@require_role('admin')
def update_product(product_id: int):
    """Edit any subset of the product fields."""
    changes = parse_product(request_payload(), partial=True)

    product = product_service.update_product(get_session(), product_id, changes)
    current_app.logger.info(f"[admin] account_id={g.claims.account_id} updated product {product_id}")
    return success('Updated Product Succesfully', product_service.product_to_dict(product))
