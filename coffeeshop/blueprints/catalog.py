"""Catalog blueprint - product detail and checkout reference data."""
from flask import Blueprint
from coffeeshop.database import get_session
from coffeeshop.services import catalog_service
from coffeeshop.utils.http import success

catalog_bp = Blueprint('catalog', __name__)


@catalog_bp.route('/products/<int:product_id>')
def product_detail(product_id: int):
    product = catalog_service.get_product_detail(get_session(), product_id)
    return success('Success get detail product', product)


@catalog_bp.route('/deliveries')
def deliveries():
    return success('Success get deliveries', catalog_service.list_deliveries(get_session()))


@catalog_bp.route('/payment-methods')
def payment_methods():
    return success('Success get payment methods', catalog_service.list_payment_methods(get_session()))
