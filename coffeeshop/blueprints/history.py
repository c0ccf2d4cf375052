"""History blueprint - the authenticated account's placed orders."""
from flask import Blueprint, g
from coffeeshop.database import get_session
from coffeeshop.middleware import require_auth
from coffeeshop.services.order_service import get_order_detail
from coffeeshop.utils.http import success

history_bp = Blueprint('history', __name__, url_prefix='/history')


@history_bp.route('/<int:order_id>')
@require_auth
def detail(order_id: int):
    order = get_order_detail(get_session(), g.claims.account_id, order_id)
    return success('Success get detail history', order)
