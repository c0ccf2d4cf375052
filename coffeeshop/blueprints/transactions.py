"""Transactions blueprint - checkout of the authenticated account's cart."""
from flask import Blueprint, current_app, g
from coffeeshop.database import get_session
from coffeeshop.exceptions import ShopError
from coffeeshop.middleware import require_auth
from coffeeshop.services.checkout_service import checkout
from coffeeshop.blueprints.metrics import checkout_total
from coffeeshop.utils.http import request_payload, success
from coffeeshop.utils.validators import parse_checkout_input

transactions_bp = Blueprint('transactions', __name__, url_prefix='/transactions')


@transactions_bp.route('', methods=['POST'])
@require_auth
def create_transaction():
    """
    Place an order from the cart.

    Body (JSON or form): id_paymentMethod, id_delivery and optionally
    fullname, address, phone, email. Missing contact fields fall back to
    the account's stored details.
    """
    checkout_input = parse_checkout_input(request_payload())

    try:
        result = checkout(
            get_session(),
            g.claims.account_id,
            checkout_input,
            tax=current_app.config['CHECKOUT_TAX'],
            timeout=current_app.config['CHECKOUT_TIMEOUT_SECONDS']
        )
    except ShopError as e:
        checkout_total.labels(outcome=type(e).__name__).inc()
        raise
    except Exception:
        checkout_total.labels(outcome='error').inc()
        raise

    checkout_total.labels(outcome='placed').inc()
    current_app.logger.info(
        f"[transactions] account_id={g.claims.account_id} order={result.order_number} total={result.total}"
    )
    return success('Transaction completed successfully', result.to_dict())
