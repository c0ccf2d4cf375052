"""Auth blueprint - registration and login that hands out bearer tokens."""
from flask import Blueprint, current_app
from coffeeshop.database import get_session
from coffeeshop.services import auth_service
from coffeeshop.utils.http import request_payload, success
from coffeeshop.utils.validators import parse_login, parse_registration

auth_bp = Blueprint('auth', __name__, url_prefix='/auth')


@auth_bp.route('/register', methods=['POST'])
def register():
    data = parse_registration(request_payload())

    account = auth_service.register_account(get_session(), data['fullname'], data['email'], data['password'])
    current_app.logger.info(f"[auth] registered account_id={account.id}")
    return success('Register Succesfully', {'id': account.id, 'fullname': account.full_name, 'email': account.email})


@auth_bp.route('/login', methods=['POST'])
def login():
    """Exchange email and password for a bearer token."""
    data = parse_login(request_payload())

    token = auth_service.authenticate(get_session(), data['email'], data['password'])
    return success('login successful', {'token': token})
