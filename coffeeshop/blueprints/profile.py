"""Profile blueprint - the caller's own contact details."""
from flask import Blueprint, current_app, g
from coffeeshop.database import get_session
from coffeeshop.middleware import require_auth
from coffeeshop.services import profile_service
from coffeeshop.utils.http import request_payload, success
from coffeeshop.utils.validators import parse_profile_update

profile_bp = Blueprint('profile', __name__, url_prefix='/profile')


@profile_bp.route('', methods=['GET'])
@require_auth
def get_profile():
    profile = profile_service.get_profile(get_session(), g.claims.account_id)
    return success('Profile retrieved successfully', profile)


@profile_bp.route('', methods=['PATCH'])
@require_auth
def update_profile():
    """Update any of fullname, email, phone, address."""
    changes = parse_profile_update(request_payload())

    profile = profile_service.update_profile(get_session(), g.claims.account_id, changes)
    current_app.logger.info(f"[profile] account_id={g.claims.account_id} updated")
    return success('Update Profile Succesfully', profile)
