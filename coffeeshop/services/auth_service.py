"""
Bearer token service.

Issues and verifies the HS256 tokens that identify an account. Verified
tokens are turned into a typed Claims object that the HTTP layer passes on.
Registration and login live here too; passwords are stored as scrypt hashes.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import logging

import jwt
from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from coffeeshop.exceptions import BusinessLogicError, UnauthorizedError
from coffeeshop.models import Account

logger = logging.getLogger(__name__)

ALGORITHM = 'HS256'


@dataclass(frozen=True)
class Claims:
    account_id: int
    role: str = 'user'


def issue_token(account_id: int, role: str = 'user', expires_minutes: int = None) -> str:
    """Sign a token for an account."""
    if expires_minutes is None:
        expires_minutes = current_app.config['JWT_EXPIRES_MINUTES']
    now = datetime.now(timezone.utc)
    payload = {
        'id': account_id,
        'role': role,
        'iss': current_app.config['JWT_ISSUER'],
        'iat': now,
        'exp': now + timedelta(minutes=expires_minutes),
    }
    return jwt.encode(payload, current_app.config['JWT_SECRET'], algorithm=ALGORITHM)


def verify_token(token: str) -> Claims:
    """
    Decode and validate a bearer token.

    Raises:
        UnauthorizedError: expired, wrongly issued, tampered or malformed token
    """
    try:
        payload = jwt.decode(
            token,
            current_app.config['JWT_SECRET'],
            algorithms=[ALGORITHM],
            issuer=current_app.config['JWT_ISSUER'],
            options={'require': ['exp', 'iss', 'id']}
        )
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError('Token expired, please log in again!')
    except jwt.InvalidTokenError as e:
        logger.info(f"[AUTH] Rejected token: {e}")
        raise UnauthorizedError('Please log in again')

    account_id = payload.get('id')
    if isinstance(account_id, bool) or not isinstance(account_id, int) or account_id <= 0:
        raise UnauthorizedError('Please log in again')

    return Claims(account_id=account_id, role=str(payload.get('role') or 'user'))


def register_account(session: Session, fullname: str, email: str, password: str) -> Account:
    """
    Create a customer account with a hashed password.

    Raises:
        BusinessLogicError: email already registered
    """
    if session.query(Account.id).filter(func.lower(Account.email) == email.lower()).first():
        raise BusinessLogicError('email is already registered')

    account = Account(email=email, full_name=fullname, role='user', active=True)
    account.set_password(password)
    session.add(account)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise BusinessLogicError('email is already registered')

    logger.info(f"[AUTH] Registered account_id={account.id}")
    return account


def authenticate(session: Session, email: str, password: str) -> str:
    """
    Check credentials and sign a token for the account.

    Raises:
        UnauthorizedError: unknown email, inactive account or wrong password
    """
    account = session.query(Account).filter(func.lower(Account.email) == email.lower()).first()
    if not account or not account.active or not account.check_password(password):
        raise UnauthorizedError('invalid email or password')
    return issue_token(account.id, account.role)
