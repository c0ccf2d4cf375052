"""Account profile: the contact details checkout falls back on."""
import logging
from typing import Any, Dict
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from coffeeshop.models import Account
from coffeeshop.exceptions import BusinessLogicError, NotFoundError
from coffeeshop.services.contact_service import CONTACT_FIELDS, ContactData

logger = logging.getLogger(__name__)


def _get_account(session: Session, account_id: int) -> Account:
    account = session.query(Account).filter(
        Account.id == account_id,
        Account.active == True
    ).first()
    if not account:
        raise NotFoundError('user not found')
    return account


def get_profile(session: Session, account_id: int) -> Dict[str, Any]:
    return _get_account(session, account_id).to_profile_dict()


def update_profile(session: Session, account_id: int, changes: ContactData) -> Dict[str, Any]:
    """
    Overwrite the contact fields that were sent; the rest keep their value.

    Raises:
        BusinessLogicError: nothing to update, or the email belongs to another account
        NotFoundError: account does not exist
    """
    sent = {attr: getattr(changes, field) for field, attr in CONTACT_FIELDS if getattr(changes, field)}
    if not sent:
        raise BusinessLogicError('No data to update')

    account = _get_account(session, account_id)

    if 'email' in sent:
        taken = session.query(Account.id).filter(
            func.lower(Account.email) == sent['email'].lower(),
            Account.id != account_id
        ).first()
        if taken:
            raise BusinessLogicError('email is already registered')

    for attr, value in sent.items():
        setattr(account, attr, value)

    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise BusinessLogicError('email is already registered')

    logger.info(f"[PROFILE] account_id={account_id} updated {', '.join(sorted(sent))}")
    return account.to_profile_dict()
