"""Contact data resolution for checkout."""
from dataclasses import dataclass, replace
from typing import Optional
from sqlalchemy.orm import Session
from coffeeshop.models import Account
from coffeeshop.exceptions import ValidationError, NotFoundError

# Resolution order; the first field missing everywhere is the one reported
CONTACT_FIELDS = (
    ('email', 'email'),
    ('fullname', 'full_name'),
    ('address', 'address'),
    ('phone', 'phone'),
)


@dataclass
class ContactData:
    email: Optional[str] = None
    fullname: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None

    def to_dict(self):
        return {
            'email': self.email,
            'fullname': self.fullname,
            'address': self.address,
            'phone': self.phone,
        }


def resolve_contact_data(session: Session, account_id: int, contact: ContactData) -> ContactData:
    """
    Fill the contact fields the caller left empty from the stored account.

    Raises:
        NotFoundError: account does not exist
        ValidationError: a field is empty in the request and on the account
    """
    account = session.query(Account).filter(
        Account.id == account_id,
        Account.active == True
    ).first()

    if not account:
        raise NotFoundError('Account not found')

    resolved = {}
    for field, account_attr in CONTACT_FIELDS:
        value = getattr(contact, field)
        if value:
            resolved[field] = value
            continue

        stored = getattr(account, account_attr)
        if stored:
            resolved[field] = stored
            continue

        raise ValidationError(field)

    return replace(contact, **resolved)
