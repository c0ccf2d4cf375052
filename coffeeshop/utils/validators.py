"""
Request payload parsing.

Each parser collects every field problem and raises one BusinessLogicError
whose message joins them, e.g. "id_delivery is required, phone is invalid".
"""
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from coffeeshop.exceptions import BusinessLogicError
from coffeeshop.services.checkout_service import CheckoutInput
from coffeeshop.services.contact_service import ContactData

EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')
PHONE_PATTERN = re.compile(r'^\d{12}$')

FULLNAME_MAX = 30
ADDRESS_MAX = 50


class _Errors:
    def __init__(self):
        self.messages: List[str] = []

    def add(self, message: str) -> None:
        self.messages.append(message)

    def raise_if_any(self) -> None:
        if self.messages:
            raise BusinessLogicError(', '.join(self.messages))


def _positive_int(payload: Dict[str, Any], key: str, errors: _Errors, required: bool = True) -> Optional[int]:
    raw = payload.get(key)
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        if required:
            errors.add(f'{key} is required')
        return None
    if isinstance(raw, bool):
        errors.add(f'{key} is invalid')
        return None
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        errors.add(f'{key} is invalid')
        return None
    if value <= 0:
        errors.add(f'{key} must be greater than 0')
        return None
    return value


def _optional_text(payload: Dict[str, Any], key: str) -> Optional[str]:
    raw = payload.get(key)
    if raw is None:
        return None
    value = str(raw).strip()
    return value or None


def parse_checkout_input(payload: Dict[str, Any]) -> CheckoutInput:
    """Validate the checkout body; contact fields are optional."""
    errors = _Errors()

    payment_method_id = _positive_int(payload, 'id_paymentMethod', errors)
    delivery_id = _positive_int(payload, 'id_delivery', errors)

    fullname = _optional_text(payload, 'fullname')
    address = _optional_text(payload, 'address')
    phone = _optional_text(payload, 'phone')
    email = _optional_text(payload, 'email')

    if fullname and len(fullname) > FULLNAME_MAX:
        errors.add(f'fullname can have at most {FULLNAME_MAX} characters')
    if address and len(address) > ADDRESS_MAX:
        errors.add(f'address can have at most {ADDRESS_MAX} characters')
    if phone and not PHONE_PATTERN.match(phone):
        errors.add('phone must be 12 digits')
    if email and not EMAIL_PATTERN.match(email):
        errors.add('email is invalid')

    errors.raise_if_any()

    return CheckoutInput(
        payment_method_id=payment_method_id,
        delivery_id=delivery_id,
        contact=ContactData(email=email, fullname=fullname, address=address, phone=phone)
    )


def parse_cart_item(payload: Dict[str, Any]) -> Dict[str, Optional[int]]:
    """Validate an add-to-cart body."""
    errors = _Errors()

    product_id = _positive_int(payload, 'product_id', errors)
    quantity = _positive_int(payload, 'quantity', errors)
    size_id = _positive_int(payload, 'size', errors, required=False)
    variant_id = _positive_int(payload, 'variant', errors, required=False)

    errors.raise_if_any()

    return {
        'product_id': product_id,
        'quantity': quantity,
        'size_id': size_id,
        'variant_id': variant_id,
    }


REGISTER_FULLNAME_MAX = 20
PASSWORD_MIN = 6
PRODUCT_NAME_MAX = 100
PRICE_MIN = Decimal('5000')
TRUE_VALUES = ('true', '1', 'yes', 'on')
FALSE_VALUES = ('false', '0', 'no', 'off')


def _required_text(payload: Dict[str, Any], key: str, errors: _Errors) -> Optional[str]:
    value = _optional_text(payload, key)
    if value is None:
        errors.add(f'{key} is required')
    return value


def _decimal(payload: Dict[str, Any], key: str, errors: _Errors, minimum: Decimal,
             required: bool = False) -> Optional[Decimal]:
    raw = payload.get(key)
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        if required:
            errors.add(f'{key} is required')
        return None
    if isinstance(raw, bool):
        errors.add(f'{key} is invalid')
        return None
    try:
        value = Decimal(str(raw).strip())
    except InvalidOperation:
        errors.add(f'{key} is invalid')
        return None
    if not value.is_finite():
        errors.add(f'{key} is invalid')
        return None
    if value < minimum:
        errors.add(f'{key} must be greater than or equal to {minimum}')
        return None
    return value


def _non_negative_int(payload: Dict[str, Any], key: str, errors: _Errors) -> Optional[int]:
    raw = payload.get(key)
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    if isinstance(raw, bool):
        errors.add(f'{key} is invalid')
        return None
    try:
        value = int(str(raw).strip())
    except ValueError:
        errors.add(f'{key} is invalid')
        return None
    if value < 0:
        errors.add(f'{key} must be greater than or equal to 0')
        return None
    return value


def _flag(payload: Dict[str, Any], key: str, errors: _Errors) -> Optional[bool]:
    raw = payload.get(key)
    if raw is None or isinstance(raw, bool):
        return raw
    value = str(raw).strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    errors.add(f'{key} is invalid')
    return None


def parse_registration(payload: Dict[str, Any]) -> Dict[str, str]:
    errors = _Errors()

    fullname = _required_text(payload, 'fullname', errors)
    email = _required_text(payload, 'email', errors)
    password = payload.get('password')
    password = password if isinstance(password, str) else None

    if fullname and len(fullname) > REGISTER_FULLNAME_MAX:
        errors.add(f'fullname must be at most {REGISTER_FULLNAME_MAX} characters')
    if email and not EMAIL_PATTERN.match(email):
        errors.add('invalid email format')
    if not password:
        errors.add('password is required')
    elif len(password) < PASSWORD_MIN:
        errors.add(f'password must be at least {PASSWORD_MIN} characters')

    errors.raise_if_any()
    return {'fullname': fullname, 'email': email, 'password': password}


def parse_login(payload: Dict[str, Any]) -> Dict[str, str]:
    errors = _Errors()

    email = _required_text(payload, 'email', errors)
    password = payload.get('password')
    if not isinstance(password, str) or not password:
        errors.add('password is required')

    errors.raise_if_any()
    return {'email': email, 'password': password}


def parse_profile_update(payload: Dict[str, Any]) -> ContactData:
    """Every field is optional; the same limits as checkout contact data apply."""
    errors = _Errors()

    fullname = _optional_text(payload, 'fullname')
    address = _optional_text(payload, 'address')
    phone = _optional_text(payload, 'phone')
    email = _optional_text(payload, 'email')

    if fullname and len(fullname) > FULLNAME_MAX:
        errors.add(f'fullname can have at most {FULLNAME_MAX} characters')
    if address and len(address) > ADDRESS_MAX:
        errors.add(f'address can have at most {ADDRESS_MAX} characters')
    if phone and not PHONE_PATTERN.match(phone):
        errors.add('phone must be 12 digits')
    if email and not EMAIL_PATTERN.match(email):
        errors.add('email is invalid')

    errors.raise_if_any()
    return ContactData(email=email, fullname=fullname, address=address, phone=phone)


def parse_product(payload: Dict[str, Any], partial: bool = False) -> Dict[str, Any]:
    """
    Validate an admin product body.

    Creating requires name and price; editing (partial) takes any subset.
    Keys of the result are Product column names.
    """
    errors = _Errors()

    if partial:
        name = _optional_text(payload, 'name')
    else:
        name = _required_text(payload, 'name', errors)
    if name and len(name) > PRODUCT_NAME_MAX:
        errors.add(f'name can have at most {PRODUCT_NAME_MAX} characters')

    data = {
        'name': name,
        'description': _optional_text(payload, 'description'),
        'category_id': _positive_int(payload, 'category', errors, required=False),
        'price_original': _decimal(payload, 'price', errors, PRICE_MIN, required=not partial),
        'price_discount': _decimal(payload, 'price_discount', errors, Decimal('0')),
        'flash_sale': _flag(payload, 'flash_sale', errors),
        'stock': _non_negative_int(payload, 'stock', errors),
    }

    errors.raise_if_any()
    return data
