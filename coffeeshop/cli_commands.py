"""
Flask CLI commands.

Commands:
- flask init-db: Create tables and seed checkout reference data
- flask issue-token: Print a bearer token for an account
- flask create-admin: Create an account with the admin role
"""

import click
from decimal import Decimal
from coffeeshop.database import get_session, create_all
from coffeeshop.models import Account, Size, Variant, Delivery, PaymentMethod
from coffeeshop.services.auth_service import issue_token
from coffeeshop.services.catalog_service import invalidate_reference_cache
from coffeeshop.utils.validators import EMAIL_PATTERN, PASSWORD_MIN

SIZES = ('Regular', 'Medium', 'Large')
VARIANTS = ('Hot', 'Ice')
DELIVERIES = (
    ('Dine In', Decimal('0')),
    ('Door Delivery', Decimal('10000')),
    ('Pick Up', Decimal('0')),
)
PAYMENT_METHODS = ('Cash', 'Bank Transfer', 'E-Wallet')


def seed_reference_data(session):
    """Insert any missing sizes, variants, deliveries and payment methods."""
    created = 0
    for name in SIZES:
        if not session.query(Size).filter_by(name=name).first():
            session.add(Size(name=name))
            created += 1
    for name in VARIANTS:
        if not session.query(Variant).filter_by(name=name).first():
            session.add(Variant(name=name))
            created += 1
    for name, fee in DELIVERIES:
        if not session.query(Delivery).filter_by(name=name).first():
            session.add(Delivery(name=name, fee=fee))
            created += 1
    for name in PAYMENT_METHODS:
        if not session.query(PaymentMethod).filter_by(name=name).first():
            session.add(PaymentMethod(name=name))
            created += 1
    session.commit()
    return created


def init_cli_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('init-db')
    def init_db_command():
        """Create tables and seed reference data."""
        create_all()
        session = get_session()
        try:
            created = seed_reference_data(session)
        except Exception as e:
            session.rollback()
            click.echo(click.style(f'Error seeding reference data: {e}', fg='red'))
            raise SystemExit(1)

        invalidate_reference_cache()
        click.echo(click.style(f'Database ready ({created} reference rows created).', fg='green'))

    @app.cli.command('issue-token')
    @click.option('--account-id', type=int, required=True, help='Account to authenticate as')
    @click.option('--expires-minutes', type=int, default=None, help='Override JWT_EXPIRES_MINUTES')
    def issue_token_command(account_id, expires_minutes):
        """Print a bearer token for an existing account."""
        account = get_session().query(Account).filter_by(id=account_id, active=True).first()
        if not account:
            click.echo(click.style(f'No active account with id {account_id}', fg='red'))
            raise SystemExit(1)

        click.echo(issue_token(account.id, account.role, expires_minutes))

    @app.cli.command('create-admin')
    @click.option('--email', prompt=True, help='Admin email address')
    @click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Admin password')
    @click.option('--fullname', default='Admin', help='Display name')
    def create_admin(email, password, fullname):
        """Create an account with the admin role."""
        if not EMAIL_PATTERN.match(email):
            click.echo(click.style('Invalid email. Use the format user@example.com', fg='red'))
            raise SystemExit(1)
        if len(password) < PASSWORD_MIN:
            click.echo(click.style(f'Password must be at least {PASSWORD_MIN} characters.', fg='red'))
            raise SystemExit(1)

        session = get_session()
        if session.query(Account).filter_by(email=email).first():
            click.echo(click.style(f'An account with email {email} already exists', fg='red'))
            raise SystemExit(1)

        admin = Account(email=email, full_name=fullname, role='admin', active=True)
        admin.set_password(password)
        session.add(admin)
        session.commit()

        click.echo(click.style(f'Admin created (id {admin.id}).', fg='green'))
