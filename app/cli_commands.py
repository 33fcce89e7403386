"""
Flask CLI commands.

Commands:
- flask init-db: Create the schema (development databases)
- flask create-admin: Create a platform admin user
- flask auto-tag: Re-run the auto-tag rules for one client
- flask suggestions: Print the ranked suggestions of a tenant (or the admin card)
"""

import click
import re
from app.database import db_session, create_all
from app.exceptions import ValidationError
from app.models import AdminUser, Client


def init_cli_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('init-db')
    def init_db_command():
        """Create all tables."""
        create_all()
        click.echo(click.style('Database schema created.', fg='green'))

    @app.cli.command('create-admin')
    @click.option('--email', prompt=True, help='Admin email address')
    @click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Admin password')
    def create_admin(email, password):
        """Create a new platform admin user."""
        email_pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
        if not re.match(email_pattern, email):
            raise click.BadParameter('Invalid email. Use user@example.com', param_hint='--email')

        if len(password) < 8:
            raise click.BadParameter('Password must be at least 8 characters.', param_hint='--password')

        if db_session.query(AdminUser).filter_by(email=email).first():
            raise click.ClickException(f'An admin with email {email} already exists')

        try:
            admin = AdminUser(email=email)
            admin.set_password(password)
            db_session.add(admin)
            db_session.commit()
        except Exception:
            db_session.rollback()
            raise

        click.echo(click.style(f'Admin created: {email} (id={admin.id})', fg='green', bold=True))

    @app.cli.command('auto-tag')
    @click.argument('client_id', type=int)
    @click.option('--type', 'context_type', type=click.Choice(['sale', 'waiver']), default='sale',
                  show_default=True, help='Event that triggered the evaluation')
    @click.option('--event-name', default=None, help='Event name to tag the client with')
    def auto_tag_command(client_id, context_type, event_name):
        """Re-run the auto-tag rules for CLIENT_ID."""
        from app.repositories.sqlalchemy_store import get_store
        from app.services.auto_tag_service import AutoTagContext, auto_tag_client

        client = db_session.get(Client, client_id)
        if client is None:
            raise click.ClickException(f'Client {client_id} not found')

        try:
            context = AutoTagContext(context_type, event_name=event_name)
        except ValidationError as e:
            raise click.BadParameter(e.message, param_hint='--event-name')

        try:
            result = auto_tag_client(
                get_store(db_session),
                client.tenant_id,
                client.id,
                context
            )
            db_session.commit()
        except Exception:
            db_session.rollback()
            raise

        click.echo(f"sales={result.sales_count} applied={result.applied_tag_ids} removed={result.removed_tag_ids}")

    @app.cli.command('suggestions')
    @click.option('--tenant-id', type=int, default=None, help='Tenant to rank; omit for the admin card')
    def suggestions_command(tenant_id):
        """Print ranked suggestions."""
        from app.repositories.sqlalchemy_store import get_store
        from app.services.admin_suggestion_service import load_admin_suggestions
        from app.services.client_suggestion_service import get_client_suggestions

        store = get_store(db_session)
        if tenant_id is None:
            for suggestion in load_admin_suggestions(store):
                click.echo(f"[{suggestion.urgency}] {suggestion.type:<15} {suggestion.message}")
        else:
            for suggestion in get_client_suggestions(store, tenant_id):
                click.echo(f"{suggestion.type:<15} {suggestion.client_name} - {suggestion.suggestion}")
