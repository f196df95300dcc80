"""CLI tools for Family SNS administration."""

import click

from family_sns.core.exceptions import DomainError
from family_sns.db.session import SessionLocal, engine
from family_sns.services import auth_service, user_service


@click.group()
def cli():
    """Family SNS CLI tools."""
    pass


@cli.command()
@click.option("--name", required=True, help="Family name")
@click.option("--admin-email", required=True, help="Admin email address")
@click.option("--admin-name", required=True, help="Admin display name")
@click.option("--password", required=True, prompt=True, hide_input=True, help="Admin password")
def create_family(name: str, admin_email: str, admin_name: str, password: str):
    """
    Create a family and its admin account.

    Prints the invite code other members use to join.

    Example:
        family-sns create-family --name "Tanaka" --admin-email "mom@example.com" --admin-name "Mom"
    """
    db = SessionLocal()
    try:
        result = auth_service.register_family_admin(
            db,
            email=admin_email,
            password=password,
            name=admin_name,
            family_name=name,
        )
    except DomainError as e:
        raise click.ClickException(e.message)
    finally:
        db.close()

    click.echo(f"✓ Created family: {name}")
    click.echo(f"  Admin: {result.user.email} ({result.user.id})")
    click.echo(f"→ Invite code: {result.user.family_id}")


@cli.command()
@click.option("--family-id", required=True, help="Family ID (invite code)")
def list_members(family_id: str):
    """List the active members of a family."""
    db = SessionLocal()
    try:
        members = user_service.list_family_members(db, family_id)
    finally:
        db.close()

    if not members:
        click.echo(f"No members found for family {family_id}")
        return

    for member in members:
        click.echo(f"{member.id}  {member.role.value:<6}  {member.name} <{member.email}>")


@cli.command()
def migrate():
    """Upgrade the database schema to the latest revision."""
    from family_sns.core.migrations import ensure_migrations

    status = ensure_migrations(engine, auto_migrate=True)
    click.echo(f"✓ Database at {', '.join(status.current_heads)}")


if __name__ == "__main__":
    cli()
