"""CLI commands for managing accounts."""

from __future__ import annotations

import secrets

import pydantic as p
from sqlalchemy.orm import Session

import lectern.lib.cli as click
from lectern.core import di
from lectern.core.config import IdentitySettings
from lectern.model import UserRole
from lectern.storage import user as user_storage
from lectern.workflow.identity import check_email, check_password


@click.group("user")
def user():
    """Manage accounts of any role."""
    ...


@user.command("create")
@click.argument("email")
@click.argument("first_name")
@click.argument("last_name")
@click.option("--role", "-r", type=click.EnumType(UserRole), default=UserRole.Student, help="Account role")
@click.option("--password", "-p", help="Password (if not provided, a random one is generated)")
@click.option("--major", help="Student's major")
@click.option("--graduation-year", type=int, help="Student's expected graduation year")
@di.inject
def user_create(
    email: str,
    first_name: str,
    last_name: str,
    role: UserRole,
    password: str | None,
    major: str | None,
    graduation_year: int | None,
    session: Session = di.Provide["storage.persistent.session"],
    settings: IdentitySettings = di.Provide["config.identity", di.as_(IdentitySettings)],
) -> None:
    """Create an account; this is how the first admin is made.

    EMAIL is the user's email address (used for login).
    """
    generated_password = None
    if not password:
        generated_password = secrets.token_urlsafe(12)
        password = generated_password

    email = check_email(email, settings)
    check_password(p.Secret(password), settings)

    with session.begin():
        if user_storage.get(email=email, session=session):
            click.echo(f"Error: User with email '{email}' already exists.", err=True)
            raise SystemExit(1)

        new_user = user_storage.create(
            email=email,
            password=p.Secret(password),
            first_name=first_name,
            last_name=last_name,
            role=role,
            major=major,
            graduation_year=graduation_year,
            session=session,
        )

    click.echo(f"Created user: {new_user.profile.first_name} {new_user.profile.last_name}")
    click.echo(f"  ID: {new_user.user_id}")
    click.echo(f"  Email: {new_user.email}")
    click.echo(f"  Role: {new_user.role.value}")
    if generated_password:
        click.echo(f"  Generated password: {generated_password}")


@user.command("show")
@click.argument("email")
@di.inject
def user_show(
    email: str,
    session: Session = di.Provide["storage.persistent.session"],
) -> None:
    """Show an account and its profile."""
    with session.begin():
        found = user_storage.get(email=email, with_profile=True, session=session)
    if not found:
        click.echo(f"Error: User '{email}' not found.", err=True)
        raise SystemExit(1)

    click.echo(f"User: {found.profile.first_name} {found.profile.last_name}")
    click.echo(f"  ID: {found.user_id}")
    click.echo(f"  Email: {found.email}")
    click.echo(f"  Role: {found.role.value}")
    if found.profile.major:
        click.echo(f"  Major: {found.profile.major}")
    if found.profile.graduation_year:
        click.echo(f"  Graduation year: {found.profile.graduation_year}")
    click.echo(f"  Created: {found.create_time}")


@user.command("list")
@click.option("--role", "-r", type=click.EnumType(UserRole), help="Filter by role")
@di.inject
def user_list(
    role: UserRole | None,
    session: Session = di.Provide["storage.persistent.session"],
) -> None:
    """List accounts, optionally filtered by role."""
    with session.begin():
        users = user_storage.find(role=role, session=session)

    if not users:
        click.echo("No users found.")
        return

    click.echo(f"{'ID':<30} {'Role':<12} {'Email':<40}")
    click.echo("-" * 82)
    for u in users:
        click.echo(f"{str(u.user_id):<30} {u.role.value:<12} {u.email:<40}")


@user.command("reset-password")
@click.argument("email")
@click.option("--password", "-p", help="New password (if not provided, a random one is generated)")
@di.inject
def user_reset_password(
    email: str,
    password: str | None,
    session: Session = di.Provide["storage.persistent.session"],
    settings: IdentitySettings = di.Provide["config.identity", di.as_(IdentitySettings)],
) -> None:
    """Reset a user's password."""
    generated_password = None
    if not password:
        generated_password = secrets.token_urlsafe(12)
        password = generated_password
    check_password(p.Secret(password), settings)

    with session.begin():
        found = user_storage.get(email=email, session=session)
        if not found:
            click.echo(f"Error: User '{email}' not found.", err=True)
            raise SystemExit(1)
        updated = user_storage.update(found.user_id, password=p.Secret(password), session=session)

    click.echo(f"Password reset for {updated.email}")
    if generated_password:
        click.echo(f"  New password: {generated_password}")
