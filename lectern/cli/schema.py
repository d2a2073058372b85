"""Database schema migrations, driven by alembic."""

from __future__ import annotations

import alembic.command
import alembic.config

import lectern.lib.cli as click
from lectern.core import di

AlembicConfig = alembic.config.Config


@click.group("schema")
def schema():
    """Inspect and migrate the database schema."""
    ...


@schema.command()
@click.option("--verbose", "-v", is_flag=True, default=False)
@di.inject
def current(verbose: bool, alembic_conf: AlembicConfig = di.Provide["storage.persistent.alembic_config"]):
    """Show the revision the database is at."""
    alembic.command.current(alembic_conf, verbose=verbose)


@schema.command()
@click.option("--verbose", "-v", is_flag=True, default=False)
@di.inject
def history(verbose: bool, alembic_conf: AlembicConfig = di.Provide["storage.persistent.alembic_config"]):
    alembic.command.history(alembic_conf, verbose=verbose, indicate_current=True)


@schema.command()
@click.argument("revision", default="head")
@click.option("--sql", is_flag=True, default=False, help="Print the DDL instead of running it")
@di.inject
def up(revision: str, sql: bool, alembic_conf: AlembicConfig = di.Provide["storage.persistent.alembic_config"]):
    """Upgrade to REVISION, the latest by default."""
    alembic.command.upgrade(alembic_conf, revision, sql=sql)


@schema.command()
@click.argument("revision")
@click.option("--sql", is_flag=True, default=False, help="Print the DDL instead of running it")
@di.inject
def down(revision: str, sql: bool, alembic_conf: AlembicConfig = di.Provide["storage.persistent.alembic_config"]):
    """Downgrade to REVISION; use `base` to drop every table."""
    alembic.command.downgrade(alembic_conf, revision, sql=sql)


@schema.command()
@click.argument("message")
@click.option("--empty", is_flag=True, default=False, help="Skip comparing the tables against the database")
@di.inject
def generate(
    message: str, empty: bool, alembic_conf: AlembicConfig = di.Provide["storage.persistent.alembic_config"]
):
    """Write a new revision script named MESSAGE."""
    alembic.command.revision(alembic_conf, message, autogenerate=not empty)


@schema.command()
@click.argument("revision")
@di.inject
def stamp(revision: str, alembic_conf: AlembicConfig = di.Provide["storage.persistent.alembic_config"]):
    """Mark the database as being at REVISION without migrating."""
    alembic.command.stamp(alembic_conf, revision)
