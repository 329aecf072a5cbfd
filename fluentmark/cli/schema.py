from __future__ import annotations

import alembic.command
import alembic.config
import sqlalchemy

import fluentmark.lib.cli as click
from fluentmark.core import di
from fluentmark.storage.table import metadata


@click.group("schema")
def schema(): ...


@schema.command()
@click.option("--verbose", "-v", is_flag=True, default=False)
@di.inject
def current(verbose: bool, alembic_conf: alembic.config.Config = di.Provide["storage.persistent.alembic_config"]):
    alembic.command.current(alembic_conf, verbose=verbose)


@schema.command()
@click.argument("message")
@di.inject
def generate(message: str, alembic_conf: alembic.config.Config = di.Provide["storage.persistent.alembic_config"]):
    alembic.command.revision(alembic_conf, message)


@schema.command()
@click.argument("revision", default="head")
@di.inject
def up(revision: str, alembic_conf: alembic.config.Config = di.Provide["storage.persistent.alembic_config"]):
    alembic.command.upgrade(alembic_conf, revision)


@schema.command()
@click.argument("revision")
@di.inject
def down(revision: str, alembic_conf: alembic.config.Config = di.Provide["storage.persistent.alembic_config"]):
    alembic.command.downgrade(alembic_conf, revision)


@schema.command()
@click.option("--verbose", "-v", is_flag=True, default=False)
@di.inject
def history(verbose: bool, alembic_conf: alembic.config.Config = di.Provide["storage.persistent.alembic_config"]):
    alembic.command.history(alembic_conf, verbose=verbose, indicate_current=True)


@schema.command()
@di.inject
def create(engine: sqlalchemy.Engine = di.Provide["storage.persistent.engine"]):
    """Create all tables directly from the table definitions, bypassing migrations."""
    metadata.create_all(engine)
    click.echo(f"created {len(metadata.tables)} tables")


@schema.command()
@click.confirmation_option(prompt="Drop every fluentmark table?")
@di.inject
def drop(engine: sqlalchemy.Engine = di.Provide["storage.persistent.engine"]):
    metadata.drop_all(engine)
    click.echo(f"dropped {len(metadata.tables)} tables")


command = schema
