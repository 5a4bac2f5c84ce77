from __future__ import annotations

import alembic.command
import alembic.config

import examiner.lib.cli as click
from examiner.core import di

AlembicConfig = di.Provide["storage.persistent.alembic_config"]


@click.group("schema")
def schema(): ...


@schema.command()
@click.option("--verbose", "-v", is_flag=True, default=False)
@di.inject
def current(verbose: bool, conf: alembic.config.Config = AlembicConfig):
    """Show the revision the database is at"""
    alembic.command.current(conf, verbose=verbose)


@schema.command()
@click.option("--verbose", "-v", is_flag=True, default=False)
@di.inject
def history(verbose: bool, conf: alembic.config.Config = AlembicConfig):
    """List revisions, marking the current one"""
    alembic.command.history(conf, verbose=verbose, indicate_current=True)


@schema.command()
@click.argument("revision", default="head")
@click.option("--sql", is_flag=True, default=False, help="print the DDL instead of running it")
@di.inject
def up(revision: str, sql: bool, conf: alembic.config.Config = AlembicConfig):
    """Create or migrate the exam tables"""
    alembic.command.upgrade(conf, revision, sql=sql)


@schema.command()
@click.argument("revision")
@di.inject
def down(revision: str, conf: alembic.config.Config = AlembicConfig):
    alembic.command.downgrade(conf, revision)


@schema.command()
@click.argument("message")
@di.inject
def generate(message: str, conf: alembic.config.Config = AlembicConfig):
    """Autogenerate a revision from the difference between table.py and the database"""
    alembic.command.revision(conf, message, autogenerate=True)
