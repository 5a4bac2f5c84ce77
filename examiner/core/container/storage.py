from __future__ import annotations

import typing as t
from pathlib import Path

import alembic.config
import sqlalchemy
import sqlalchemy.event
import sqlalchemy.orm
import sqlalchemy.pool
from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Configuration, Container, Factory, Object, Provider, Resource, Singleton
from sqlalchemy.engine.url import URL as DSN

import examiner.lib.json as json

from ..config.secrets import PostgresqlSecrets
from ..config.storage import PersistentSettings
from ..di import NotReady
from ..provider import LoggingProvider


def provide_dsn(config: PersistentSettings, secrets: PostgresqlSecrets, state_path: Path) -> DSN:
    if config.postgresql is not None:
        pg = config.postgresql
        return DSN.create(
            pg.driver,
            database=pg.database,
            username=secrets.username.get_secret_value() if secrets.username else None,
            password=secrets.password.get_secret_value() if secrets.password else None,
            port=pg.port,
            host=str(pg.host) if pg.host else None,
        )

    assert config.sqlite is not None
    if config.sqlite.memory:
        return DSN.create(config.sqlite.driver, database=":memory:")
    return DSN.create(config.sqlite.driver, database=str(config.sqlite.path or state_path / "examiner.db"))


def provide_alembic_conf(migration_path: Path, dsn: DSN, root: Path | NotReady) -> alembic.config.Config:
    if isinstance(root, NotReady):
        raise RuntimeError("root path is unavailable")

    escaped_str = dsn.render_as_string(hide_password=False).replace("%", "%%")

    ac = alembic.config.Config()
    ac.set_main_option("script_location", str(root / migration_path))
    ac.set_section_option("alembic", "sqlalchemy.url", escaped_str)
    ac.set_section_option("alembic", "file_template", "%%(year)d-%%(month).2d-%%(day).2d-%%(slug)s-%%(rev)s")
    return ac


def provide_engine(dsn: DSN, logging: LoggingProvider) -> sqlalchemy.Engine:
    logger = logging.get_logger()

    if dsn.get_backend_name() == "sqlite":
        kwargs: dict[str, t.Any] = {"connect_args": {"check_same_thread": False}}
        if dsn.database == ":memory:":
            # one connection, so every session sees the same in-memory database
            kwargs["poolclass"] = sqlalchemy.pool.StaticPool
        engine = sqlalchemy.create_engine(dsn, json_serializer=json.dumps, json_deserializer=json.loads, **kwargs)
        sqlalchemy.event.listen(engine, "connect", enable_foreign_keys)
    else:
        engine = sqlalchemy.create_engine(dsn, json_serializer=json.dumps, json_deserializer=json.loads)
        sqlalchemy.event.listen(engine, "connect", register_timezone)

    logger.info(
        "initialized SQLAlchemy engine",
        extra={
            "driver": dsn.drivername,
            "database": dsn.database,
            "host": dsn.host,
            "port": dsn.port,
        },
    )
    return engine


def provide_session(engine: sqlalchemy.Engine) -> sqlalchemy.orm.Session:
    """Create a new session. Caller is responsible for closing it (via di.Manage)."""
    maker = sqlalchemy.orm.sessionmaker(engine, expire_on_commit=False, autoflush=False)
    return maker(autobegin=False)


class PersistentContainer(DeclarativeContainer):
    config = Configuration()
    secrets = Configuration()
    logging: Provider[LoggingProvider] = Resource()
    root: Provider[Path | NotReady] = Object()
    state_path: Provider[Path] = Resource()

    settings: Provider[PersistentSettings] = Singleton(
        PersistentSettings, postgresql=config.postgresql, sqlite=config.sqlite
    )
    dsn: Provider[DSN] = Singleton(
        provide_dsn,
        config=settings,
        secrets=secrets.postgresql.as_(PostgresqlSecrets),
        state_path=state_path,
    )
    alembic_config: Provider[alembic.config.Config] = Singleton(
        provide_alembic_conf,
        migration_path=Path("migrations/"),
        dsn=dsn,
        root=root,
    )
    engine: Provider[sqlalchemy.Engine] = Singleton(provide_engine, dsn=dsn, logging=logging)
    session: Provider[sqlalchemy.orm.Session] = Factory(provide_session, engine=engine)


class StorageContainer(DeclarativeContainer):
    config = Configuration(strict=True)
    secrets = Configuration(strict=True)
    logging: Provider[LoggingProvider] = Resource()
    root: Provider[Path | NotReady] = Object()
    state_path: Provider[Path] = Resource()

    persistent: Provider[PersistentContainer] = Container(
        PersistentContainer,
        config=config.persistent,
        secrets=secrets,
        logging=logging,
        root=root,
        state_path=state_path,
    )


def enable_foreign_keys(dbapi_conn: t.Any, _: t.Any) -> None:
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def register_timezone(dbapi_conn: t.Any, _: t.Any) -> None:
    """Set connection timezone to UTC for consistent datetime handling.

    PostgreSQL TIMESTAMP WITH TIME ZONE stores timestamps in UTC but returns
    them converted to the connection's timezone.
    """
    cursor = dbapi_conn.cursor()
    cursor.execute("SET TIMEZONE TO 'UTC'")
    cursor.close()
