"""Alembic environment; connection settings come from reading_quest.config."""
from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine
from sqlalchemy.engine import URL

from reading_quest.config import get_settings

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

db_config = get_settings().db_config
database_url = URL.create(
    "postgresql+psycopg2",
    username=db_config["user"],
    password=db_config["password"],
    host=db_config["host"],
    port=db_config["port"],
    database=db_config["dbname"],
)

# Migrations are raw SQL, so there is no metadata to autogenerate from
target_metadata = None


def run_migrations_offline():
    context.configure(
        url=database_url.render_as_string(hide_password=False),
        target_metadata=target_metadata,
        literal_binds=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    engine = create_engine(database_url, future=True)
    with engine.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
