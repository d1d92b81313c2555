from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from llm_jp_knowledge import db

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# The database path comes from LLM_JP_KG_DB, same as the plugin
config.set_main_option("sqlalchemy.url", f"sqlite:///{db.DB_PATH}")
target_metadata = db.Base.metadata


def run_migrations_offline() -> None:
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        render_as_batch=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata, render_as_batch=True)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
