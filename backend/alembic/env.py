"""Alembic environment for the EventSync schema (users, events, invitations).

The URL comes from ``eventsync.config.settings``; ``alembic.ini`` puts the
backend directory on ``sys.path`` so the package imports without installing.
"""
from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from eventsync.config import settings
from eventsync.database import Base
from eventsync.models import event, invitation, user  # noqa: F401

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=Base.metadata,
        render_as_batch=settings.DATABASE_URL.startswith("sqlite"),
        **kwargs,
    )


if context.is_offline_mode():
    _configure(url=settings.DATABASE_URL, literal_binds=True)
    with context.begin_transaction():
        context.run_migrations()
else:
    connectable = create_engine(settings.DATABASE_URL, poolclass=pool.NullPool)
    with connectable.connect() as connection:
        _configure(connection=connection)
        with context.begin_transaction():
            context.run_migrations()
