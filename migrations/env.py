import logging
from logging.config import fileConfig

from alembic import context
from flask import current_app

# `flask db ...` runs this inside the hms application context
config = context.config

fileConfig(config.config_file_name)
logger = logging.getLogger('alembic.env')

# Every model module must be imported for autogenerate to see its tables
from hms import models  # noqa: E402,F401

migrate_ext = current_app.extensions['migrate']
config.set_main_option(
    'sqlalchemy.url',
    migrate_ext.db.engine.url.render_as_string(hide_password=False).replace('%', '%%')
)
target_metadata = migrate_ext.db.metadata


def run_migrations_offline():
    """Emit SQL for the migrations without a database connection."""
    context.configure(
        url=config.get_main_option('sqlalchemy.url'),
        target_metadata=target_metadata,
        literal_binds=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    # Skip empty autogenerated revisions
    def process_revision_directives(context, revision, directives):
        if getattr(config.cmd_opts, 'autogenerate', False):
            script = directives[0]
            if script.upgrade_ops.is_empty():
                directives[:] = []
                logger.info('No changes in schema detected.')

    connectable = migrate_ext.db.engine

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            process_revision_directives=process_revision_directives,
            **migrate_ext.configure_args
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
