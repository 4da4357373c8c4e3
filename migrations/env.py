import logging
import os
from logging.config import fileConfig
from pathlib import Path

from flask import current_app
from alembic import context

config = context.config

_ini = config.config_file_name
if _ini and Path(_ini).exists():
    fileConfig(_ini)
else:
    logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("alembic.env")

# Registers every table on db.metadata (the package re-exports all model modules)
import feedback_app.models  # noqa: E402,F401

migrate_ext = current_app.extensions["migrate"]


def _engine():
    # Flask-SQLAlchemy 3.x exposes the engine as a property
    return migrate_ext.db.engine


def _metadata():
    db = migrate_ext.db
    return db.metadatas[None] if hasattr(db, "metadatas") else db.metadata


config.set_main_option(
    "sqlalchemy.url",
    _engine().url.render_as_string(hide_password=False).replace("%", "%%"),
)

# Autogenerate never proposes dropping a reflected index unless it is named here
_DROPPABLE_INDEXES = {
    n.strip() for n in os.getenv("ALEMBIC_DROP_INDEX_ALLOWLIST", "").split(",") if n.strip()
}


def _include_object(obj, name, type_, reflected, compare_to):
    if type_ == "index" and reflected and compare_to is None:
        return name in _DROPPABLE_INDEXES
    return True


def _common_options(url):
    return {
        "target_metadata": _metadata(),
        "compare_type": True,
        "compare_server_default": True,
        "include_object": _include_object,
        # SQLite cannot ALTER constraints in place (form_access, subject_allocations checks)
        "render_as_batch": url.startswith("sqlite"),
    }


def run_migrations_offline():
    url = config.get_main_option("sqlalchemy.url")
    context.configure(url=url, literal_binds=True, **_common_options(url))
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    def skip_empty_revision(context_, revision, directives):
        if getattr(config.cmd_opts, "autogenerate", False) and directives[0].upgrade_ops.is_empty():
            directives[:] = []
            logger.info("No schema changes detected; no revision written.")

    engine = _engine()
    options = {
        **migrate_ext.configure_args,
        **_common_options(str(engine.url)),
    }
    options.setdefault("process_revision_directives", skip_empty_revision)

    with engine.connect() as connection:
        context.configure(connection=connection, **options)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
