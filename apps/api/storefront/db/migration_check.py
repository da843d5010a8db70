from __future__ import annotations

from pathlib import Path
from typing import Optional

from alembic.config import Config
from alembic.script import ScriptDirectory
from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine

from storefront.config import is_production_mode, settings
from storefront.db.base import Base

_ALEMBIC_VERSION_TABLE = "alembic_version"
_MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"


def alembic_config() -> Config:
    config = Config(str(Path(__file__).resolve().parents[2] / "alembic.ini"))
    config.set_main_option("script_location", str(_MIGRATIONS_DIR))
    return config


def _script_directory() -> ScriptDirectory:
    return ScriptDirectory.from_config(alembic_config())


def get_alembic_head_revision() -> str:
    return _script_directory().get_current_head()


def get_current_db_revision(engine: Engine) -> Optional[str]:
    if not inspect(engine).has_table(_ALEMBIC_VERSION_TABLE):
        return None

    with engine.connect() as connection:
        result = connection.execute(text("SELECT version_num FROM alembic_version LIMIT 1"))
        return result.scalar_one_or_none()


def pending_revisions(engine: Engine) -> list[str]:
    """Revisions between the database and head, oldest first."""
    current = get_current_db_revision(engine)
    newest_first = [revision.revision for revision in _script_directory().walk_revisions()]
    if current in newest_first:
        newest_first = newest_first[: newest_first.index(current)]
    return list(reversed(newest_first))


def assert_db_is_up_to_date(engine: Engine) -> None:
    pending = pending_revisions(engine)
    if pending:
        raise RuntimeError(
            "Database schema not up to date "
            f"(pending: {', '.join(pending)}). Run: alembic upgrade head"
        )


def maybe_create_schema(engine: Engine) -> None:
    if not settings.auto_create_schema:
        return
    if is_production_mode():
        raise RuntimeError("AUTO_CREATE_SCHEMA must be disabled in STOREFRONT_APP_MODE=production")

    import storefront.models  # noqa: F401 (register all SQLAlchemy models)

    Base.metadata.create_all(bind=engine)
