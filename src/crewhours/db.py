"""Engine singleton and schema bootstrap."""
from __future__ import annotations
from sqlmodel import SQLModel, create_engine
from crewhours.config import settings

DATA_DIR = settings.data_dir

_url = settings.database_url
_connect_args = {"check_same_thread": False} if _url.startswith("sqlite") else {}

if settings.DATABASE_URL is None:
    DATA_DIR.mkdir(parents=True, exist_ok=True)

engine = create_engine(_url, echo=False, connect_args=_connect_args)


def init_db() -> None:
    import crewhours.models  # noqa: F401  # registers table mappers
    SQLModel.metadata.create_all(engine)
