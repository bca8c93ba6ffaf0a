# backend/database/session.py
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from config.settings import get_settings

Base = declarative_base()


def build_engine(database_url: str, echo: bool = False):
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        # in-memory צריך חיבור יחיד משותף, אחרת כל session רואה DB ריק
        if ":memory:" in database_url or database_url in ("sqlite://", "sqlite:///"):
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, echo=echo, future=True, **kwargs)

    return create_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        future=True,
    )


_settings = get_settings()
DATABASE_URL = _settings.database_url

engine = build_engine(DATABASE_URL, echo=_settings.sql_echo)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def init_db(bind=None) -> None:
    # טעינת כל המודלים כדי שירשמו על ה-metadata
    import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
