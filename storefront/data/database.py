# storefront/data/database.py
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from storefront.utils.settings import DATABASE_URL

Base = declarative_base()


def build_engine(url: str = DATABASE_URL, **kwargs):
    return create_engine(url, pool_pre_ping=True, **kwargs)


def build_session_factory(engine) -> sessionmaker:
    # expire_on_commit=False: serwisy zwracaja dane po commit
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


# engine tworzony leniwie przez entry point (main / celery worker)
engine = None
SessionLocal = None


def init_db(url: str = DATABASE_URL, **kwargs):
    global engine, SessionLocal
    engine = build_engine(url, **kwargs)
    SessionLocal = build_session_factory(engine)
    return engine


def get_db():
    if SessionLocal is None:
        init_db()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
