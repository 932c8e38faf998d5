# amee_layer/database.py
import os

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import Settings

settings = Settings.from_env()
SQLALCHEMY_DATABASE_URL = settings.database_url

connect_args = {}
if SQLALCHEMY_DATABASE_URL.startswith("sqlite"):
    connect_args = {"check_same_thread": False}

# no connection is made until a session is used
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def sqlite_directory(url):
    """Directory holding a sqlite database file, None for other databases or in-memory sqlite."""
    url = str(url)
    if not url.startswith("sqlite:///"):
        return None
    path = url[len("sqlite:///"):]
    if not path or path == ":memory:":
        return None
    return os.path.dirname(os.path.abspath(path))


def init_db(bind=None):
    """Create the database directory (sqlite) and all tables"""
    bind = bind or engine
    directory = sqlite_directory(bind.url)
    if directory:
        os.makedirs(directory, exist_ok=True)
    Base.metadata.create_all(bind=bind)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
