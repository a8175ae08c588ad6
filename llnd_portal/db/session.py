from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool
from llnd_portal.core.config import settings


def _engine_options(url: str) -> dict:
    if url == "sqlite://" or url == "sqlite:///:memory:":
        # One shared connection so every session sees the same in-memory database
        return {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "poolclass": QueuePool,
        "pool_size": 20,  # Maximum number of connections to keep
        "max_overflow": 10,  # Maximum number of connections that can be created beyond pool_size
        "pool_timeout": 30,  # Seconds to wait before giving up on getting a connection from the pool
        "pool_recycle": 1800,  # Recycle connections after 30 minutes
        "pool_pre_ping": True,
    }


engine = create_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
