from contextlib import contextmanager
import os
from pathlib import Path
from typing import Callable, ContextManager, Optional
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///data/app.db")

SessionFactory = Callable[[], ContextManager[Session]]


def make_engine(database_url: str) -> Engine:
    # Ensure sqlite file parent directory exists to avoid 'unable to open database file'
    if database_url.startswith("sqlite:///") and ":memory:" not in database_url:
        db_path = database_url.split("sqlite:///")[-1]
        Path(db_path).expanduser().resolve().parent.mkdir(parents=True, exist_ok=True)
    return create_engine(database_url, future=True)


def make_session_factory(engine: Engine) -> SessionFactory:
    """Build a context-managed session scope bound to ``engine``.

    The scope is one transaction: commit when the block exits cleanly,
    rollback and re-raise on any exception.
    """
    session_local = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, future=True)

    @contextmanager
    def get_session():
        session = session_local()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    return get_session


_default_factory: Optional[SessionFactory] = None


@contextmanager
def get_session():
    global _default_factory
    if _default_factory is None:
        _default_factory = make_session_factory(make_engine(DATABASE_URL))
    with _default_factory() as session:
        yield session


def init_db(engine: Engine) -> None:
    """Create all tables that do not exist yet."""
    from ..models import Base

    Base.metadata.create_all(engine)
