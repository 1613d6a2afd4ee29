from .session import get_session, init_db, make_engine, make_session_factory

__all__ = ["get_session", "init_db", "make_engine", "make_session_factory"]
