from .connection import engine, get_db, Base, SessionLocal, transaction

__all__ = ["engine", "get_db", "Base", "SessionLocal", "transaction"]
