"""
=============================================================================
Database Initialization for Student Records
=============================================================================

Creates the SQLite database and tables if they don't exist.

Usage:
    from init_db import init_database
    session = init_database('student_records.db')

Date: 2026-10-19
Version: 1.0
=============================================================================
"""

import os
import logging
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from models import Base


logger = logging.getLogger(__name__)


def _database_url(db_path: str) -> str:
    if db_path == ':memory:':
        return 'sqlite://'
    return f'sqlite:///{db_path}'


def init_database(db_path: str = 'student_records.db') -> Session:
    """
    Initialize database and create tables if they don't exist.

    Args:
        db_path: Path to SQLite database file (':memory:' for a throwaway database)

    Returns:
        SQLAlchemy session object
    """
    engine = create_engine(_database_url(db_path), echo=False)
    Base.metadata.create_all(engine)

    logger.info(f"Database initialized: {os.path.abspath(db_path) if db_path != ':memory:' else db_path}")
    logger.debug(f"Tables: {', '.join(sorted(Base.metadata.tables))}")

    SessionFactory = sessionmaker(bind=engine)
    return SessionFactory()


def get_database_session(db_path: str = 'student_records.db') -> Session:
    """
    Get database session (without recreating tables).

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLAlchemy session object
    """
    engine = create_engine(_database_url(db_path), echo=False)
    SessionFactory = sessionmaker(bind=engine)
    return SessionFactory()
