"""
Database module for Brytashop backend
"""

from .connection import (
    close_database,
    get_async_session,
    get_engine,
    get_session,
    init_database,
)

__all__ = [
    "close_database",
    "get_async_session",
    "get_engine",
    "get_session",
    "init_database",
]
