from abc import ABC, abstractmethod
from typing import Optional, List, Any, Dict
from contextlib import contextmanager
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
from seabite.core.exceptions import StorageError
from seabite.db import get_engine
import logging

logger = logging.getLogger(__name__)


class BaseRepository(ABC):
    """
    Abstract base repository providing common database operations.
    Implements Repository Pattern for clean separation of data access logic.
    """

    def __init__(self, engine: Optional[Engine] = None):
        self._engine = engine

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._engine = get_engine()
        return self._engine

    @contextmanager
    def get_db_connection(self):
        """Database connection context manager with error handling"""
        try:
            with self.engine.connect() as conn:
                yield conn
        except SQLAlchemyError as e:
            logger.error(f"Database connection error: {str(e)}")
            raise StorageError(f"Database connection failed: {str(e)}")

    def execute_query(
        self,
        query: str,
        params: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        """
        Execute SELECT query and return results as list of dictionaries

        Args:
            query: SQL query string
            params: Query parameters

        Returns:
            List of row dictionaries

        Raises:
            StorageError: When query execution fails
        """
        try:
            with self.get_db_connection() as conn:
                result = conn.execute(text(query), params or {})
                return [dict(row._mapping) for row in result]
        except SQLAlchemyError as e:
            logger.error(f"Query execution failed: {query}, Error: {str(e)}")
            raise StorageError("Query execution failed", "SELECT")

    def execute_single_query(
        self,
        query: str,
        params: Optional[Dict[str, Any]] = None
    ) -> Optional[Dict[str, Any]]:
        """
        Execute query expecting single result

        Returns:
            Single row dictionary or None if not found
        """
        try:
            with self.get_db_connection() as conn:
                result = conn.execute(text(query), params or {}).first()
                return dict(result._mapping) if result else None
        except SQLAlchemyError as e:
            logger.error(f"Single query execution failed: {query}, Error: {str(e)}")
            raise StorageError("Single query execution failed", "SELECT")

    def execute_command(
        self,
        command: str,
        params: Optional[Dict[str, Any]] = None
    ) -> int:
        """
        Execute INSERT/UPDATE/DELETE command

        Returns:
            Number of affected rows
        """
        try:
            with self.get_db_connection() as conn:
                result = conn.execute(text(command), params or {})
                conn.commit()
                return result.rowcount
        except IntegrityError as e:
            logger.error(f"Integrity constraint violation: {command}, Error: {str(e)}")
            raise StorageError(f"Data integrity violation: {str(e)}", "WRITE")
        except SQLAlchemyError as e:
            logger.error(f"Command execution failed: {command}, Error: {str(e)}")
            raise StorageError("Command execution failed", "WRITE")

    @property
    @abstractmethod
    def table_name(self) -> str:
        """Table name for the entity"""
        pass
