from typing import Dict, List, Optional, Tuple
import logging

from seabite.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class MemoryStorageBackend:
    """Process-local key/value backend, one namespace per profile"""

    def __init__(self):
        self._data: Dict[Tuple[str, str], str] = {}

    def get(self, profile_id: str, key: str) -> Optional[str]:
        return self._data.get((profile_id, key))

    def set(self, profile_id: str, key: str, value: str) -> None:
        self._data[(profile_id, key)] = value

    def delete(self, profile_id: str, key: str) -> bool:
        return self._data.pop((profile_id, key), None) is not None

    def clear(self, profile_id: str) -> int:
        doomed = [k for k in self._data if k[0] == profile_id]
        for k in doomed:
            del self._data[k]
        return len(doomed)

    def keys(self, profile_id: str) -> List[str]:
        return sorted(key for pid, key in self._data if pid == profile_id)


class SqlStorageRepository(BaseRepository):
    """
    Key/value backend persisted in the local_storage table.

    Survives process restarts the way browser localStorage survives page
    reloads. Same interface as MemoryStorageBackend.
    """

    @property
    def table_name(self) -> str:
        return "local_storage"

    def get(self, profile_id: str, key: str) -> Optional[str]:
        row = self.execute_single_query(
            f"SELECT value FROM {self.table_name} "
            "WHERE profile_id = :pid AND storage_key = :key",
            {"pid": profile_id, "key": key},
        )
        return row["value"] if row else None

    def set(self, profile_id: str, key: str, value: str) -> None:
        # ON CONFLICT ... DO UPDATE is understood by PostgreSQL and SQLite
        self.execute_command(
            f"""
            INSERT INTO {self.table_name} (profile_id, storage_key, value, updated_at)
            VALUES (:pid, :key, :value, CURRENT_TIMESTAMP)
            ON CONFLICT (profile_id, storage_key)
            DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
            """,
            {
                "pid": profile_id,
                "key": key,
                "value": value,
            },
        )
        logger.debug(f"Stored key {key!r} for profile {profile_id}")

    def delete(self, profile_id: str, key: str) -> bool:
        affected = self.execute_command(
            f"DELETE FROM {self.table_name} "
            "WHERE profile_id = :pid AND storage_key = :key",
            {"pid": profile_id, "key": key},
        )
        return affected > 0

    def clear(self, profile_id: str) -> int:
        return self.execute_command(
            f"DELETE FROM {self.table_name} WHERE profile_id = :pid",
            {"pid": profile_id},
        )

    def keys(self, profile_id: str) -> List[str]:
        rows = self.execute_query(
            f"SELECT storage_key FROM {self.table_name} "
            "WHERE profile_id = :pid ORDER BY storage_key",
            {"pid": profile_id},
        )
        return [r["storage_key"] for r in rows]
