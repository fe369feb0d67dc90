from seabite.repositories.storage_repository import MemoryStorageBackend, SqlStorageRepository

__all__ = ["MemoryStorageBackend", "SqlStorageRepository"]
