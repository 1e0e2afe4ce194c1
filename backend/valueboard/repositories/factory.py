from valueboard.core.config import Settings
from valueboard.repositories.base import CollectionDao


def create_dao(settings: Settings) -> CollectionDao:
    """Build the DAO for the configured storage backend."""
    if settings.storage_backend == "local":
        from valueboard.repositories.local_repo import LocalDao

        return LocalDao(settings.data_dir)

    # Imported lazily so the local backend works without Firebase credentials
    from valueboard.repositories.firestore_repo import FirestoreDao

    return FirestoreDao()
