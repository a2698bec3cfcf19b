from movie_catalog.infrastructure.storage.key_value_storage import (
    InMemoryKeyValueStorage,
    JsonFileKeyValueStorage,
    build_key_value_storage,
)

__all__ = ["InMemoryKeyValueStorage", "JsonFileKeyValueStorage", "build_key_value_storage"]
