from movie_catalog.application.ports.catalog_port import CatalogPort
from movie_catalog.application.ports.key_value_storage_port import KeyValueStoragePort

__all__ = ["CatalogPort", "KeyValueStoragePort"]
