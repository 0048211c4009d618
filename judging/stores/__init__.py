"""Score record stores for competitions and judging sheets."""

from judging.config import Settings

from .base import ScoreRecordStore, StoreError

# Store registry - import backends here to register them
_stores: dict[str, type[ScoreRecordStore]] = {}


def register_store(store_class: type[ScoreRecordStore]) -> type[ScoreRecordStore]:
    """Decorator to register a store backend under its name."""
    _stores[store_class.name] = store_class
    return store_class


def get_store_names() -> list[str]:
    """Return the names of all registered backends."""
    return list(_stores)


def create_store(settings: Settings) -> ScoreRecordStore:
    """Build the backend selected by settings.store_backend."""
    store_class = _stores.get(settings.store_backend)
    if store_class is None:
        raise StoreError(
            f"Unknown store backend {settings.store_backend!r}; "
            f"available: {', '.join(sorted(_stores)) or 'none registered'}"
        )
    return store_class.from_settings(settings)
