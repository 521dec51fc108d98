"""Process-wide resources created once at startup and passed explicitly."""

from __future__ import annotations

from dataclasses import dataclass, field

from .database import DatabaseClient, HasDatabaseSettings
from .storage import KeyValueStore, RedisKeyValueStore
from .transaction_repository_impl import TransactionRepositoryImpl


@dataclass
class AppContext:
    """Owns the store connection shared by repositories and route handlers."""

    settings: HasDatabaseSettings
    db_client: DatabaseClient
    store: KeyValueStore
    transactions: TransactionRepositoryImpl = field(init=False)

    def __post_init__(self) -> None:
        self.transactions = TransactionRepositoryImpl(self.store)

    @classmethod
    def create(cls, settings: HasDatabaseSettings) -> AppContext:
        db_client = DatabaseClient(settings)
        db_client.initialize_database()
        return cls(
            settings=settings,
            db_client=db_client,
            store=RedisKeyValueStore(db_client),
        )

    async def close(self) -> None:
        await self.db_client.close()
