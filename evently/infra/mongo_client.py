"""
Accès MongoDB partagé (collections events, users, orders).

MongoStore est créé une fois par application (lifespan) puis injecté dans les vues
via get_store(). La connexion est paresseuse: le premier appel à database() lance
une unique initialisation que tous les appelants concurrents attendent.
"""
import asyncio
import logging
from typing import Any, Callable, Optional

from fastapi import Request
from pymongo import AsyncMongoClient

from evently.config import ConfigurationError

logger = logging.getLogger(__name__)

EVENTS = "events"
USERS = "users"
ORDERS = "orders"


async def ensure_indexes(db) -> None:
    """Index unique sur orders.stripeId: une seule commande par paiement."""
    await db[ORDERS].create_index("stripeId", unique=True)
    await db[ORDERS].create_index([("buyer", 1), ("createdAt", -1)])
    await db[ORDERS].create_index("event")


class MongoStore:
    def __init__(
        self,
        uri: str,
        db_name: str = "evently",
        client_factory: Optional[Callable[..., Any]] = None,
    ):
        self._uri = uri
        self._db_name = db_name
        self._client_factory = client_factory or AsyncMongoClient
        self._client = None
        self._db = None
        self._init_task: Optional[asyncio.Future] = None

    @property
    def connected(self) -> bool:
        return self._db is not None

    async def database(self):
        """
        Retourne la base connectée.
        - Connexion déjà établie: réutilisée.
        - Sinon: une seule tâche d'initialisation est partagée par les appelants.
        - En cas d'échec, l'erreur remonte et la tâche est oubliée (pas de retry automatique).
        """
        if self._db is not None:
            return self._db
        if self._init_task is None:
            self._init_task = asyncio.ensure_future(self._connect())
        task = self._init_task
        try:
            return await asyncio.shield(task)
        except Exception:
            if self._init_task is task:
                self._init_task = None
            raise

    async def _connect(self):
        if not self._uri:
            raise ConfigurationError("MONGODB_URI manquant")
        logger.info("mongo.connect db=%s", self._db_name)
        client = self._client_factory(self._uri)
        db = client[self._db_name]
        try:
            await db.command("ping")
            await ensure_indexes(db)
        except Exception:
            logger.exception("mongo.connect failed db=%s", self._db_name)
            await client.close()
            raise
        self._client = client
        self._db = db
        return db

    async def collection(self, name: str):
        db = await self.database()
        return db[name]

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
        self._client = None
        self._db = None
        self._init_task = None


def get_store(request: Request) -> MongoStore:
    """Dépendance FastAPI: handle du store créé par le lifespan."""
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise ConfigurationError("MongoStore non initialisé (lifespan non exécuté)")
    return store
