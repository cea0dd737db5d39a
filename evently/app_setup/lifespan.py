"""
Lifespan FastAPI: initialisation/arrêt des ressources partagées.
- Vérifie la configuration obligatoire (Stripe, MongoDB): absence = démarrage refusé.
- Crée le MongoStore partagé (connexion paresseuse au premier usage) et le ferme à l'arrêt.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI

from evently import config
from evently.infra.mongo_client import MongoStore

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    - require_settings() soulève ConfigurationError si un secret manque (fatal).
    - Un store déjà posé sur app.state (tests, scripts) est conservé.
    """
    logger = logging.getLogger("uvicorn.error")
    config.require_settings()

    store = getattr(app.state, "store", None)
    owns_store = store is None
    if owns_store:
        store = MongoStore(config.MONGODB_URI, config.MONGODB_DB_NAME)
        app.state.store = store
    logger.info("Store MongoDB prêt (db=%s, connexion au premier usage)", config.MONGODB_DB_NAME)

    yield

    # Phase shutdown
    if owns_store:
        await store.close()
        app.state.store = None
        logger.info("Store MongoDB fermé")
