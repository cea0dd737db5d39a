from typing import Any, Dict

from pymongo.errors import PyMongoError

from evently import config
from evently.infra.mongo_client import EVENTS, ORDERS, USERS, MongoStore


async def _check_collection(db, name: str) -> Dict[str, Any]:
    try:
        count = await db[name].count_documents({})
        return {"ok": True, "rows": count}
    except PyMongoError as e:
        return {"ok": False, "error": str(e)}


async def health_store_info(store: MongoStore) -> Dict[str, Any]:
    info: Dict[str, Any] = {
        "database": config.MONGODB_DB_NAME,
        "connect_ok": False,
        "error": None,
        "collections": {},
    }
    try:
        db = await store.database()
        for name in (EVENTS, USERS, ORDERS):
            info["collections"][name] = await _check_collection(db, name)
        info["connect_ok"] = True
    except (PyMongoError, config.ConfigurationError) as e:
        info["error"] = str(e)
    return info
