from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from evently.health.service import health_store_info
from evently.infra.mongo_client import MongoStore, get_store

router = APIRouter(prefix="/health", tags=["Health"])

@router.get("")
def health_root():
    return {"ok": True}

@router.get("/store")
async def health_store(store: MongoStore = Depends(get_store)):
    info = await health_store_info(store)
    return JSONResponse(info, status_code=200 if info["connect_ok"] else 503)
