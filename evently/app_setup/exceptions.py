"""
Gestionnaires d'exceptions.
- HTTPException: réponse JSON standard {"detail": ...}.
- ConfigurationError: 500 JSON, journalisée (ne devrait arriver qu'avant le démarrage complet).
"""
import logging
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from evently.config import ConfigurationError

logger = logging.getLogger(__name__)

def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(HTTPException)
    async def json_http_errors(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.exception_handler(ConfigurationError)
    async def configuration_errors(request: Request, exc: ConfigurationError):
        logger.error("Configuration invalide pendant %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content={"detail": "Configuration serveur incomplète"})
