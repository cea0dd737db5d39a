"""
ASGI entrypoint: expose `app` for process managers / deployments.

- En production, un process manager (ex: gunicorn/uvicorn-workers) importe `evently.asgi:app`.
- Toute la configuration FastAPI est centralisée dans evently.app_setup.factory.
"""

from evently.app import app

if __name__ == "__main__":
    import os
    import uvicorn
    uvicorn.run(
        "evently.asgi:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=True,     # rechargement automatique en dev
    )
