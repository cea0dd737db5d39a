"""
Registre central des routers (API v1 payments, health).
Le reporting (evently.orders) est appelé directement par les couches qui l'utilisent.
"""
from fastapi import FastAPI
from evently.payments import views as payments_views
from evently.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    # API v1
    app.include_router(payments_views.router)
    # Health & monitoring
    app.include_router(health_router)
