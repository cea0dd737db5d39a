from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware
try:
    from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware
except ImportError:
    ProxyHeadersMiddleware = None
from evently.config import CORS_ORIGINS, ALLOWED_HOSTS

"""
Middlewares transverses de l'application.
- register_basic_middlewares: CORS, TrustedHost et confiance en X-Forwarded-*.
Le webhook Stripe n'utilise ni cookie ni session: aucune exemption CSRF nécessaire.
"""
def register_basic_middlewares(app: FastAPI) -> None:
    """
    - CORSMiddleware: autorise les origines définies (dev/prod).
    - TrustedHostMiddleware: limite les hôtes acceptés (défense host header).
    - ProxyHeadersMiddleware (si dispo): fait confiance aux en-têtes du proxy (x-forwarded-*).
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=ALLOWED_HOSTS + ["*"] if "*" in CORS_ORIGINS else ALLOWED_HOSTS,
    )
    # Fait confiance aux en-têtes X-Forwarded-* (Render, Nginx, etc.)
    if ProxyHeadersMiddleware:
        app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=["*"])
