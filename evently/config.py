# evently.config
from pathlib import Path
import os
from typing import List
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=True)

"""
Configuration centrale du backend.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose les secrets/URLs (Stripe, MongoDB), CORS/hosts
- Fournit les URLs de redirection du checkout
- require_settings(): vérifie au démarrage que les secrets obligatoires sont présents
"""


class ConfigurationError(RuntimeError):
    """Configuration manquante ou invalide: fatale au démarrage, jamais traitée par requête."""


def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")


# Stripe: clé secrète (création de sessions) et secret partagé du webhook
STRIPE_SECRET_KEY = _clean_env(os.getenv("STRIPE_SECRET_KEY") or "")
STRIPE_WEBHOOK_SECRET = _clean_env(os.getenv("STRIPE_WEBHOOK_SECRET") or "")
CHECKOUT_CURRENCY = _clean_env(os.getenv("CHECKOUT_CURRENCY") or "usd").lower()

# MongoDB: chaîne de connexion et base (collections events, users, orders)
MONGODB_URI = _clean_env(os.getenv("MONGODB_URI") or "")
MONGODB_DB_NAME = _clean_env(os.getenv("MONGODB_DB_NAME") or "evently")

# CORS (dev)
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1").split(",") if h.strip()]

# Pages de succès/annulation du checkout
BASE_URL = _clean_env(os.getenv("BASE_URL") or "http://localhost:8000").rstrip("/")
CHECKOUT_SUCCESS_PATH = os.getenv("CHECKOUT_SUCCESS_PATH", "/profile")
CHECKOUT_CANCEL_PATH = os.getenv("CHECKOUT_CANCEL_PATH", "/")

REQUIRED_SETTINGS = ("STRIPE_SECRET_KEY", "STRIPE_WEBHOOK_SECRET", "MONGODB_URI")


def missing_settings() -> List[str]:
    """Noms des réglages obligatoires absents (lus au moment de l'appel, patchables en tests)."""
    module_globals = globals()
    return [name for name in REQUIRED_SETTINGS if not module_globals.get(name)]


def require_settings() -> None:
    """
    Vérifie la présence des secrets obligatoires.
    - Appelée par le lifespan: une absence empêche le démarrage de l'application.
    - Soulève ConfigurationError avec la liste des variables manquantes.
    """
    missing = missing_settings()
    if missing:
        raise ConfigurationError(f"Configuration manquante: {', '.join(missing)}")


def checkout_success_url() -> str:
    return f"{BASE_URL}{CHECKOUT_SUCCESS_PATH}"


def checkout_cancel_url() -> str:
    return f"{BASE_URL}{CHECKOUT_CANCEL_PATH}"
