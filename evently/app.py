# module evently.app
from evently.app_setup.factory import create_app

# App globale
app = create_app()
