"""
ASGI entrypoint: expose `app` pour les process managers / déploiements.

- En production, un process manager (uvicorn, gunicorn -k uvicorn.workers.UvicornWorker) importe `tailormint.asgi:app`.
- Toute la configuration FastAPI est centralisée dans tailormint.app_setup.factory.
"""
from tailormint.app_setup.factory import create_app

app = create_app()
