"""
Registre central des routers (API v1 + health).
- Sac: bag (lecture/ajout/retrait/vidage) et checkout Stripe
- Commandes: verify + webhook Stripe, consultation
- Notifications, mailing list, health
"""
from fastapi import FastAPI
from tailormint.bag import views as bag_views
from tailormint.payments import views as payments_views
from tailormint.orders import views as orders_views
from tailormint.notifications import views as notifications_views
from tailormint.mailing_list import views as mailing_list_views
from tailormint.health.router import router as health_router


def register_routers(app: FastAPI) -> None:
    """L'ordre n'a pas d'impact sauf conflits de chemins (évités par préfixes)."""
    app.include_router(bag_views.router)
    app.include_router(payments_views.router)
    app.include_router(orders_views.checkout_router)
    app.include_router(orders_views.router)
    app.include_router(notifications_views.router)
    app.include_router(mailing_list_views.router)
    # Health & monitoring
    app.include_router(health_router)
