# marketplace/api/__init__.py
from fastapi import FastAPI

from marketplace.api.errors import register_error_handlers
from marketplace.api.routers import carts, orders, health


def register_api(app: FastAPI):
    register_error_handlers(app)

    app.include_router(health.router)
    app.include_router(carts.router)
    app.include_router(orders.router)
