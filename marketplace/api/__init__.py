# marketplace/api/__init__.py
from fastapi import FastAPI

from marketplace.api.routers import carts, checkout, orders, health


def create_app(lifespan=None) -> FastAPI:
    app = FastAPI(
        title="Marketplace Checkout Service",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Include routers
    app.include_router(health.router)
    app.include_router(carts.router)
    app.include_router(checkout.router)
    app.include_router(orders.router)

    return app
