# storefront/api/__init__.py
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request

from storefront.api.deps import rate_limit
from storefront.api.errors import register_exception_handlers
from storefront.api.routers import carts, health, orders, products, users
from storefront.data.database import close_db, init_db
from storefront.utils.logging import add_context, clear_context


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield
    close_db()


def create_app() -> FastAPI:
    app = FastAPI(title="Storefront API", version="1.0.0", lifespan=lifespan)

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        """Tag every log line of a request with its method and path."""
        clear_context()
        add_context(method=request.method, path=request.url.path)
        try:
            return await call_next(request)
        finally:
            clear_context()

    register_exception_handlers(app)

    limited = [Depends(rate_limit("global"))]
    app.include_router(health.router)
    app.include_router(users.router, dependencies=limited)
    app.include_router(products.router, dependencies=limited)
    app.include_router(carts.router, dependencies=limited)
    app.include_router(orders.router, dependencies=limited)

    return app
