# storefront/main.py
from fastapi import FastAPI
import logging
from contextlib import asynccontextmanager

from storefront.config import settings
from storefront.database import cart_db
from storefront.api.deps import get_dashboard
from storefront.api.errors import register_error_handlers
from storefront.api.routes import admin as admin_routes
from storefront.api.routes import cart as cart_routes
from storefront.api.routes import integrations as integration_routes
from storefront.api.routes import inventory as inventory_routes
from storefront.api.routes import jobs as job_routes
from storefront.api.routes import products as product_routes
from storefront.middleware.cors_config import configure_cors
from storefront.middleware.security_headers import add_security_headers


logger = logging.getLogger("uvicorn.error")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: report where carts are stored and which backend is proxied, and start
    the admin pollers when ENABLE_POLLING is set. Shutdown: stop the pollers.
    """
    if cart_db.data_dir.exists():
        logger.info("Cart documents in %s (%d stored)", cart_db.data_dir, len(cart_db.list_ids()))
    else:
        logger.info("Cart directory %s will be created on first save", cart_db.data_dir)
    logger.info("Proxying catalog / inventory / jobs to %s", settings.BACKEND_API_URL)

    dashboard = None
    if settings.ENABLE_POLLING:
        dashboard = get_dashboard()
        dashboard.start()

    yield

    if dashboard is not None:
        await dashboard.stop()
    logger.info("Shutting down Storefront API")


app = FastAPI(title="Storefront API", version="0.1.0", lifespan=lifespan)
configure_cors(app)
add_security_headers(app)
register_error_handlers(app)

app.include_router(cart_routes.router)
app.include_router(product_routes.router)
app.include_router(inventory_routes.router)
app.include_router(job_routes.router)
app.include_router(integration_routes.router)
app.include_router(admin_routes.router)


@app.get("/", tags=["root"])
async def root():
    return {"status": "ok", "service": "Storefront API"}


@app.get("/health", tags=["root"])
async def health_check():
    return {"status": "healthy", "service": "storefront", "env": settings.ENV}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("storefront.main:app", host="0.0.0.0", port=3000, reload=True)
