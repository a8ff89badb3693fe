import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront.api import auth, banners, orders, products, users
from storefront.core.config import get_settings
from storefront.core.errors import StorefrontError, storefront_error_handler, unhandled_error_handler
from storefront.core.logging import configure_logging

settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(StorefrontError, storefront_error_handler)
app.add_exception_handler(Exception, unhandled_error_handler)

app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(users.router, prefix="/api/users", tags=["users"])
app.include_router(orders.router, prefix="/api/orders", tags=["orders"])
app.include_router(banners.router, prefix="/api/banners", tags=["banners"])
app.include_router(products.router, prefix="/api/products", tags=["products"])


@app.get("/")
def root():
    return {"status": "ok", "app": settings.app_name}


def run():
    import os

    import uvicorn

    port = int(os.getenv("PORT", 8000))
    logger.info("Starting %s on port %d", settings.app_name, port)
    uvicorn.run("storefront.main:app", host="0.0.0.0", port=port)


if __name__ == "__main__":
    run()
