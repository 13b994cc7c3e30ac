# Main application file

import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from bakery.core.config import settings
from bakery.core.errors import BakeryError, bakery_error_handler
from bakery.core.rate_limiter import limiter
from bakery.routers import (
    auth,
    categories,
    products,
    inventory,
    purchases,
    production,
    customers,
    parties,
    orders,
    expenses,
    reports,
)
from bakery.routers import settings as settings_router


# LOGGING CONFIGURATION

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s | %(levelname)s | %(message)s",
)

logger = logging.getLogger("app")


# APP INIT

app = FastAPI(
    title="Bakery Management API",
    description="Inventory, production costing, purchasing and sales for a bakery",
    version="1.0.0",
)


# CORS (Token-based auth)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Authorization", "Content-Type"],
)


# RATE LIMITING

app.state.limiter = limiter
app.add_exception_handler(
    RateLimitExceeded,
    _rate_limit_exceeded_handler
)


# DOMAIN ERRORS

app.add_exception_handler(BakeryError, bakery_error_handler)


# REQUEST LOGGING MIDDLEWARE

@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()

    response = await call_next(request)

    duration = round((time.time() - start_time) * 1000, 2)

    logger.info(
        f"{request.method} {request.url.path} "
        f"Status: {response.status_code} "
        f"Time: {duration}ms"
    )

    return response


# ROUTERS

app.include_router(auth.router)
app.include_router(categories.router)
app.include_router(products.router)
app.include_router(inventory.router)
app.include_router(purchases.router)
app.include_router(production.router)
app.include_router(customers.router)
app.include_router(parties.router)
app.include_router(orders.router)
app.include_router(expenses.router)
app.include_router(settings_router.router)
app.include_router(reports.dashboard_router)
app.include_router(reports.analytics_router)


# ROOT

@app.get("/")
def root():
    logger.info("Health check endpoint called")
    return {"message": "Bakery Management API is running"}
