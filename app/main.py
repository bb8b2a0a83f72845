from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
import logging

# Import database components
from app.database.database import engine, Base

# Import middleware
from app.common.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware

# Import routers
from app.modules.auth.router import auth_router
from app.modules.clients.router import clients_router
from app.modules.products.router import product_router
from app.modules.services.router import services_router
from app.modules.registers.router import caisse_router, transactions_router
from app.modules.orders.router import orders_router
from app.modules.payments.router import payments_router
from app.modules.invoices.router import invoices_router
from app.modules.statistics.router import statistics_router

# Import models for table creation
import app.modules.auth.models
import app.modules.clients.models
import app.modules.products.models
import app.modules.services.models
import app.modules.registers.models
import app.modules.orders.models
import app.modules.payments.models
import app.modules.invoices.models

from app.core.config import settings

# Configure logging
logging.basicConfig(
    level=logging.INFO if settings.ENVIRONMENT == "production" else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# FastAPI app
app = FastAPI(
    title="Caisse POS API",
    description="Point of sale API: clients, catalogue, orders, payments and the cash register ledger",
    version="1.0.0",
    docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT != "production" else None
)

# Add middleware (order matters!)
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestLoggingMiddleware)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Add your frontend URLs
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
API_PREFIX = "/api"
app.include_router(auth_router, prefix=API_PREFIX)
app.include_router(clients_router, prefix=API_PREFIX)
app.include_router(product_router, prefix=API_PREFIX)
app.include_router(services_router, prefix=API_PREFIX)
app.include_router(caisse_router, prefix=API_PREFIX)
app.include_router(transactions_router, prefix=API_PREFIX)
app.include_router(orders_router, prefix=API_PREFIX)
app.include_router(payments_router, prefix=API_PREFIX)
app.include_router(invoices_router, prefix=API_PREFIX)
app.include_router(statistics_router, prefix=API_PREFIX)

# Create database tables (only for development - use migrations in production)
if settings.ENVIRONMENT == "development":
    Base.metadata.create_all(bind=engine)

@app.get("/")
async def read_root():
    return {
        "message": "Caisse POS API is running",
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT
    }

@app.get("/health")
async def health_check():
    return {"status": "healthy", "environment": settings.ENVIRONMENT}

@app.on_event("startup")
async def startup_event():
    logger.info("Caisse POS API starting up...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug mode: {settings.DEBUG}")
    logger.info(
        f"Register schedule: open {settings.REGISTER_OPEN_HOUR:02d}:{settings.REGISTER_OPEN_MINUTE:02d}, "
        f"close {settings.REGISTER_CLOSE_HOUR:02d}:{settings.REGISTER_CLOSE_MINUTE:02d} "
        f"({settings.SCHEDULER_TIMEZONE})"
    )

@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Caisse POS API shutting down...")
