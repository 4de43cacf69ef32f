import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from factory_inventory.config import settings
from factory_inventory.database import SessionLocal, init_db
from factory_inventory.errors import register_exception_handlers
from factory_inventory.seed import seed_demo_data

# Import routes
from factory_inventory.routes import auth, inventory, dashboard

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and load the demo data when enabled"""
    init_db()
    if settings.SEED_DEMO_DATA:
        db = SessionLocal()
        try:
            seed_demo_data(db)
        finally:
            db.close()
    logger.info("Factory inventory API started (%s)", settings.ENVIRONMENT)

    yield


# Create FastAPI app
app = FastAPI(
    title="Factory Inventory API",
    description="Stock tracking for materials, products and assets across both production lines",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers
app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(inventory.router, prefix="/api/inventory", tags=["Inventory"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["Dashboard"])


# Root endpoint
@app.get("/")
def root():
    return {
        "message": "Factory Inventory API",
        "status": "running",
        "docs": "/docs"
    }

# Health check
@app.get("/health")
def health_check():
    return {"status": "healthy", "environment": settings.ENVIRONMENT}
