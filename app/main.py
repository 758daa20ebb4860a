from fastapi import FastAPI
from contextlib import asynccontextmanager
import logging

from .config import settings, stripe_config
from .api.routes import router as api_router
from .db.database import connect_to_mongo, close_mongo_connection, ensure_indexes

# Configure logging
logging.basicConfig(
    level=logging.INFO if settings.DEBUG else logging.WARNING,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: Connect to MongoDB and make sure pending sessions expire
    logger.info(f"Starting application in Stripe {stripe_config.mode_label} mode")
    if not stripe_config.secret_key:
        logger.warning(f"Stripe {stripe_config.mode_label} secret key is not configured; checkouts will fail")
    await connect_to_mongo()
    await ensure_indexes()

    yield  # This is where FastAPI serves requests

    # Shutdown: Close MongoDB connection
    logger.info("Shutting down application: closing MongoDB connection")
    await close_mongo_connection()

# Create FastAPI app with lifespan
app = FastAPI(
    title=settings.PROJECT_NAME,
    debug=settings.DEBUG,
    lifespan=lifespan
)

app.include_router(api_router)

@app.get("/", tags=["health"])
async def health_check():
    return {"status": "ok", "service": settings.PROJECT_NAME}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)
