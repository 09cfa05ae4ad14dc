from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
from dotenv import load_dotenv

from database.config import cleanup_database, get_database_config, get_health_checker, initialize_database
from routes.connectivity import router as connectivity_router

# Load environment variables
load_dotenv()

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="SmartRoutes Connectivity API",
    description="Transport network connectivity analysis and repair",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_database_config().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(connectivity_router)

# Root endpoint for health check
@app.get("/")
async def root():
    return {"message": "SmartRoutes Connectivity API is running", "status": "healthy", "version": "1.0.0"}

@app.get("/health")
async def health():
    """Database health check"""
    database = get_health_checker().check_connection()
    return {"status": database["status"], "database": database}

@app.on_event("startup")
async def startup_event():
    """Create network tables on startup"""
    if initialize_database():
        logger.info("SmartRoutes Connectivity API started")
    else:
        logger.error("Database unavailable at startup; connectivity endpoints will return 503")

@app.on_event("shutdown")
async def shutdown_event():
    cleanup_database()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8001)
