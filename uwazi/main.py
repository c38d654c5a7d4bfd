import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from uwazi.config import settings
from uwazi.database import close_mongo_connection, connect_to_mongo, get_database
from uwazi.routes import applications_router, programs_router, verify_router
from uwazi.services.ledger_service import MongoKeyValueStore, proof_ledger
from uwazi.services.llm_service import llm_service

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    if settings.use_mongodb:
        try:
            await connect_to_mongo()
            proof_ledger.store = MongoKeyValueStore(get_database())
        except Exception as e:
            logger.error(f"MongoDB unavailable, keeping the proof ledger in memory: {e}")
    await proof_ledger.load()
    yield
    # Shutdown
    await llm_service.close()
    await close_mongo_connection()


app = FastAPI(
    title=settings.app_name,
    description="Document-driven eligibility checks with verifiable proofs",
    version=settings.app_version,
    debug=settings.debug,
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(programs_router, prefix=settings.api_prefix)
app.include_router(applications_router, prefix=settings.api_prefix)
app.include_router(verify_router, prefix=settings.api_prefix)


@app.get("/")
async def root():
    return {"message": f"{settings.app_name} API is running", "version": settings.app_version}


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "uwazi-proofs",
        "ledger_records": len(proof_ledger),
        "llm_configured": bool(settings.openrouter_api_key)
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("uwazi.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
