import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from finboard.database import Base, engine
from finboard.api import api_router
from finboard.config import settings
import uvicorn
import logging

# Configure logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

STARTED_AT = time.monotonic()

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables on startup, release connections on shutdown"""
    logger.info("Starting up Finboard application...")
    
    # Create database tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    
    logger.info("Database tables created successfully")
    
    yield
    
    logger.info("Shutting down Finboard application...")
    
    # Close database connections
    await engine.dispose()
    
    logger.info("Database connections closed")

# Create the FastAPI application
app = FastAPI(
    title="Finboard",
    description="Financial transactions reporting service",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["Content-Type", "Authorization"],
)

# Mount API routes
app.include_router(api_router, prefix="")

@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f} ms)")
    return response

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render every HTTP error as {"error": ...}"""
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        content = {"error": "Route not found", "path": request.url.path, "method": request.method}
    elif isinstance(exc.detail, dict):
        content = exc.detail
    else:
        content = {"error": exc.detail}
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    location = errors[0].get("loc", ()) if errors else ()
    field = next((part for part in reversed(location) if isinstance(part, str)), "body")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request payload", "field": field},
    )

@app.get("/")
async def root():
    return {"message": "Financial Analytics API is running!"}

@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": time.monotonic() - STARTED_AT
    }

if __name__ == "__main__":
    uvicorn.run(
        "finboard.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
