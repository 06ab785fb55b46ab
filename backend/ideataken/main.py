import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .database import Base, engine
from .routes.challenge import router as challenge_router
from .routes.check_idea import router as check_idea_router
from .routes.ideas import router as ideas_router
from .services.rate_limiter import RateLimiter
from . import models  # noqa: F401  (registers tables on Base.metadata)


# Load environment variables from .env file
load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("ideataken")

_CONFIGURED_KEYS = {
    "OpenAI": "OPENAI_API_KEY",
    "SerpAPI": "SERP_API_KEY",
    "Product Hunt": "PRODUCT_HUNT_TOKEN",
    "Reddit": "REDDIT_CLIENT_ID",
    "GitHub": "GITHUB_TOKEN",
    "RapidAPI": "RAPID_API_KEY",
}


@asynccontextmanager
async def lifespan(app: FastAPI):

    # Startup
    Base.metadata.create_all(bind=engine)
    logger.info("Starting IdeaTaken API")
    for label, env_var in _CONFIGURED_KEYS.items():
        state = "configured" if os.getenv(env_var) else "not set (source falls back to defaults)"
        logger.info("   %-13s %s", f"{label}:", state)

    yield

    logger.info("Shutting down IdeaTaken API")


app = FastAPI(
    title="IdeaTaken API",
    version="1.0.0",
    description="Checks whether a startup idea is already taken across apps, launches, repos and the web.",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Single-process, in-memory; see services/rate_limiter.py
app.state.rate_limiter = RateLimiter()

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        origin.strip()
        for origin in os.getenv(
            "CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173"
        ).split(",")
        if origin.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Cache", "X-Response-Time", "X-RateLimit-Limit", "X-RateLimit-Remaining", "Retry-After"],
)

app.include_router(check_idea_router)
app.include_router(challenge_router)
app.include_router(ideas_router)


@app.get(
    "/",
    summary="API Root",
    description="Welcome endpoint with API information",
    tags=["General"]
)
async def root():
    """Root endpoint with API information."""
    return {
        "name": "IdeaTaken API",
        "version": "1.0.0",
        "description": "Is your startup idea already taken?",
        "docs": "/docs",
        "endpoints": {
            "check": "POST /check-idea - Check a startup idea",
            "challenge": "POST /challenge-ai - Dispute an analysis",
            "popular": "GET /ideas/popular - Most requested ideas",
            "history": "GET /users/{user_id}/searches - A user's past checks",
            "health": "GET /health - Service health check",
        },
    }


@app.get(
    "/health",
    summary="Global Health Check",
    description="Check if the API server is running",
    tags=["General"]
)
async def health():
    """Global health check endpoint."""
    return {
        "status": "healthy",
        "service": "ideataken",
        "version": "1.0.0",
    }


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Invalid input is a 400 with the first readable message as ``error``."""
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        message = str(errors[0].get("msg", message)).removeprefix("Value error, ")
    return JSONResponse(
        status_code=400,
        content={
            "error": message,
            "detail": [
                {"loc": list(e.get("loc", ())), "msg": e.get("msg", ""), "type": e.get("type", "")}
                for e in errors
            ],
        },
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unhandled errors."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "message": "An unexpected error occurred",
            "detail": str(exc) if os.getenv("DEBUG", "false").lower() == "true" else None,
        }
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "ideataken.main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("DEBUG", "false").lower() == "true",
    )
