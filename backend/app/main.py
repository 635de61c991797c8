import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.api import curriculum, lessons, questions, profile
from app.core.config import get_settings
from app.services.ai import check_connection, get_generation_client

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title=settings.app_name,
    description="Adaptive lesson and practice-question generation for students",
    version="0.1.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        settings.frontend_url,
        "http://localhost:3000",  # Next.js dev server
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(curriculum.router)
app.include_router(lessons.router)
app.include_router(questions.router)
app.include_router(profile.router)


@app.get("/")
async def root():
    return {
        "name": settings.app_name,
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/health")
async def health():
    return {"status": "ok", "llm_configured": settings.llm_configured}


@app.get("/health/llm")
async def health_llm():
    """Round-trip the liveness prompt through the configured model."""
    try:
        client = get_generation_client(settings)
    except ValueError:
        return {"status": "unconfigured", "ok": False}
    ok = await check_connection(client)
    return {"status": "ok" if ok else "degraded", "ok": ok}
