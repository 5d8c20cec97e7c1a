"""
FastAPI application entry point.

Run with: uvicorn api.main:app --reload
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from backend/.env (optional) before other imports that read env
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(env_path)

from api.routes import layouts
from services.image_analyzer import ensure_heif_opener

# Register HEIF/HEIC opener at startup (for iPhone photos)
heif_available = ensure_heif_opener()


# Create app
app = FastAPI(
    title="Album Auto-Layout API",
    description="API for distributing photos across album page templates",
    version="0.1.0",
)

# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure properly for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(layouts.router, prefix="/layouts", tags=["layouts"])


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "Album Auto-Layout API"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "heif_support": heif_available}
