import os
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes import router as api_router

# Load environment variables from .env file in project root
# backend/app/main.py -> backend -> project root
env_path = Path(__file__).resolve().parents[2] / ".env"
load_dotenv(env_path)

app = FastAPI(title="Memo Ledger API", version="0.1.0")

# Environment-based CORS configuration
ENVIRONMENT = os.environ.get("ENVIRONMENT", "development")

LOCALHOST_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]

CORS_ORIGINS = {
    "development": LOCALHOST_ORIGINS,
    "production": [
        origin.strip()
        for origin in os.environ.get("CORS_ALLOWED_ORIGINS", "").split(",")
        if origin.strip()
    ],
}

origins = CORS_ORIGINS.get(ENVIRONMENT, CORS_ORIGINS["development"])

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)
