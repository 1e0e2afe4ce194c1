import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from valueboard.api.routes import router as api_router
from valueboard.core.config import get_settings

app = FastAPI(title="Valueboard API", version="0.1.0")

LOCALHOST_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:4173",
    "http://127.0.0.1:5173",
    "http://127.0.0.1:4173",
]

# Environment-based CORS configuration; deployed frontends come from ALLOWED_ORIGINS
origins = list(LOCALHOST_ORIGINS) if get_settings().environment == "development" else []
origins += [
    origin.strip()
    for origin in os.environ.get("ALLOWED_ORIGINS", "").split(",")
    if origin.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)
