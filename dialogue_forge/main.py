"""FastAPI application entry point."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dialogue_forge.config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Dialogue Forge API",
    description="Converts dialogue trees to and from Yarn-style scripts",
    version="0.1.0",
    debug=settings.DEBUG,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Routes ---
from dialogue_forge.api.routes import examples, yarn  # noqa: E402

app.include_router(yarn.router, prefix="/api/yarn", tags=["yarn"])
app.include_router(examples.router, prefix="/api/examples", tags=["examples"])


@app.get("/health")
async def health_check():
    return {"status": "ok"}
