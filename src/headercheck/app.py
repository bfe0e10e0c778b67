from __future__ import annotations

from fastapi import FastAPI

from src.headercheck.api.validate_api import router as validate_router
from src.headercheck.config import get as get_config

app = FastAPI(title=str(get_config("api.title", "Upload Header Check API")), version="1.0.0")

# Include routers
app.include_router(validate_router, tags=["validation"])
