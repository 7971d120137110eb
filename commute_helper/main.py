"""FastAPI application setup for the commute helper."""

import os

from fastapi import FastAPI

from .api import router as api_router
from .config import settings
from utils.logging_utils import setup_logging

setup_logging(level=os.getenv("LOG_LEVEL", settings.log_level), job_name="commute_helper")

app = FastAPI(title="WMATA Commute Helper")

# API routes
app.include_router(api_router, prefix="/v1")
