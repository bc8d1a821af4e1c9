"""Export-Calculator: FastAPI application entry point."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from export_calc.api import calculations
from export_calc.config import get_settings
from export_calc.logging_setup import configure_logging

settings = get_settings()
configure_logging("DEBUG" if settings.debug else settings.log_level)

app = FastAPI(
    title=settings.app_name,
    version="1.0.0",
    description="Export price simulator: factory cost to final sale price "
                "for the Dubai (USD/AED) and Serbia (USD/RSD) markets",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(calculations.router, prefix="/api/v1")


@app.get("/health")
async def health():
    return {"status": "ok", "service": settings.app_name, "version": "1.0.0"}
