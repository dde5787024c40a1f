"""
Main FastAPI application entry point.
"""

import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from fastapi.responses import HTMLResponse

from propvest.config import get_settings
from propvest.api import router as api_router
from propvest.api.properties import DEMO_LISTING
from propvest.calculations.analysis import FinancingAssumptions, OperatingExpenses

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

UI_DIR = Path(__file__).parent / "ui"

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Short-term rental investment analysis dashboard",
    version="0.1.0",
    debug=settings.debug,
)

# Mount static files
app.mount("/static", StaticFiles(directory=UI_DIR / "static"), name="static")

# Set up templates
templates = Jinja2Templates(directory=UI_DIR / "templates")

# Include API routes
app.include_router(api_router, prefix="/api")


@app.get("/", response_class=HTMLResponse)
async def dashboard(request: Request):
    """Render the listing dashboard."""
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "title": settings.app_name,
            "listing": DEMO_LISTING,
            "assumptions": FinancingAssumptions(purchase_price=DEMO_LISTING.price).to_dict(),
            "expenses": OperatingExpenses().to_dict(),
        },
    )


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {"status": "healthy", "version": "0.1.0"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("propvest.main:app", host=settings.host, port=settings.port, reload=settings.debug)
