"""
API routes for the investment dashboard.
"""

from fastapi import APIRouter

from propvest.api import properties, sessions, calculations, tools

router = APIRouter()

# Include sub-routers
router.include_router(properties.router, prefix="/properties", tags=["properties"])
router.include_router(sessions.router, prefix="/sessions", tags=["sessions"])
router.include_router(calculations.router, prefix="/calculate", tags=["calculations"])
router.include_router(tools.router, prefix="/tools", tags=["tools"])
