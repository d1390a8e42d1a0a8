from fastapi import APIRouter
from app.api.endpoints import analysis, location, reports

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(analysis.router)
api_router.include_router(location.router)
api_router.include_router(reports.router)
