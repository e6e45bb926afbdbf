"""
Aggregate all v1 endpoint routers under the /v1 prefix.
"""

from fastapi import APIRouter

from ecofinds_quality.api.v1.endpoints.analyze import router as analyze_router
from ecofinds_quality.api.v1.endpoints.quality import router as quality_router

v1_router = APIRouter(prefix="/v1")
v1_router.include_router(analyze_router)
v1_router.include_router(quality_router)
