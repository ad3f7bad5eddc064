"""API router combining operational and state routes."""

from fastapi import APIRouter

from tf_http_backend.api.health import router as health_router
from tf_http_backend.api.states import router as states_router

router = APIRouter()

# Operational routes go first; their paths have two segments and never
# shadow a state name
router.include_router(health_router)
router.include_router(states_router)
