"""Main API router — combines all endpoint routers."""

from fastapi import APIRouter

from segmentguard.api.accounts import router as accounts_router
from segmentguard.api.clients import router as clients_router
from segmentguard.api.health import router as health_router
from segmentguard.api.notes import router as notes_router

api_router = APIRouter()

# Health check
api_router.include_router(health_router, tags=["Health"])

# Validated endpoints
api_router.include_router(accounts_router, tags=["Accounts"])
api_router.include_router(notes_router, tags=["Notes"])
api_router.include_router(clients_router, tags=["Clients"])
