"""API version 1 routes."""

from fastapi import APIRouter

from txnflow.api.v1 import categorize, imports, rules

router = APIRouter(prefix="/api/v1")

# Include routers
router.include_router(imports.router)
router.include_router(categorize.router)
router.include_router(rules.router)
