"""
API Router Aggregator.

Combines all v1 API routers into a single router for the main app.
"""

from fastapi import APIRouter

from eti.api.v1 import session, dashboard, candidates, jobs, portal, assistant, admin

api_router = APIRouter()

# Include all v1 routers with their prefixes and tags
api_router.include_router(
    session.router,
    prefix="/session",
    tags=["Session"],
)

api_router.include_router(
    dashboard.router,
    prefix="/dashboard",
    tags=["Dashboard"],
)

api_router.include_router(
    candidates.router,
    prefix="/candidates",
    tags=["Candidates"],
)

api_router.include_router(
    jobs.router,
    prefix="/jobs",
    tags=["Jobs"],
)

api_router.include_router(
    portal.router,
    prefix="/portal",
    tags=["Candidate Portal"],
)

api_router.include_router(
    assistant.router,
    prefix="/assistant",
    tags=["Assistant"],
)

api_router.include_router(
    admin.router,
    prefix="/admin",
    tags=["Admin"],
)
