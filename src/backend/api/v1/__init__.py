"""
API v1 router aggregating all endpoints.
"""

from fastapi import APIRouter

from api.v1.aspirants import router as aspirants_router
from api.v1.live_votes import router as live_votes_router
from api.v1.opinions import router as opinions_router
from api.v1.polls import router as polls_router
from api.v1.votes import router as votes_router

router = APIRouter()

router.include_router(polls_router, prefix="/polls", tags=["Polls"])
router.include_router(opinions_router, prefix="/Opinions", tags=["Opinion Polls"])
router.include_router(aspirants_router, prefix="/aspirant", tags=["Competitor Polls"])
router.include_router(votes_router, prefix="/votes", tags=["Votes"])
router.include_router(live_votes_router, prefix="/live-votes", tags=["Live Votes"])
