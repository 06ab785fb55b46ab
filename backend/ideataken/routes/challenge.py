from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.challenge_schema import ChallengeRequest, ChallengeResponse
from ..services import analytics
from ..services.synthesis import AnalysisSynthesizer
from .dependencies import get_synthesizer

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Idea Check"])


@router.post(
    "/challenge-ai",
    response_model=ChallengeResponse,
    summary="Challenge an Analysis",
    response_description="The re-evaluated analysis",
)
async def challenge_ai(
    payload: ChallengeRequest,
    db: Session = Depends(get_db),
    synthesizer: AnalysisSynthesizer = Depends(get_synthesizer),
):
    """Re-run the synthesis with the founder's objection folded into the prompt."""
    logger.info("[CHALLENGE] Processing challenge for %r", payload.idea[:60])
    try:
        analysis = await synthesizer.challenge(
            payload.idea,
            payload.sources,
            payload.user_challenge,
            payload.previous_analysis,
        )
    except Exception as exc:
        logger.exception("[CHALLENGE] Failed to process challenge")
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "message": "Failed to process challenge",
                "detail": str(exc),
            },
        )

    analytics.track_event(
        db,
        analytics.SEARCH_CHALLENGED,
        {"idea": payload.idea, "challenge_length": len(payload.user_challenge)},
        user_id=payload.user_id,
    )
    return ChallengeResponse(analysis=analysis)
