"""User endpoints - reputation score."""

from fastapi import APIRouter, Depends, Query

from gigmarket.api.deps import get_current_principal, get_score_service
from gigmarket.core.security import Principal
from gigmarket.schemas.wallet import ScoreLogResponse
from gigmarket.services.score_service import ScoreService

router = APIRouter()


@router.get("/me/score")
def my_score(
    limit: int = Query(50, ge=1, le=100, description="Number of history entries"),
    principal: Principal = Depends(get_current_principal),
    service: ScoreService = Depends(get_score_service),
):
    """Current score and the most recent adjustments, newest first."""
    score = service.get_score(principal.id)
    history = service.get_score_history(principal.id, limit=limit)
    return {
        "success": True,
        "score": score,
        "history": [ScoreLogResponse.model_validate(log) for log in history],
    }
