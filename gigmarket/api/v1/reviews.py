"""Review endpoints - ratings between employers and students."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from gigmarket.api.deps import get_current_principal, get_review_service
from gigmarket.core.security import Principal
from gigmarket.schemas.job import JobResponse
from gigmarket.schemas.review import (
    ReviewCreate,
    ReviewListResponse,
    ReviewResponse,
    ReviewResponseRequest,
    ReviewStats,
    ReviewUpdate,
)
from gigmarket.services.review_service import ReviewService

router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
def create_review(
    payload: ReviewCreate,
    principal: Principal = Depends(get_current_principal),
    service: ReviewService = Depends(get_review_service),
):
    """Review the other party of a completed job."""
    review = service.create_review(principal, payload.model_dump(exclude_none=True))
    return {"success": True, "review": ReviewResponse.model_validate(review)}


@router.get("/user/{user_id}", response_model=ReviewListResponse)
def user_reviews(
    user_id: str,
    rating: Optional[int] = Query(None, ge=1, le=5),
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(10, ge=1, le=100, description="Items per page"),
    principal: Principal = Depends(get_current_principal),
    service: ReviewService = Depends(get_review_service),
):
    result = service.get_user_reviews(user_id, rating=rating, page=page, limit=limit)
    return ReviewListResponse(
        reviews=[ReviewResponse.model_validate(r) for r in result["reviews"]],
        stats=ReviewStats(**result["stats"]),
        total=result["total"],
        page=result["page"],
        limit=result["limit"],
        pages=result["pages"],
    )


@router.get("/stats/{user_id}", response_model=ReviewStats)
def review_stats(
    user_id: str,
    principal: Principal = Depends(get_current_principal),
    service: ReviewService = Depends(get_review_service),
):
    return ReviewStats(**service.get_stats(user_id))


@router.get("/my-reviews")
def my_reviews(
    kind: str = Query("received", alias="type", description="given or received"),
    principal: Principal = Depends(get_current_principal),
    service: ReviewService = Depends(get_review_service),
):
    reviews = service.get_my_reviews(principal, kind)
    return {"success": True, "reviews": [ReviewResponse.model_validate(r) for r in reviews]}


@router.get("/pending")
def pending_reviews(
    principal: Principal = Depends(get_current_principal),
    service: ReviewService = Depends(get_review_service),
):
    """Finished jobs the caller has not reviewed yet."""
    pending = service.get_pending_reviews(principal)
    return {
        "success": True,
        "pending": [
            {"job": JobResponse.model_validate(item["job"]), "reviewee_ids": item["reviewee_ids"]}
            for item in pending
        ],
    }


@router.put("/{review_id}")
def update_review(
    review_id: str,
    payload: ReviewUpdate,
    principal: Principal = Depends(get_current_principal),
    service: ReviewService = Depends(get_review_service),
):
    review = service.update_review(principal, review_id, payload.model_dump(exclude_unset=True))
    return {"success": True, "review": ReviewResponse.model_validate(review)}


@router.put("/{review_id}/respond")
def respond_to_review(
    review_id: str,
    payload: ReviewResponseRequest,
    principal: Principal = Depends(get_current_principal),
    service: ReviewService = Depends(get_review_service),
):
    review = service.respond_to_review(principal, review_id, payload.comment)
    return {"success": True, "review": ReviewResponse.model_validate(review)}
