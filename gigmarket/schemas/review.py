"""Review schemas."""

from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from gigmarket.utils.constants import REVIEW_ASPECTS


class AspectRatings(BaseModel):
    communication: Optional[int] = Field(None, ge=1, le=5)
    quality: Optional[int] = Field(None, ge=1, le=5)
    timeliness: Optional[int] = Field(None, ge=1, le=5)
    professionalism: Optional[int] = Field(None, ge=1, le=5)


class ReviewCreate(BaseModel):
    job_id: UUID
    reviewee_id: Optional[UUID] = None
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=500)
    aspect_ratings: Optional[AspectRatings] = None


class ReviewUpdate(BaseModel):
    rating: Optional[int] = Field(None, ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=500)
    aspect_ratings: Optional[AspectRatings] = None


class ReviewResponseRequest(BaseModel):
    comment: str = Field(..., min_length=1, max_length=300)


class ReviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    job_id: UUID
    reviewer_id: UUID
    reviewee_id: UUID
    reviewer_role: str
    rating: int
    comment: Optional[str] = None
    aspect_ratings: Dict[str, int] = Field(default_factory=dict)
    response_comment: Optional[str] = None
    responded_at: Optional[datetime] = None
    is_edited: bool = False
    edited_at: Optional[datetime] = None
    created_at: datetime

    @field_validator("aspect_ratings", mode="before")
    @classmethod
    def known_aspects(cls, v):
        return {k: val for k, val in (v or {}).items() if k in REVIEW_ASPECTS and val is not None}


class ReviewStats(BaseModel):
    average_rating: float
    total_reviews: int
    average_aspect_ratings: Dict[str, float]
    distribution: Dict[int, int]


class ReviewListResponse(BaseModel):
    reviews: List[ReviewResponse]
    stats: ReviewStats
    total: int
    page: int
    limit: int
    pages: int
