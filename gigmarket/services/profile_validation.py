"""Profile completeness checks consulted before job creation and application."""

import logging
from dataclasses import dataclass, field
from typing import List

from pydantic import ValidationError

from gigmarket.core.exceptions import ProfileIncompleteError
from gigmarket.schemas.profile import parse_user_profile

logger = logging.getLogger(__name__)

FIELD_LABELS = {
    "phone_not_verified": "Phone verification",
    "skills": "Skills",
    "education": "Education details",
    "location": "Location (city, state, country)",
    "businessName": "Business name",
    "businessLocation": "Business location",
    "profile": "Profile details",
}


@dataclass
class ProfileValidation:
    is_complete: bool
    missing_fields: List[str] = field(default_factory=list)


def validate_profile_completion(user) -> ProfileValidation:
    """
    Check whether a user's profile is complete for their role.

    Phone verification is required for every role; the remaining
    requirements come from the role's profile variant.
    """
    missing = []

    if not user.phone or not user.is_phone_verified:
        missing.append("phone_not_verified")

    try:
        profile = parse_user_profile(user.role, user.profile)
        missing.extend(profile.missing_fields())
    except ValidationError as e:
        logger.warning(f"⚠️  Malformed profile for user {user.id}: {e.error_count()} errors")
        missing.append("profile")

    return ProfileValidation(is_complete=not missing, missing_fields=missing)


def get_missing_fields_message(missing_fields: List[str]) -> str:
    """Human readable message for a list of missing field codes."""
    readable = ", ".join(FIELD_LABELS.get(f, f) for f in missing_fields)
    return f"Profile incomplete. Missing fields: {readable}. Please update your profile and try again."


def ensure_profile_complete(user) -> None:
    """Raise ProfileIncompleteError unless the user's profile is complete."""
    result = validate_profile_completion(user)
    if not result.is_complete:
        raise ProfileIncompleteError(
            result.missing_fields,
            message=get_missing_fields_message(result.missing_fields),
        )
