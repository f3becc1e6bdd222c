"""Tests for profile completeness checks and the URL evaluator."""

from types import SimpleNamespace

import pytest

from gigmarket.core.exceptions import ProfileIncompleteError
from gigmarket.schemas.profile import EmployerProfile, StudentProfile, parse_user_profile
from gigmarket.services.profile_evaluator import evaluate_profile_url
from gigmarket.services.profile_validation import (
    ensure_profile_complete,
    get_missing_fields_message,
    validate_profile_completion,
)
from gigmarket.utils.constants import ROLE_ADMIN, ROLE_EMPLOYER, ROLE_STUDENT
from tests.conftest import EMPLOYER_PROFILE, STUDENT_PROFILE


def user(role, profile, phone="+919876543210", verified=True):
    return SimpleNamespace(id="u1", role=role, profile=profile, phone=phone, is_phone_verified=verified)


class TestProfileVariants:
    def test_role_selects_variant(self):
        assert isinstance(parse_user_profile(ROLE_STUDENT, STUDENT_PROFILE), StudentProfile)
        assert isinstance(parse_user_profile(ROLE_EMPLOYER, EMPLOYER_PROFILE), EmployerProfile)

    def test_unknown_keys_ignored(self):
        profile = parse_user_profile(ROLE_EMPLOYER, {**EMPLOYER_PROFILE, "favourite_colour": "blue"})
        assert profile.business_name == "Chai Point"


class TestCompleteness:
    def test_complete_student(self):
        result = validate_profile_completion(user(ROLE_STUDENT, STUDENT_PROFILE))
        assert result.is_complete
        assert result.missing_fields == []

    def test_student_missing_everything(self):
        result = validate_profile_completion(user(ROLE_STUDENT, {}, verified=False))
        assert result.missing_fields == ["phone_not_verified", "skills", "education", "location"]

    def test_blank_location_parts_count_as_missing(self):
        profile = {**STUDENT_PROFILE, "location": {"city": "Pune", "state": " ", "country": "India"}}
        assert validate_profile_completion(user(ROLE_STUDENT, profile)).missing_fields == ["location"]

    def test_employer_requires_business_city(self):
        profile = {"business_name": "Chai Point", "business_address": {"street": "FC Road"}}
        assert validate_profile_completion(user(ROLE_EMPLOYER, profile)).missing_fields == ["businessLocation"]

    def test_admin_only_needs_phone(self):
        assert validate_profile_completion(user(ROLE_ADMIN, None)).is_complete
        assert validate_profile_completion(user(ROLE_ADMIN, None, phone=None)).missing_fields == [
            "phone_not_verified"
        ]

    def test_malformed_profile(self):
        result = validate_profile_completion(user(ROLE_STUDENT, {"skills": "python"}))
        assert "profile" in result.missing_fields

    def test_message_uses_labels(self):
        message = get_missing_fields_message(["skills", "businessName"])
        assert message == (
            "Profile incomplete. Missing fields: Skills, Business name. "
            "Please update your profile and try again."
        )

    def test_ensure_raises_with_missing_fields(self):
        with pytest.raises(ProfileIncompleteError) as exc_info:
            ensure_profile_complete(user(ROLE_EMPLOYER, {}))

        body = exc_info.value.to_dict()
        assert body["kind"] == "validation"
        assert body["missing_fields"] == ["businessName", "businessLocation"]


class TestUrlEvaluator:
    @pytest.mark.parametrize(
        "url, score, diagnostics",
        [
            ("https://www.linkedin.com/in/priya-patel-dev", 50, ["LinkedIn URL", "Detailed path"]),
            ("https://github.com/dev1", 25, ["GitHub URL"]),
            ("https://www.behance.net/priya", 30, ["Creative portfolio"]),
            ("https://example.com/?ref=x", 5, ["Has activity params"]),
            ("not a url", 0, ["Invalid URL"]),
            ("", 0, ["No URL"]),
        ],
    )
    def test_scores(self, url, score, diagnostics):
        result = evaluate_profile_url(url)
        assert result["score"] == score
        assert result["diagnostics"] == diagnostics

    def test_score_is_capped(self):
        url = "https://linkedin.com.github.com.portfolio.example/very/long/profile/path?tab=activity"
        assert evaluate_profile_url(url)["score"] == 100
