"""Role-shaped user profile schemas."""

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


def _blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


class Education(BaseModel):
    model_config = ConfigDict(extra="ignore")

    institution: Optional[str] = None
    degree: Optional[str] = None
    year: Optional[int] = None


class StudentLocation(BaseModel):
    model_config = ConfigDict(extra="ignore")

    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None


class BusinessAddress(BaseModel):
    model_config = ConfigDict(extra="ignore")

    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None


class StudentProfile(BaseModel):
    """Student profile: skills, education and home location are required."""

    model_config = ConfigDict(extra="ignore")

    role: Literal["student"] = "student"
    skills: List[str] = Field(default_factory=list)
    education: Optional[Education] = None
    location: Optional[StudentLocation] = None

    def missing_fields(self) -> List[str]:
        missing = []
        if not self.skills:
            missing.append("skills")
        if not self.education or _blank(self.education.institution) or _blank(self.education.degree):
            missing.append("education")
        if (
            not self.location
            or _blank(self.location.city)
            or _blank(self.location.state)
            or _blank(self.location.country)
        ):
            missing.append("location")
        return missing


class EmployerProfile(BaseModel):
    """Employer profile: business name and business city are required."""

    model_config = ConfigDict(extra="ignore")

    role: Literal["employer"] = "employer"
    business_name: Optional[str] = None
    business_type: Optional[str] = None
    business_address: Optional[BusinessAddress] = None

    def missing_fields(self) -> List[str]:
        missing = []
        if _blank(self.business_name):
            missing.append("businessName")
        if not self.business_address or _blank(self.business_address.city):
            missing.append("businessLocation")
        return missing


class AdminProfile(BaseModel):
    model_config = ConfigDict(extra="ignore")

    role: Literal["admin"] = "admin"

    def missing_fields(self) -> List[str]:
        return []


UserProfile = Annotated[
    Union[StudentProfile, EmployerProfile, AdminProfile],
    Field(discriminator="role"),
]

user_profile_adapter = TypeAdapter(UserProfile)


def parse_user_profile(role: str, profile: Optional[dict]) -> Union[StudentProfile, EmployerProfile, AdminProfile]:
    """Build the tagged profile variant for a user role."""
    data = dict(profile or {})
    data["role"] = role
    return user_profile_adapter.validate_python(data)
