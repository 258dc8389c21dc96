"""
API request and response models for DevConnector REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
social/models.py, which own the internal domain representation. Route
handlers map between the two.

Request validation messages are the ones clients already display, e.g.
"Name is required". Each check raises PydanticCustomError so the message
reaches the {"errors": [{"msg": ...}]} envelope verbatim (see the
RequestValidationError handler in api/main.py).
"""

from datetime import date
from typing import Annotated, Any, Optional, Union

from email_validator import EmailNotValidError, validate_email
from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field
from pydantic_core import PydanticCustomError

from auth.models import User
from core.urls import normalize_url
from social.models import Comment, Education, Experience, Like, Post, Profile

SOCIAL_NETWORKS = ("youtube", "twitter", "facebook", "linkedin", "instagram")

# ---------------------------------------------------------------------------
# Field checks
# ---------------------------------------------------------------------------


def _required(message: str) -> AfterValidator:
    """Reject None, blank strings and empty lists with message."""

    def check(value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()) or value == []:
            raise PydanticCustomError("required", message)
        return value

    return AfterValidator(check)


def _blank_to_none(value: Any) -> Any:
    return None if isinstance(value, str) and not value.strip() else value


BlankDate = Annotated[Optional[date], BeforeValidator(_blank_to_none)]


def _email(value: Optional[str]) -> str:
    try:
        return validate_email(value or "", check_deliverability=False).normalized.lower()
    except EmailNotValidError:
        raise PydanticCustomError("email", "Please include a valid email") from None


def _password(value: Optional[str]) -> str:
    if value is None or len(value) < 6:
        raise PydanticCustomError("min_length", "Please enter a password with 6 or more characters")
    # bcrypt only hashes the first 72 bytes.
    if len(value.encode("utf-8")) > 72:
        raise PydanticCustomError("max_length", "Password must be at most 72 bytes")
    return value


def _skills(value: Optional[Union[list[str], str]]) -> list[str]:
    raw = value.split(",") if isinstance(value, str) else (value or [])
    skills = [s.strip() for s in raw if s and s.strip()]
    if not skills:
        raise PydanticCustomError("required", "Skills is required")
    return skills


def _link(value: Optional[str]) -> str:
    """Normalize a profile link to https. Missing or blank becomes ""."""
    if value is None or not value.strip():
        return ""
    try:
        return normalize_url(value, force_https=True)
    except ValueError:
        raise PydanticCustomError("url", "Please include a valid URL") from None


Link = Annotated[Optional[str], AfterValidator(_link)]


# ---------------------------------------------------------------------------
# Request models -- users / auth
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Body for POST /api/users."""

    model_config = ConfigDict(validate_default=True)

    name: Annotated[Optional[str], _required("Name is required")] = None
    email: Annotated[Optional[str], AfterValidator(_email)] = None
    password: Annotated[Optional[str], AfterValidator(_password)] = None


class LoginRequest(BaseModel):
    """Body for POST /api/auth."""

    model_config = ConfigDict(validate_default=True)

    email: Annotated[Optional[str], AfterValidator(_email)] = None
    password: Annotated[Optional[str], _required("Password is required")] = None


# ---------------------------------------------------------------------------
# Request models -- profile
# ---------------------------------------------------------------------------


class ProfileRequest(BaseModel):
    """Body for POST /api/profile.

    skills accepts either a JSON list or a comma-separated string; both are
    turned into a list of trimmed, non-empty strings, and at least one must
    remain. website and the social links arrive normalized to https, with a
    missing or blank link as "".
    """

    model_config = ConfigDict(validate_default=True)

    status: Annotated[Optional[str], _required("Status is required")] = None
    skills: Annotated[Optional[Union[list[str], str]], AfterValidator(_skills)] = None
    company: Optional[str] = None
    website: Link = None
    location: Optional[str] = None
    bio: Optional[str] = None
    githubusername: Optional[str] = None
    youtube: Link = None
    twitter: Link = None
    facebook: Link = None
    linkedin: Link = None
    instagram: Link = None


class ExperienceRequest(BaseModel):
    """Body for PUT /api/profile/experience."""

    model_config = ConfigDict(populate_by_name=True, validate_default=True)

    title: Annotated[Optional[str], _required("Title is required")] = None
    company: Annotated[Optional[str], _required("Company is required")] = None
    from_date: Annotated[BlankDate, Field(alias="from"), _required("From date is required")] = None
    to_date: BlankDate = Field(default=None, alias="to")
    location: Optional[str] = None
    current: bool = False
    description: Optional[str] = None


class EducationRequest(BaseModel):
    """Body for PUT /api/profile/education."""

    model_config = ConfigDict(populate_by_name=True, validate_default=True)

    school: Annotated[Optional[str], _required("School is required")] = None
    degree: Annotated[Optional[str], _required("Degree is required")] = None
    fieldofstudy: Annotated[Optional[str], _required("Field of study is required")] = None
    from_date: Annotated[BlankDate, Field(alias="from"), _required("From date is required")] = None
    to_date: BlankDate = Field(default=None, alias="to")
    current: bool = False
    description: Optional[str] = None


# ---------------------------------------------------------------------------
# Request models -- posts
# ---------------------------------------------------------------------------


class TextRequest(BaseModel):
    """Body for POST /api/post and POST /api/post/comment/{id}."""

    model_config = ConfigDict(validate_default=True)

    text: Annotated[Optional[str], _required("Text is required")] = None


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class TokenResponse(BaseModel):
    token: str


class MessageResponse(BaseModel):
    msg: str


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str
    components: dict[str, str] = Field(default_factory=dict)


class UserResponse(BaseModel):
    """A user record as returned by GET /api/auth. Never carries the hash."""

    id: str
    name: str
    email: str
    avatar: str
    date: str

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(id=user.id, name=user.name, email=user.email, avatar=user.avatar, date=user.date)


class UserSummary(BaseModel):
    """The populated user reference embedded in profile responses."""

    id: str
    name: Optional[str] = None
    avatar: Optional[str] = None


class ExperienceResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    company: str
    location: Optional[str] = None
    from_date: str = Field(serialization_alias="from")
    to_date: Optional[str] = Field(default=None, serialization_alias="to")
    current: bool = False
    description: Optional[str] = None

    @classmethod
    def from_entry(cls, exp: Experience) -> "ExperienceResponse":
        return cls(
            id=exp.id,
            title=exp.title,
            company=exp.company,
            location=exp.location,
            from_date=exp.from_date,
            to_date=exp.to_date,
            current=exp.current,
            description=exp.description,
        )


class EducationResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    school: str
    degree: str
    fieldofstudy: str
    from_date: str = Field(serialization_alias="from")
    to_date: Optional[str] = Field(default=None, serialization_alias="to")
    current: bool = False
    description: Optional[str] = None

    @classmethod
    def from_entry(cls, edu: Education) -> "EducationResponse":
        return cls(
            id=edu.id,
            school=edu.school,
            degree=edu.degree,
            fieldofstudy=edu.fieldofstudy,
            from_date=edu.from_date,
            to_date=edu.to_date,
            current=edu.current,
            description=edu.description,
        )


class ProfileResponse(BaseModel):
    id: str
    user: UserSummary
    status: str
    skills: list[str]
    company: Optional[str] = None
    website: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    githubusername: Optional[str] = None
    social: dict[str, str] = Field(default_factory=dict)
    experience: list[ExperienceResponse] = Field(default_factory=list)
    education: list[EducationResponse] = Field(default_factory=list)
    date: str

    @classmethod
    def from_profile(cls, profile: Profile, owner: Optional[User] = None) -> "ProfileResponse":
        """Build the response, populating user name/avatar when owner is known."""
        return cls(
            id=profile.id,
            user=UserSummary(
                id=profile.user_id,
                name=owner.name if owner else None,
                avatar=owner.avatar if owner else None,
            ),
            status=profile.status,
            skills=profile.skills,
            company=profile.company,
            website=profile.website,
            location=profile.location,
            bio=profile.bio,
            githubusername=profile.githubusername,
            social=profile.social,
            experience=[ExperienceResponse.from_entry(e) for e in profile.experience],
            education=[EducationResponse.from_entry(e) for e in profile.education],
            date=profile.date,
        )


class LikeResponse(BaseModel):
    user: str

    @classmethod
    def from_like(cls, like: Like) -> "LikeResponse":
        return cls(user=like.user)


class CommentResponse(BaseModel):
    id: str
    user: str
    text: str
    name: str
    avatar: str
    date: str

    @classmethod
    def from_comment(cls, comment: Comment) -> "CommentResponse":
        return cls(
            id=comment.id,
            user=comment.user,
            text=comment.text,
            name=comment.name,
            avatar=comment.avatar,
            date=comment.date,
        )


class PostResponse(BaseModel):
    id: str
    user: str
    text: str
    name: str
    avatar: str
    likes: list[LikeResponse] = Field(default_factory=list)
    comments: list[CommentResponse] = Field(default_factory=list)
    date: str

    @classmethod
    def from_post(cls, post: Post) -> "PostResponse":
        return cls(
            id=post.id,
            user=post.user,
            text=post.text,
            name=post.name,
            avatar=post.avatar,
            likes=[LikeResponse.from_like(like) for like in post.likes],
            comments=[CommentResponse.from_comment(c) for c in post.comments],
            date=post.date,
        )
