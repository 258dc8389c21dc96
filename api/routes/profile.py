"""
api/routes/profile.py -- Developer profiles and their embedded entries.

Routes (in registration order to avoid FastAPI path capture conflicts):
  GET    /profile/me                      -- caller's profile (auth)
  POST   /profile                         -- create or update caller's profile (auth)
  GET    /profile                         -- all profiles (public)
  GET    /profile/user/{user_id}          -- profile by user id (public)
  DELETE /profile                         -- delete caller's profile and account (auth)
  PUT    /profile/experience              -- prepend an experience entry (auth)
  DELETE /profile/experience/{exp_id}     -- remove one experience entry (auth)
  PUT    /profile/education               -- prepend an education entry (auth)
  DELETE /profile/education/{edu_id}      -- remove one education entry (auth)
  GET    /profile/github/{username}       -- proxy the user's GitHub repos (public)

Ownership: every mutating route loads the profile keyed by the caller's own
id, so a caller can only ever touch its own experience/education entries.

Account deletion removes the profile and then the user. Posts written by the
user stay in place.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request

from api.models import (
    SOCIAL_NETWORKS,
    EducationRequest,
    ExperienceRequest,
    MessageResponse,
    ProfileRequest,
    ProfileResponse,
)
from auth.dependencies import get_current_user
from auth.guards import require_object_id
from auth.models import Identity
from auth.store import UserStore
from core.errors import NotFound
from core.github import GitHubClient
from core.ids import new_object_id
from social.models import Education, Experience, Profile
from social.store import SocialStore

logger = logging.getLogger("devconnector.api.profile")

router = APIRouter()


def _populated(request: Request, profile: Profile) -> ProfileResponse:
    user_store: UserStore = request.app.state.user_store
    return ProfileResponse.from_profile(profile, user_store.get_by_id(profile.user_id))


def _own_profile(request: Request, identity: Identity) -> Profile:
    social: SocialStore = request.app.state.social
    profile = social.get_profile_by_user(identity.id)
    if profile is None:
        raise NotFound("There is no profile for this user")
    return profile


def _profile_fields(body: ProfileRequest) -> dict[str, Any]:
    """Map a validated request onto the stored profile fields.

    website and social are always written (missing website becomes "");
    company, location, bio and githubusername only when the caller sent them.
    Links are already normalized by ProfileRequest.
    """
    fields: dict[str, Any] = {
        "status": body.status.strip(),
        "skills": body.skills,
        "website": body.website,
    }
    for name in ("company", "location", "bio", "githubusername"):
        if name in body.model_fields_set:
            fields[name] = getattr(body, name)

    fields["social"] = {network: getattr(body, network) for network in SOCIAL_NETWORKS if getattr(body, network)}
    return fields


# ---------------------------------------------------------------------------
# GET /profile/me
# ---------------------------------------------------------------------------


@router.get("/profile/me", response_model=ProfileResponse)
def get_my_profile(request: Request, identity: Identity = Depends(get_current_user)) -> ProfileResponse:
    return _populated(request, _own_profile(request, identity))


# ---------------------------------------------------------------------------
# POST /profile -- upsert keyed by the caller's id
# ---------------------------------------------------------------------------


@router.post("/profile", response_model=ProfileResponse)
def upsert_profile(
    request: Request,
    body: ProfileRequest,
    identity: Identity = Depends(get_current_user),
) -> ProfileResponse:
    """Create the caller's profile, or overwrite its fields if it exists.

    Experience and education entries survive an update untouched.
    """
    social: SocialStore = request.app.state.social
    profile = social.upsert_profile(identity.id, _profile_fields(body))
    return _populated(request, profile)


# ---------------------------------------------------------------------------
# GET /profile, GET /profile/user/{user_id} -- public reads
# ---------------------------------------------------------------------------


@router.get("/profile", response_model=list[ProfileResponse])
def list_profiles(request: Request) -> list[ProfileResponse]:
    social: SocialStore = request.app.state.social
    user_store: UserStore = request.app.state.user_store
    profiles = social.list_profiles()
    owners = user_store.get_many([p.user_id for p in profiles])
    return [ProfileResponse.from_profile(p, owners.get(p.user_id)) for p in profiles]


@router.get("/profile/user/{user_id}", response_model=ProfileResponse)
def get_profile_by_user(request: Request, user_id: str) -> ProfileResponse:
    require_object_id(user_id)
    social: SocialStore = request.app.state.social
    profile = social.get_profile_by_user(user_id)
    if profile is None:
        raise NotFound("Profile not found")
    return _populated(request, profile)


# ---------------------------------------------------------------------------
# DELETE /profile -- remove profile, then user
# ---------------------------------------------------------------------------


@router.delete("/profile", response_model=MessageResponse)
def delete_account(request: Request, identity: Identity = Depends(get_current_user)) -> MessageResponse:
    """Delete the caller's profile and user record.

    Not atomic: if the user delete fails after the profile delete, the
    profile is gone and the account remains.
    """
    social: SocialStore = request.app.state.social
    user_store: UserStore = request.app.state.user_store
    social.delete_profile_by_user(identity.id)
    user_store.delete_user(identity.id)
    logger.info("Deleted account %s", identity.id)
    return MessageResponse(msg="User deleted")


# ---------------------------------------------------------------------------
# Experience
# ---------------------------------------------------------------------------


@router.put("/profile/experience", response_model=ProfileResponse)
def add_experience(
    request: Request,
    body: ExperienceRequest,
    identity: Identity = Depends(get_current_user),
) -> ProfileResponse:
    social: SocialStore = request.app.state.social
    profile = _own_profile(request, identity)
    entry = Experience(
        id=new_object_id(),
        title=body.title.strip(),
        company=body.company.strip(),
        location=body.location,
        from_date=body.from_date.isoformat(),
        to_date=body.to_date.isoformat() if body.to_date else None,
        current=body.current,
        description=body.description,
    )
    profile.experience.insert(0, entry)
    social.save_profile_entries(profile)
    return _populated(request, profile)


@router.delete("/profile/experience/{exp_id}", response_model=ProfileResponse)
def delete_experience(
    request: Request,
    exp_id: str,
    identity: Identity = Depends(get_current_user),
) -> ProfileResponse:
    social: SocialStore = request.app.state.social
    profile = _own_profile(request, identity)
    remaining = [e for e in profile.experience if e.id != exp_id]
    if len(remaining) == len(profile.experience):
        raise NotFound("Experience not found")
    profile.experience = remaining
    social.save_profile_entries(profile)
    return _populated(request, profile)


# ---------------------------------------------------------------------------
# Education
# ---------------------------------------------------------------------------


@router.put("/profile/education", response_model=ProfileResponse)
def add_education(
    request: Request,
    body: EducationRequest,
    identity: Identity = Depends(get_current_user),
) -> ProfileResponse:
    social: SocialStore = request.app.state.social
    profile = _own_profile(request, identity)
    entry = Education(
        id=new_object_id(),
        school=body.school.strip(),
        degree=body.degree.strip(),
        fieldofstudy=body.fieldofstudy.strip(),
        from_date=body.from_date.isoformat(),
        to_date=body.to_date.isoformat() if body.to_date else None,
        current=body.current,
        description=body.description,
    )
    profile.education.insert(0, entry)
    social.save_profile_entries(profile)
    return _populated(request, profile)


@router.delete("/profile/education/{edu_id}", response_model=ProfileResponse)
def delete_education(
    request: Request,
    edu_id: str,
    identity: Identity = Depends(get_current_user),
) -> ProfileResponse:
    social: SocialStore = request.app.state.social
    profile = _own_profile(request, identity)
    remaining = [e for e in profile.education if e.id != edu_id]
    if len(remaining) == len(profile.education):
        raise NotFound("Education not found")
    profile.education = remaining
    social.save_profile_entries(profile)
    return _populated(request, profile)


# ---------------------------------------------------------------------------
# GET /profile/github/{username}
# ---------------------------------------------------------------------------


@router.get("/profile/github/{username}")
def github_repos(request: Request, username: str) -> Any:
    """Pass GitHub's repository listing through unmodified.

    An unknown GitHub user is a 404; any other upstream failure propagates
    and becomes a 500.
    """
    github: GitHubClient = request.app.state.github
    return github.list_repos(username)
