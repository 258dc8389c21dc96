"""
social/models.py -- Domain dataclasses for profiles and posts.

These are pure data containers with zero logic. Persistence lives in
social/store.py; request handling and ownership checks live in api/routes.

Embedded collections (experience, education, likes, comments) are ordered
most-recent-first: new entries are prepended.

Author fields on Post and Comment (name, avatar) are a snapshot copied once
at creation time. Later changes to the User are never propagated.

version is the optimistic-concurrency counter the store compares on every
write of an embedded collection.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class Experience:
    title: str
    company: str
    from_date: str  # ISO 8601 date
    id: str = ""
    location: Optional[str] = None
    to_date: Optional[str] = None
    current: bool = False
    description: Optional[str] = None


@dataclass
class Education:
    school: str
    degree: str
    fieldofstudy: str
    from_date: str  # ISO 8601 date
    id: str = ""
    to_date: Optional[str] = None
    current: bool = False
    description: Optional[str] = None


@dataclass
class Profile:
    """One per User, keyed by user_id.

    website and the values in social are already normalized URLs.
    """

    user_id: str
    status: str
    skills: list[str] = field(default_factory=list)
    id: Optional[str] = None
    company: Optional[str] = None
    website: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    githubusername: Optional[str] = None
    social: dict[str, str] = field(default_factory=dict)
    experience: list[Experience] = field(default_factory=list)
    education: list[Education] = field(default_factory=list)
    date: str = ""
    version: int = 0


@dataclass
class Like:
    user: str  # liking user's id, unique within a post


@dataclass
class Comment:
    user: str
    text: str
    name: str
    avatar: str
    id: str = ""
    date: str = ""


@dataclass
class Post:
    user: str  # owner id
    text: str
    name: str
    avatar: str
    id: Optional[str] = None
    likes: list[Like] = field(default_factory=list)
    comments: list[Comment] = field(default_factory=list)
    date: str = ""
    version: int = 0
