"""
social/store.py -- SQLAlchemy-backed document store for profiles and posts.

Uses SQLAlchemy Core (not ORM) so the dataclasses in social/models.py remain
the authoritative domain representation. Each profile or post is one row;
its embedded ordered collections (skills, social links, experience,
education, likes, comments) are serialized as JSON in text columns, so a
document is read and written as a unit.

Concurrency: every embedded-collection write is a compare-and-swap on the
row's version column. A handler loads a document, mutates its lists, and
calls save_*_entries(); if another request wrote the same document in
between, the UPDATE matches no row and Conflict is raised instead of one
writer silently erasing the other's entry. There are no retries.

Pattern: Repository + Data Mapper. SocialStore is the repository; the
_row_to_* and _*_to_doc functions are the mappers.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = SocialStore("sqlite:///devconnector.db")
    profile = store.upsert_profile(user_id, {"status": "Developer", "skills": ["python"]})
    post_id = store.create_post(Post(user=user_id, text="hi", name="Ada", avatar=""))
    store.close()
"""

import json
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine, event, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from core.errors import Conflict
from core.ids import new_object_id
from social.models import Comment, Education, Experience, Like, Post, Profile

# Scalar profile fields a create/update request may set.
PROFILE_FIELDS = ("status", "company", "website", "location", "bio", "githubusername", "skills", "social")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_profiles = Table(
    "profiles",
    metadata,
    Column("id", String(24), primary_key=True),
    Column("user_id", String(24), nullable=False, unique=True),
    Column("status", String(255), nullable=False),
    Column("company", String(255)),
    Column("website", Text),
    Column("location", String(255)),
    Column("bio", Text),
    Column("githubusername", String(255)),
    Column("skills", Text, nullable=False, server_default="[]"),  # JSON array
    Column("social", Text, nullable=False, server_default="{}"),  # JSON object
    Column("experience", Text, nullable=False, server_default="[]"),  # JSON array
    Column("education", Text, nullable=False, server_default="[]"),  # JSON array
    Column("date", String(32), nullable=False),
    Column("version", Integer, nullable=False, server_default="0"),
)

_posts = Table(
    "posts",
    metadata,
    Column("id", String(24), primary_key=True),
    Column("user_id", String(24), nullable=False, index=True),
    Column("text", Text, nullable=False),
    Column("name", String(255), nullable=False),
    Column("avatar", Text, nullable=False, server_default=""),
    Column("likes", Text, nullable=False, server_default="[]"),  # JSON array
    Column("comments", Text, nullable=False, server_default="[]"),  # JSON array
    Column("date", String(32), nullable=False),
    Column("version", Integer, nullable=False, server_default="0"),
)


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode. Set per-connection; PRAGMAs are not inherited."""
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class SocialStore:
    """Repository for Profile and Post documents."""

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite") and ":memory:" not in db_url and "mode=memory" not in db_url:
            event.listen(self.engine, "connect", _set_wal_mode)
        metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Profiles
    # ------------------------------------------------------------------

    def upsert_profile(self, user_id: str, fields: dict[str, Any]) -> Profile:
        """Create the user's profile if absent, else overwrite the given fields.

        Only keys in PROFILE_FIELDS are written; experience and education are
        never touched here. The UNIQUE index on user_id guarantees at most one
        profile per user even when two first-time upserts race: the loser of
        the INSERT falls through to the UPDATE path.
        """
        unknown = set(fields) - set(PROFILE_FIELDS)
        if unknown:
            raise ValueError(f"Unknown profile fields: {sorted(unknown)!r}")
        values = _profile_values(fields)

        with self.engine.connect() as conn:
            exists = conn.execute(select(_profiles.c.id).where(_profiles.c.user_id == user_id)).fetchone()
            inserted = False
            if exists is None:
                try:
                    conn.execute(
                        _profiles.insert().values(
                            id=new_object_id(),
                            user_id=user_id,
                            date=_now_iso(),
                            version=0,
                            **values,
                        )
                    )
                    conn.commit()
                    inserted = True
                except IntegrityError:
                    conn.rollback()
            if not inserted:
                conn.execute(
                    _profiles.update()
                    .where(_profiles.c.user_id == user_id)
                    .values(version=_profiles.c.version + 1, **values)
                )
                conn.commit()

        profile = self.get_profile_by_user(user_id)
        if profile is None:
            raise RuntimeError(f"Profile for user {user_id} missing after upsert")
        return profile

    def get_profile_by_user(self, user_id: str) -> Optional[Profile]:
        with self.engine.connect() as conn:
            row = conn.execute(_profiles.select().where(_profiles.c.user_id == user_id)).fetchone()
        return _row_to_profile(row) if row is not None else None

    def list_profiles(self) -> list[Profile]:
        """Return every profile, oldest first."""
        with self.engine.connect() as conn:
            rows = conn.execute(_profiles.select().order_by(_profiles.c.date)).fetchall()
        return [_row_to_profile(r) for r in rows]

    def delete_profile_by_user(self, user_id: str) -> bool:
        with self.engine.connect() as conn:
            result = conn.execute(_profiles.delete().where(_profiles.c.user_id == user_id))
            conn.commit()
        return result.rowcount > 0

    def save_profile_entries(self, profile: Profile) -> Profile:
        """Persist profile.experience and profile.education (compare-and-swap).

        Raises Conflict if the profile was written since it was loaded.
        On success profile.version is advanced in place and profile is returned.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _profiles.update()
                .where((_profiles.c.id == profile.id) & (_profiles.c.version == profile.version))
                .values(
                    experience=json.dumps([_experience_to_doc(e) for e in profile.experience]),
                    education=json.dumps([_education_to_doc(e) for e in profile.education]),
                    version=profile.version + 1,
                )
            )
            conn.commit()
        if result.rowcount == 0:
            raise Conflict("Profile was modified by another request, please retry")
        profile.version += 1
        return profile

    # ------------------------------------------------------------------
    # Posts
    # ------------------------------------------------------------------

    def create_post(self, post: Post) -> str:
        """Insert a new post and return its id. The creation date is set here."""
        post_id = new_object_id()
        with self.engine.connect() as conn:
            conn.execute(
                _posts.insert().values(
                    id=post_id,
                    user_id=post.user,
                    text=post.text,
                    name=post.name,
                    avatar=post.avatar,
                    likes=json.dumps([asdict(like) for like in post.likes]),
                    comments=json.dumps([asdict(c) for c in post.comments]),
                    date=_now_iso(),
                    version=0,
                )
            )
            conn.commit()
        return post_id

    def get_post(self, post_id: str) -> Optional[Post]:
        with self.engine.connect() as conn:
            row = conn.execute(_posts.select().where(_posts.c.id == post_id)).fetchone()
        return _row_to_post(row) if row is not None else None

    def list_posts(self) -> list[Post]:
        """Return every post, newest first."""
        with self.engine.connect() as conn:
            rows = conn.execute(_posts.select().order_by(_posts.c.date.desc(), _posts.c.id.desc())).fetchall()
        return [_row_to_post(r) for r in rows]

    def delete_post(self, post_id: str) -> bool:
        with self.engine.connect() as conn:
            result = conn.execute(_posts.delete().where(_posts.c.id == post_id))
            conn.commit()
        return result.rowcount > 0

    def save_post_entries(self, post: Post) -> Post:
        """Persist post.likes and post.comments (compare-and-swap).

        Raises Conflict if the post was written since it was loaded.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _posts.update()
                .where((_posts.c.id == post.id) & (_posts.c.version == post.version))
                .values(
                    likes=json.dumps([asdict(like) for like in post.likes]),
                    comments=json.dumps([asdict(c) for c in post.comments]),
                    version=post.version + 1,
                )
            )
            conn.commit()
        if result.rowcount == 0:
            raise Conflict("Post was modified by another request, please retry")
        post.version += 1
        return post

    def ping(self) -> bool:
        with self.engine.connect() as conn:
            conn.execute(select(_posts.c.id).limit(1))
        return True

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _profile_values(fields: dict[str, Any]) -> dict[str, Any]:
    values = dict(fields)
    if "skills" in values:
        values["skills"] = json.dumps(list(values["skills"] or []))
    if "social" in values:
        values["social"] = json.dumps(dict(values["social"] or {}))
    return values


def _experience_to_doc(exp: Experience) -> dict:
    return {
        "id": exp.id,
        "title": exp.title,
        "company": exp.company,
        "location": exp.location,
        "from": exp.from_date,
        "to": exp.to_date,
        "current": exp.current,
        "description": exp.description,
    }


def _doc_to_experience(doc: dict) -> Experience:
    return Experience(
        id=doc["id"],
        title=doc["title"],
        company=doc["company"],
        location=doc.get("location"),
        from_date=doc["from"],
        to_date=doc.get("to"),
        current=bool(doc.get("current", False)),
        description=doc.get("description"),
    )


def _education_to_doc(edu: Education) -> dict:
    return {
        "id": edu.id,
        "school": edu.school,
        "degree": edu.degree,
        "fieldofstudy": edu.fieldofstudy,
        "from": edu.from_date,
        "to": edu.to_date,
        "current": edu.current,
        "description": edu.description,
    }


def _doc_to_education(doc: dict) -> Education:
    return Education(
        id=doc["id"],
        school=doc["school"],
        degree=doc["degree"],
        fieldofstudy=doc["fieldofstudy"],
        from_date=doc["from"],
        to_date=doc.get("to"),
        current=bool(doc.get("current", False)),
        description=doc.get("description"),
    )


def _row_to_profile(row) -> Profile:
    return Profile(
        id=row.id,
        user_id=row.user_id,
        status=row.status,
        company=row.company,
        website=row.website,
        location=row.location,
        bio=row.bio,
        githubusername=row.githubusername,
        skills=json.loads(row.skills or "[]"),
        social=json.loads(row.social or "{}"),
        experience=[_doc_to_experience(d) for d in json.loads(row.experience or "[]")],
        education=[_doc_to_education(d) for d in json.loads(row.education or "[]")],
        date=row.date,
        version=row.version,
    )


def _row_to_post(row) -> Post:
    return Post(
        id=row.id,
        user=row.user_id,
        text=row.text,
        name=row.name,
        avatar=row.avatar or "",
        likes=[Like(**d) for d in json.loads(row.likes or "[]")],
        comments=[Comment(**d) for d in json.loads(row.comments or "[]")],
        date=row.date,
        version=row.version,
    )
