"""
api/routes/posts.py -- Posts, likes and comments.

Routes (in registration order to avoid FastAPI path capture conflicts):
  POST   /post                              -- create a post
  GET    /post                              -- all posts, newest first
  GET    /post/{post_id}                    -- one post
  DELETE /post/{post_id}                    -- delete (post owner only)
  PUT    /post/like/{post_id}               -- like; rejected if already liked
  PUT    /post/unlike/{post_id}             -- unlike; rejected if not liked
  POST   /post/comment/{post_id}            -- add a comment
  DELETE /post/comment/{post_id}/{comment_id} -- delete (comment author only)

The author name/avatar on posts and comments is a snapshot taken from the
User at creation time and never refreshed afterwards.

Likes and comments are prepended. Every change to them goes through
SocialStore.save_post_entries(), which rejects the write with 409 if a
concurrent request changed the post first.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request

from api.models import CommentResponse, LikeResponse, MessageResponse, PostResponse, TextRequest
from auth.dependencies import get_current_user
from auth.guards import require_object_id, require_owner
from auth.models import Identity, User
from auth.store import UserStore
from core.errors import InvalidInput, NotFound
from core.ids import new_object_id
from social.models import Comment, Like, Post
from social.store import SocialStore

# Every post route requires authentication.
router = APIRouter(dependencies=[Depends(get_current_user)])


def _author(request: Request, identity: Identity) -> User:
    user_store: UserStore = request.app.state.user_store
    user = user_store.get_by_id(identity.id)
    if user is None:
        raise NotFound("User not found")
    return user


def _load_post(request: Request, post_id: str) -> Post:
    require_object_id(post_id)
    social: SocialStore = request.app.state.social
    post = social.get_post(post_id)
    if post is None:
        raise NotFound("Post not found")
    return post


# ---------------------------------------------------------------------------
# Posts
# ---------------------------------------------------------------------------


@router.post("/post", response_model=PostResponse)
def create_post(
    request: Request,
    body: TextRequest,
    identity: Identity = Depends(get_current_user),
) -> PostResponse:
    social: SocialStore = request.app.state.social
    author = _author(request, identity)
    post_id = social.create_post(Post(user=author.id, text=body.text, name=author.name, avatar=author.avatar))
    return PostResponse.from_post(social.get_post(post_id))


@router.get("/post", response_model=list[PostResponse])
def list_posts(request: Request) -> list[PostResponse]:
    social: SocialStore = request.app.state.social
    return [PostResponse.from_post(p) for p in social.list_posts()]


@router.get("/post/{post_id}", response_model=PostResponse)
def get_post(request: Request, post_id: str) -> PostResponse:
    return PostResponse.from_post(_load_post(request, post_id))


@router.delete("/post/{post_id}", response_model=MessageResponse)
def delete_post(
    request: Request,
    post_id: str,
    identity: Identity = Depends(get_current_user),
) -> MessageResponse:
    social: SocialStore = request.app.state.social
    post = _load_post(request, post_id)
    require_owner(post.user, identity)
    social.delete_post(post.id)
    return MessageResponse(msg="Post removed")


# ---------------------------------------------------------------------------
# Likes
# ---------------------------------------------------------------------------


@router.put("/post/like/{post_id}", response_model=list[LikeResponse])
def like_post(
    request: Request,
    post_id: str,
    identity: Identity = Depends(get_current_user),
) -> list[LikeResponse]:
    social: SocialStore = request.app.state.social
    post = _load_post(request, post_id)
    if any(like.user == identity.id for like in post.likes):
        raise InvalidInput("Post already liked")
    post.likes.insert(0, Like(user=identity.id))
    social.save_post_entries(post)
    return [LikeResponse.from_like(like) for like in post.likes]


@router.put("/post/unlike/{post_id}", response_model=list[LikeResponse])
def unlike_post(
    request: Request,
    post_id: str,
    identity: Identity = Depends(get_current_user),
) -> list[LikeResponse]:
    social: SocialStore = request.app.state.social
    post = _load_post(request, post_id)
    if not any(like.user == identity.id for like in post.likes):
        raise InvalidInput("Post has not yet been liked")
    post.likes = [like for like in post.likes if like.user != identity.id]
    social.save_post_entries(post)
    return [LikeResponse.from_like(like) for like in post.likes]


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------


@router.post("/post/comment/{post_id}", response_model=list[CommentResponse])
def add_comment(
    request: Request,
    post_id: str,
    body: TextRequest,
    identity: Identity = Depends(get_current_user),
) -> list[CommentResponse]:
    social: SocialStore = request.app.state.social
    post = _load_post(request, post_id)
    author = _author(request, identity)
    comment = Comment(
        id=new_object_id(),
        user=author.id,
        text=body.text,
        name=author.name,
        avatar=author.avatar,
        date=datetime.now(timezone.utc).isoformat(),
    )
    post.comments.insert(0, comment)
    social.save_post_entries(post)
    return [CommentResponse.from_comment(c) for c in post.comments]


@router.delete("/post/comment/{post_id}/{comment_id}", response_model=list[CommentResponse])
def delete_comment(
    request: Request,
    post_id: str,
    comment_id: str,
    identity: Identity = Depends(get_current_user),
) -> list[CommentResponse]:
    """Remove one comment. Only its author may do so; the post owner has no override."""
    social: SocialStore = request.app.state.social
    post = _load_post(request, post_id)
    comment = next((c for c in post.comments if c.id == comment_id), None)
    if comment is None:
        raise NotFound("Comment does not exist")
    require_owner(comment.user, identity)
    post.comments = [c for c in post.comments if c.id != comment_id]
    social.save_post_entries(post)
    return [CommentResponse.from_comment(c) for c in post.comments]
