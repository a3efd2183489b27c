"""
Request/response schemas for the User and Post resources.

User and Post output schemas reference each other (a user's posts, a post's
author); the forward references are resolved here, once both modules exist.
"""

from . import base, post, user
from .post import (
    PostCreate,
    PostInclude,
    PostOrderBy,
    PostOut,
    PostSelect,
    PostUpdate,
    PostWhere,
    PostWithAuthorOut,
)
from .user import (
    UserCreate,
    UserInclude,
    UserOrderBy,
    UserOut,
    UserSelect,
    UserUpdate,
    UserWhere,
    UserWithPostsOut,
)

UserWithPostsOut.model_rebuild(_types_namespace={"PostWithAuthorOut": PostWithAuthorOut})
PostWithAuthorOut.model_rebuild(force=True)

__all__ = [
    "base",
    "post",
    "user",
    "PostCreate",
    "PostInclude",
    "PostOrderBy",
    "PostOut",
    "PostSelect",
    "PostUpdate",
    "PostWhere",
    "PostWithAuthorOut",
    "UserCreate",
    "UserInclude",
    "UserOrderBy",
    "UserOut",
    "UserSelect",
    "UserUpdate",
    "UserWhere",
    "UserWithPostsOut",
]
