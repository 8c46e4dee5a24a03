"""Database-backed substring search over users and posts."""

from __future__ import annotations

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from afusocial.models import Post, User

_LIKE_ESCAPE = "\\"


def _contains_pattern(query: str) -> str:
    escaped = (
        query.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", f"{_LIKE_ESCAPE}%")
        .replace("_", f"{_LIKE_ESCAPE}_")
    )
    return f"%{escaped}%"


class SearchService:
    """Case-insensitive ``%query%`` matching, capped at ``limit`` rows."""

    def __init__(self, session: Session, *, limit: int = 20):
        self._session = session
        self._limit = limit

    def search_users(self, query: str) -> list[User]:
        """Match users whose username, first or last name contains ``query``."""

        query = query.strip()
        if not query:
            return []

        pattern = _contains_pattern(query)
        stmt = (
            select(User)
            .where(
                or_(
                    User.username.ilike(pattern, escape=_LIKE_ESCAPE),
                    User.first_name.ilike(pattern, escape=_LIKE_ESCAPE),
                    User.last_name.ilike(pattern, escape=_LIKE_ESCAPE),
                )
            )
            .order_by(User.username.asc(), User.id.asc())
            .limit(self._limit)
        )
        return list(self._session.execute(stmt).scalars().all())

    def search_posts(self, query: str) -> list[Post]:
        """Match posts whose content contains ``query``, newest first."""

        query = query.strip()
        if not query:
            return []

        stmt = (
            select(Post)
            .where(Post.content.ilike(_contains_pattern(query), escape=_LIKE_ESCAPE))
            .order_by(Post.created_at.desc(), Post.id.desc())
            .limit(self._limit)
        )
        return list(self._session.execute(stmt).scalars().all())
