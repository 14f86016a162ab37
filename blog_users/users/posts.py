"""
Read-only view of the ``blogs`` collection.

Posts are written by the blog subsystem; this module only lists them for
profile, author and dashboard pages.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Mapping, Optional

from pymongo import DESCENDING
from pymongo.errors import PyMongoError

from blog_users.auth.models import to_object_id
from blog_users.errors import NotFoundError, StoreError
from blog_users.extensions import mongo

POSTS = 'blogs'
PUBLIC = 'Public'


@dataclass(frozen=True)
class Post:
    id: str
    title: str
    author_id: str
    status: str
    created_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, document: Mapping) -> 'Post':
        return cls(
            id=str(document['_id']),
            title=document.get('title', ''),
            author_id=str(document.get('author', '')),
            status=document.get('status', ''),
            created_at=document.get('createdAt'),
        )

    @property
    def is_public(self) -> bool:
        return self.status == PUBLIC


def _find(query: dict, public_only: bool) -> List[Post]:
    if public_only:
        query = dict(query, status=PUBLIC)
    try:
        documents = list(mongo.db[POSTS].find(query).sort('createdAt', DESCENDING))
    except PyMongoError as exc:
        raise StoreError() from exc
    return [Post.from_document(d) for d in documents]


def posts_by_author(author_id: str, public_only: bool = True) -> List[Post]:
    """Newest first. Non-public posts only when ``public_only`` is False."""
    return _find({'author': to_object_id(author_id)}, public_only)


def posts_by_ids(post_ids: Iterable[str], public_only: bool = True) -> List[Post]:
    object_ids = []
    for post_id in post_ids:
        try:
            object_ids.append(to_object_id(post_id))
        except NotFoundError:
            continue
    if not object_ids:
        return []
    return _find({'_id': {'$in': object_ids}}, public_only)
