"""
Credential store: one document per registered identity in the ``users``
collection.

Uniqueness of ``userName`` and ``email`` is enforced by unique indexes, so
two concurrent registrations for the same name cannot both succeed. Edge
sets (``followers``/``following``) hold ObjectIds and are only ever
changed with ``$addToSet``/``$pull``.

Document shape::

    {
        '_id': ObjectId,
        'firstName': str, 'lastName': str,
        'userName': str, 'email': str,
        'passwordHash': str,
        'followers': [ObjectId], 'following': [ObjectId],
        'likedPosts': [ObjectId],
        'createdAt': datetime,
    }
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import FrozenSet, List, Mapping, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError, PyMongoError

from blog_users.auth.rules import normalize_email
from blog_users.auth.security import hash_password
from blog_users.errors import DuplicateError, InvalidUpdateError, NotFoundError, StoreError
from blog_users.extensions import mongo

USERS = 'users'

# Field names a profile update may carry.
ALLOWED_UPDATES = frozenset({'firstName', 'lastName', 'userName', 'email', 'password'})


@dataclass(frozen=True)
class Identity:
    """A registered user. Carries the password hash, never the password."""

    id: str
    first_name: str
    last_name: str
    user_name: str
    email: str
    password_hash: str = field(repr=False)
    followers: FrozenSet[str] = frozenset()
    following: FrozenSet[str] = frozenset()
    liked_posts: FrozenSet[str] = frozenset()

    @classmethod
    def from_document(cls, document: Mapping) -> 'Identity':
        return cls(
            id=str(document['_id']),
            first_name=document.get('firstName', ''),
            last_name=document.get('lastName', ''),
            user_name=document.get('userName', ''),
            email=document.get('email', ''),
            password_hash=document.get('passwordHash', ''),
            followers=frozenset(str(i) for i in document.get('followers', [])),
            following=frozenset(str(i) for i in document.get('following', [])),
            liked_posts=frozenset(str(i) for i in document.get('likedPosts', [])),
        )

    def is_followed_by(self, identity_id: str) -> bool:
        return identity_id in self.followers


def get_users() -> Collection:
    return mongo.db[USERS]


def init_db(app) -> None:
    """Create the unique indexes. Idempotent; runs on every app start."""
    users = app.extensions['mongo']['db'][USERS]
    users.create_index('userName', unique=True, name='uniq_userName')
    users.create_index('email', unique=True, name='uniq_email')


def to_object_id(identity_id) -> ObjectId:
    """Parse an identity id; malformed ids are reported as not found."""
    if isinstance(identity_id, ObjectId):
        return identity_id
    try:
        return ObjectId(identity_id)
    except (InvalidId, TypeError):
        raise NotFoundError()


def register(first_name: str, last_name: str, user_name: str, email: str, password: str) -> Identity:
    """
    Create an identity with a hashed password and empty edge sets.

    Raises:
        DuplicateError: userName or email already registered.
        StoreError: the insert failed for any other reason.
    """
    email = normalize_email(email)
    user_name = user_name.strip()
    document = {
        'firstName': first_name.strip(),
        'lastName': last_name.strip(),
        'userName': user_name,
        'email': email,
        'passwordHash': hash_password(password),
        'followers': [],
        'following': [],
        'likedPosts': [],
        'createdAt': datetime.now(timezone.utc),
    }
    try:
        result = get_users().insert_one(document)
    except DuplicateKeyError:
        raise _duplicate_error(email=email, user_name=user_name)
    except PyMongoError as exc:
        raise StoreError() from exc

    document['_id'] = result.inserted_id
    return Identity.from_document(document)


def find_by_email_or_username(email: Optional[str] = None, user_name: Optional[str] = None) -> Optional[Identity]:
    """Return the identity matching either key, or None."""
    clauses = []
    if email:
        clauses.append({'email': normalize_email(email)})
    if user_name:
        clauses.append({'userName': user_name})
    if not clauses:
        return None

    try:
        document = get_users().find_one({'$or': clauses})
    except PyMongoError as exc:
        raise StoreError() from exc
    return Identity.from_document(document) if document else None


def find_by_id(identity_id) -> Optional[Identity]:
    try:
        object_id = to_object_id(identity_id)
    except NotFoundError:
        return None
    try:
        document = get_users().find_one({'_id': object_id})
    except PyMongoError as exc:
        raise StoreError() from exc
    return Identity.from_document(document) if document else None


def get_identity(identity_id) -> Identity:
    """Like find_by_id, but a missing identity raises NotFoundError."""
    identity = find_by_id(identity_id)
    if identity is None:
        raise NotFoundError()
    return identity


def list_identities(exclude_id: Optional[str] = None) -> List[Identity]:
    query = {}
    if exclude_id is not None:
        query = {'_id': {'$ne': to_object_id(exclude_id)}}
    try:
        documents = list(get_users().find(query).sort('userName', 1))
    except PyMongoError as exc:
        raise StoreError() from exc
    return [Identity.from_document(d) for d in documents]


def update_fields(identity_id, updates: Mapping[str, str]) -> Identity:
    """
    Apply whitelisted field updates to one identity.

    Any field outside ALLOWED_UPDATES rejects the whole update before the
    store is touched. A ``password`` value is re-hashed.

    Raises:
        InvalidUpdateError: a field name outside ALLOWED_UPDATES.
        NotFoundError: no identity with that id.
        DuplicateError: the new userName or email belongs to someone else.
        StoreError: the update failed for any other reason.
    """
    rejected = set(updates) - ALLOWED_UPDATES
    if rejected:
        raise InvalidUpdateError(rejected)

    object_id = to_object_id(identity_id)
    changes = {}
    for name, value in updates.items():
        if name == 'password':
            changes['passwordHash'] = hash_password(value)
        elif name == 'email':
            changes['email'] = normalize_email(value)
        else:
            changes[name] = value

    if not changes:
        return get_identity(identity_id)

    try:
        document = get_users().find_one_and_update(
            {'_id': object_id},
            {'$set': changes},
            return_document=ReturnDocument.AFTER,
        )
    except DuplicateKeyError:
        raise _duplicate_error(
            email=changes.get('email'),
            user_name=changes.get('userName'),
            exclude_id=object_id,
        )
    except PyMongoError as exc:
        raise StoreError() from exc

    if document is None:
        raise NotFoundError()
    return Identity.from_document(document)


def _duplicate_error(email: Optional[str], user_name: Optional[str], exclude_id=None) -> DuplicateError:
    """Work out which unique key collided. Email wins when both do."""
    if email:
        query = {'email': email}
        if exclude_id is not None:
            query['_id'] = {'$ne': exclude_id}
        try:
            taken = get_users().find_one(query, {'_id': 1}) is not None
        except PyMongoError as exc:
            raise StoreError() from exc
        if taken:
            return DuplicateError('email', 'Email already taken!')
    return DuplicateError('userName', 'Username already taken!')
