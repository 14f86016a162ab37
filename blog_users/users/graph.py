"""
Social graph: follower/following edges between identities.

An edge A -> B is stored twice: A's id in ``B.followers`` and B's id in
``A.following``. Both halves change together:

- with MONGO_USE_TRANSACTIONS, inside one multi-document transaction;
- otherwise the target is updated first, and if the follower update fails
  the target update is reversed before the error is raised.

``$addToSet``/``$pull`` give set semantics, so following twice leaves a
single edge and unfollowing a non-edge is a no-op.
"""

import logging

from bson import ObjectId
from flask import current_app
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from blog_users.auth.models import Identity, get_identity, get_users, to_object_id
from blog_users.auth.security import get_request_context
from blog_users.errors import NotFoundError, SelfFollowError, StoreError
from blog_users.extensions import mongo
from blog_users.logging_config import audit_log

ADD = '$addToSet'
REMOVE = '$pull'


def follow(follower_id: str, target_id: str) -> Identity:
    """Make ``follower_id`` follow ``target_id``; returns the updated target."""
    return _change_edge(follower_id, target_id, adding=True)


def unfollow(follower_id: str, target_id: str) -> Identity:
    """Remove the edge ``follower_id`` -> ``target_id``; returns the updated target."""
    return _change_edge(follower_id, target_id, adding=False)


def _change_edge(follower_id: str, target_id: str, adding: bool) -> Identity:
    follower_oid = to_object_id(follower_id)
    target_oid = to_object_id(target_id)

    if follower_oid == target_oid and not current_app.config.get('ALLOW_SELF_FOLLOW', False):
        raise SelfFollowError()

    if current_app.config.get('MONGO_USE_TRANSACTIONS'):
        _apply_in_transaction(follower_oid, target_oid, adding)
    else:
        _apply_with_compensation(follower_oid, target_oid, adding)

    event = 'follow' if adding else 'unfollow'
    audit_log(
        event=event,
        message=f'{follower_id} {event}ed {target_id}',
        user_id=str(follower_id),
        target_id=str(target_id),
        **get_request_context(),
    )
    return get_identity(target_oid)


def _apply_in_transaction(follower_oid: ObjectId, target_oid: ObjectId, adding: bool) -> None:
    users = get_users()
    op = ADD if adding else REMOVE

    def callback(session):
        first = users.update_one({'_id': target_oid}, {op: {'followers': follower_oid}}, session=session)
        if first.matched_count == 0:
            raise NotFoundError()
        second = users.update_one({'_id': follower_oid}, {op: {'following': target_oid}}, session=session)
        if second.matched_count == 0:
            raise NotFoundError()

    try:
        with mongo.client.start_session() as session:
            session.with_transaction(callback)
    except PyMongoError as exc:
        raise StoreError() from exc


def _apply_with_compensation(follower_oid: ObjectId, target_oid: ObjectId, adding: bool) -> None:
    users = get_users()
    op = ADD if adding else REMOVE

    try:
        if users.find_one({'_id': follower_oid}, {'_id': 1}) is None:
            raise NotFoundError()
        before = users.find_one_and_update(
            {'_id': target_oid},
            {op: {'followers': follower_oid}},
            projection={'followers': 1},
            return_document=ReturnDocument.BEFORE,
        )
    except PyMongoError as exc:
        raise StoreError() from exc

    if before is None:
        raise NotFoundError()

    # Only a half-edge this call actually changed is reversed.
    had_edge = follower_oid in before.get('followers', [])
    target_changed = had_edge != adding

    try:
        result = users.update_one({'_id': follower_oid}, {op: {'following': target_oid}})
        if result.matched_count == 0:
            raise NotFoundError()
    except (PyMongoError, NotFoundError) as exc:
        if target_changed:
            _compensate(follower_oid, target_oid, adding)
        if isinstance(exc, NotFoundError):
            raise
        raise StoreError() from exc


def _compensate(follower_oid: ObjectId, target_oid: ObjectId, adding: bool) -> None:
    """Reverse the target's half of an edge change."""
    undo = REMOVE if adding else ADD
    try:
        get_users().update_one({'_id': target_oid}, {undo: {'followers': follower_oid}})
    except PyMongoError as exc:
        audit_log(
            event='follow_compensated',
            message='Reversal of a half-applied edge failed; graph needs repair',
            level=logging.ERROR,
            user_id=str(follower_oid),
            target_id=str(target_oid),
            reason='compensation_failed',
            **get_request_context(),
        )
        raise StoreError() from exc

    audit_log(
        event='follow_compensated',
        message='Reversed a half-applied edge',
        level=logging.WARNING,
        user_id=str(follower_oid),
        target_id=str(target_oid),
        **get_request_context(),
    )
