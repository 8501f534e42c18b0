"""Like/dislike reactions on posts.

A user's reaction to a post lives in one of two membership lists,
``reactions.likes`` and ``reactions.dislikes``. Reacting the same way twice
undoes the reaction; reacting the other way moves the user across. A user is
never left in both lists.

``apply_reaction`` is the in-memory transition on a post document. Requests go
through ``react_to_post``, which performs the same transition as atomic store
updates; the test suite checks the two against each other.
"""
import logging
from enum import Enum
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ReturnDocument

logger = logging.getLogger("blog.reactions")


class ReactionType(str, Enum):
    like = "like"
    dislike = "dislike"


class ReactionState(str, Enum):
    none = "none"
    liked = "liked"
    disliked = "disliked"


# reaction type -> (list it targets, list it excludes)
FIELDS = {
    ReactionType.like: ("likes", "dislikes"),
    ReactionType.dislike: ("dislikes", "likes"),
}


def parse_reaction_type(value) -> Optional[ReactionType]:
    """Return the ReactionType for ``value`` or None when unsupported"""
    try:
        return ReactionType(value)
    except ValueError:
        return None


def reaction_state(post: dict, user_id) -> ReactionState:
    """Current membership of ``user_id`` on ``post``"""
    reactions = post.get("reactions") or {}
    if user_id in (reactions.get("likes") or []):
        return ReactionState.liked
    if user_id in (reactions.get("dislikes") or []):
        return ReactionState.disliked
    return ReactionState.none


def apply_reaction(post: dict, user_id, reaction_type) -> ReactionState:
    """Apply a like/dislike toggle to ``post`` in place and return the new state.

    Raises ValueError for anything other than ``like``/``dislike``; the post
    is left untouched in that case.
    """
    reaction_type = ReactionType(reaction_type)
    target, other = FIELDS[reaction_type]

    reactions = post.setdefault("reactions", {})
    target_list = list(reactions.get(target) or [])
    other_list = list(reactions.get(other) or [])

    if user_id in target_list:
        target_list = [uid for uid in target_list if uid != user_id]
    else:
        target_list.append(user_id)
        other_list = [uid for uid in other_list if uid != user_id]

    reactions[target] = target_list
    reactions[other] = other_list
    return reaction_state(post, user_id)


async def react_to_post(posts: AsyncIOMotorCollection, post_id, user_id, reaction_type, now=None) -> Optional[dict]:
    """Store rendition of ``apply_reaction`` using atomic document updates.

    Toggle-off is a ``$pull`` guarded by current membership; otherwise the user
    is added to the target list and pulled from the other in one update.
    Returns the updated post, or None when the post does not exist.
    """
    reaction_type = ReactionType(reaction_type)
    target, other = FIELDS[reaction_type]
    target_path = f"reactions.{target}"
    other_path = f"reactions.{other}"

    stamp = {"$set": {"updated_at": now}} if now is not None else {}

    post = await posts.find_one_and_update(
        {"_id": post_id, target_path: user_id},
        {"$pull": {target_path: user_id}, **stamp},
        return_document=ReturnDocument.AFTER,
    )
    if post is not None:
        logger.debug(f"User {user_id} removed {reaction_type.value} from post {post_id}")
        return post

    post = await posts.find_one_and_update(
        {"_id": post_id},
        {"$addToSet": {target_path: user_id}, "$pull": {other_path: user_id}, **stamp},
        return_document=ReturnDocument.AFTER,
    )
    if post is not None:
        logger.debug(f"User {user_id} added {reaction_type.value} to post {post_id}")
    return post
