from typing import Dict, Iterable, List, Optional

from bson import ObjectId
from fastapi import HTTPException, status
from motor.motor_asyncio import AsyncIOMotorDatabase

AUTHOR_PROJECTION = {"full_name": 1, "email": 1}


def parse_object_id(value, label: str = "id") -> ObjectId:
    """Turn a path/claim value into an ObjectId or fail with 400"""
    if isinstance(value, ObjectId):
        return value
    if not value or not ObjectId.is_valid(str(value)):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{label} is invalid")
    return ObjectId(str(value))


def _str_ids(values: Optional[Iterable]) -> List[str]:
    return [str(v) for v in values or []]


def public_user(doc: dict) -> dict:
    """User document without the credential hash"""
    return {
        "id": str(doc["_id"]),
        "fullName": doc.get("full_name"),
        "email": doc.get("email"),
        "role": doc.get("role", "user"),
        "avatar": doc.get("avatar"),
        "posts": _str_ids(doc.get("posts")),
        "createdAt": doc.get("created_at"),
        "updatedAt": doc.get("updated_at"),
    }


def public_author(doc: Optional[dict], author_id) -> dict:
    if not doc:
        return {"id": str(author_id), "fullName": None, "email": None}
    return {"id": str(doc["_id"]), "fullName": doc.get("full_name"), "email": doc.get("email")}


def public_post(doc: dict, author: Optional[dict] = None) -> dict:
    reactions = doc.get("reactions") or {}
    likes = _str_ids(reactions.get("likes"))
    dislikes = _str_ids(reactions.get("dislikes"))
    return {
        "id": str(doc["_id"]),
        "title": doc.get("title", ""),
        "content": doc.get("content"),
        "image": doc.get("image"),
        "author": public_author(author, doc.get("author")),
        "reactions": {"likes": likes, "dislikes": dislikes},
        "likesCount": len(likes),
        "dislikesCount": len(dislikes),
        "createdAt": doc.get("created_at"),
        "updatedAt": doc.get("updated_at"),
    }


def public_comment(doc: dict, author: Optional[dict] = None) -> dict:
    return {
        "id": str(doc["_id"]),
        "text": doc.get("text"),
        "post": str(doc.get("post")),
        "author": public_author(author, doc.get("author")),
        "createdAt": doc.get("created_at"),
        "updatedAt": doc.get("updated_at"),
    }


async def load_authors(db: AsyncIOMotorDatabase, docs: Iterable[dict]) -> Dict[ObjectId, dict]:
    """Fetch the authors referenced by ``docs`` in a single query"""
    author_ids = list({doc["author"] for doc in docs if doc.get("author") is not None})
    if not author_ids:
        return {}
    authors = await db.users.find({"_id": {"$in": author_ids}}, AUTHOR_PROJECTION).to_list(None)
    return {author["_id"]: author for author in authors}
