import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, ReturnDocument

from database import get_db
from schemas import ReactionRequest
from utils.media import MediaStore, get_media_store
from utils.reactions import parse_reaction_type, react_to_post, reaction_state
from utils.security import current_user_id, ensure_owner, require_user
from utils.serializers import load_authors, parse_object_id, public_post

logger = logging.getLogger("blog.posts")

# every /posts route requires a valid token
router = APIRouter(prefix="/posts", tags=["posts"], dependencies=[Depends(require_user)])

SORT_ORDERS = {
    "date-asc": [("_id", ASCENDING)],
    "title-asc": [("title", ASCENDING), ("_id", DESCENDING)],
}
LIKE_SORTS = {"most-liked": -1, "least-liked": 1}


async def with_authors(db: AsyncIOMotorDatabase, posts: list) -> list:
    authors = await load_authors(db, posts)
    return [public_post(post, authors.get(post.get("author"))) for post in posts]


async def get_post_or_404(db: AsyncIOMotorDatabase, post_id: str) -> dict:
    post = await db.posts.find_one({"_id": parse_object_id(post_id)})
    if not post:
        raise HTTPException(status_code=404, detail="post not found")
    return post


##########
# Listing
##########
@router.get("")
async def list_posts(sort: Optional[str] = None, db: AsyncIOMotorDatabase = Depends(get_db)):
    """All posts, newest first unless another ``sort`` is requested"""
    if sort in LIKE_SORTS:
        posts = await db.posts.aggregate([
            {"$addFields": {"likes_count": {"$size": {"$ifNull": ["$reactions.likes", []]}}}},
            {"$sort": {"likes_count": LIKE_SORTS[sort], "_id": -1}},
        ]).to_list(None)
    else:
        order = SORT_ORDERS.get(sort, [("_id", DESCENDING)])
        posts = await db.posts.find().sort(order).to_list(None)

    return await with_authors(db, posts)


##########
# CRUD
##########
@router.post("", status_code=status.HTTP_201_CREATED)
async def create_post(
    content: Optional[str] = Form(None),
    title: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    user_id: str = Depends(current_user_id),
    db: AsyncIOMotorDatabase = Depends(get_db),
    media: MediaStore = Depends(get_media_store),
):
    """Create a post authored by the caller"""
    if not content or not content.strip():
        raise HTTPException(status_code=400, detail="content is required")

    author_id = parse_object_id(user_id)
    now = datetime.utcnow()
    post_doc = {
        "title": title.strip() if title else "",
        "content": content.strip(),
        "image": None,
        "author": author_id,
        "reactions": {"likes": [], "dislikes": []},
        "created_at": now,
        "updated_at": now,
    }

    if image is not None and image.filename:
        post_doc["image"] = await media.upload(image)

    result = await db.posts.insert_one(post_doc)
    await db.users.update_one({"_id": author_id}, {"$push": {"posts": result.inserted_id}})

    logger.info(f"Post {result.inserted_id} created by {user_id}")
    return {"message": "post created successfully", "postId": str(result.inserted_id)}


@router.get("/{post_id}")
async def get_post(post_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    post = await get_post_or_404(db, post_id)
    return (await with_authors(db, [post]))[0]


@router.put("/{post_id}")
async def update_post(
    post_id: str,
    title: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    user_id: str = Depends(current_user_id),
    db: AsyncIOMotorDatabase = Depends(get_db),
    media: MediaStore = Depends(get_media_store),
):
    """Edit title, content or image; only the author may do this"""
    post = await get_post_or_404(db, post_id)
    ensure_owner(user_id, post["author"])

    update_data = {"updated_at": datetime.utcnow()}
    if title is not None:
        update_data["title"] = title.strip()
    if content:
        if not content.strip():
            raise HTTPException(status_code=400, detail="content is required")
        update_data["content"] = content.strip()
    if image is not None and image.filename:
        update_data["image"] = await media.upload(image)

    updated = await db.posts.find_one_and_update(
        {"_id": post["_id"]},
        {"$set": update_data},
        return_document=ReturnDocument.AFTER,
    )
    if not updated:
        raise HTTPException(status_code=404, detail="post not found")

    logger.info(f"Post {post_id} updated by {user_id}")
    return {"message": "post updated successfully", "post": (await with_authors(db, [updated]))[0]}


@router.delete("/{post_id}")
async def delete_post(
    post_id: str,
    user_id: str = Depends(current_user_id),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    """Delete a post together with its comments"""
    post = await get_post_or_404(db, post_id)
    ensure_owner(user_id, post["author"])

    await db.posts.delete_one({"_id": post["_id"]})

    # Delete comments related to post
    await db.comments.delete_many({"post": post["_id"]})

    await db.users.update_one({"_id": post["author"]}, {"$pull": {"posts": post["_id"]}})

    logger.info(f"Post {post_id} deleted by {user_id}")
    return {"message": "post deleted successfully"}


##########
# Reactions
##########
@router.post("/{post_id}/reactions")
async def react(
    post_id: str,
    body: ReactionRequest,
    user_id: str = Depends(current_user_id),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    """Toggle the caller's like/dislike on a post"""
    reaction_type = parse_reaction_type(body.type)
    if reaction_type is None:
        raise HTTPException(status_code=400, detail="wrong reaction type")

    oid = parse_object_id(post_id)
    actor = parse_object_id(user_id)

    post = await react_to_post(db.posts, oid, actor, reaction_type, now=datetime.utcnow())
    if post is None:
        raise HTTPException(status_code=404, detail="post not found")

    reactions = post.get("reactions") or {}
    return {
        "message": "reaction updated successfully",
        "state": reaction_state(post, actor).value,
        "likesCount": len(reactions.get("likes") or []),
        "dislikesCount": len(reactions.get("dislikes") or []),
    }
