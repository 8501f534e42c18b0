import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING, ReturnDocument

from database import get_db
from schemas import CommentBody
from utils.security import current_user_id, ensure_can_delete_comment, ensure_owner
from utils.serializers import AUTHOR_PROJECTION, load_authors, parse_object_id, public_comment

logger = logging.getLogger("blog.comments")

router = APIRouter(prefix="/comments", tags=["comments"])


def comment_text(body: CommentBody) -> str:
    if not body.text or not body.text.strip():
        raise HTTPException(status_code=400, detail="Comment text is required")
    return body.text.strip()


async def with_author(db: AsyncIOMotorDatabase, comment: dict) -> dict:
    author = await db.users.find_one({"_id": comment["author"]}, AUTHOR_PROJECTION)
    return public_comment(comment, author)


async def get_comment_or_404(db: AsyncIOMotorDatabase, comment_id: str) -> dict:
    comment = await db.comments.find_one({"_id": parse_object_id(comment_id, "commentId")})
    if not comment:
        raise HTTPException(status_code=404, detail="Comment not found")
    return comment


@router.post("/{post_id}", status_code=status.HTTP_201_CREATED)
async def create_comment(
    post_id: str,
    body: CommentBody,
    user_id: str = Depends(current_user_id),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    text = comment_text(body)
    post_oid = parse_object_id(post_id, "postId")
    if not await db.posts.find_one({"_id": post_oid}, {"_id": 1}):
        raise HTTPException(status_code=404, detail="post not found")

    now = datetime.utcnow()
    comment = {
        "text": text,
        "post": post_oid,
        "author": parse_object_id(user_id),
        "created_at": now,
        "updated_at": now,
    }
    await db.comments.insert_one(comment)

    logger.info(f"Comment {comment['_id']} created on post {post_id} by {user_id}")
    return await with_author(db, comment)


@router.get("/{post_id}")
async def list_comments(post_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    """Comments of a post, newest first"""
    post_oid = parse_object_id(post_id, "postId")
    if not await db.posts.find_one({"_id": post_oid}, {"_id": 1}):
        raise HTTPException(status_code=404, detail="post not found")

    comments = await db.comments.find({"post": post_oid}).sort(
        [("created_at", DESCENDING), ("_id", DESCENDING)]
    ).to_list(None)
    authors = await load_authors(db, comments)
    return [public_comment(c, authors.get(c["author"])) for c in comments]


@router.put("/comment/{comment_id}")
async def update_comment(
    comment_id: str,
    body: CommentBody,
    user_id: str = Depends(current_user_id),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    text = comment_text(body)
    comment = await get_comment_or_404(db, comment_id)
    ensure_owner(user_id, comment["author"])

    updated = await db.comments.find_one_and_update(
        {"_id": comment["_id"]},
        {"$set": {"text": text, "updated_at": datetime.utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    if not updated:
        raise HTTPException(status_code=404, detail="Comment not found")
    return await with_author(db, updated)


@router.delete("/comment/{comment_id}")
async def delete_comment(
    comment_id: str,
    user_id: str = Depends(current_user_id),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    """Delete a comment; allowed for its author and for the post's author"""
    comment = await get_comment_or_404(db, comment_id)
    post = await db.posts.find_one({"_id": comment["post"]}, {"author": 1})
    ensure_can_delete_comment(user_id, comment, post)

    await db.comments.delete_one({"_id": comment["_id"]})
    logger.info(f"Comment {comment_id} deleted by {user_id}")
    return {"message": "Comment deleted"}
