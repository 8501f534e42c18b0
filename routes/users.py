import logging
from datetime import datetime
from typing import Optional

import pymongo.errors
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from database import get_db
from schemas import normalize_email
from utils.media import MediaStore, get_media_store
from utils.security import current_user_id, require_user
from utils.serializers import parse_object_id, public_user

logger = logging.getLogger("blog.users")

router = APIRouter(prefix="/users", tags=["users"], dependencies=[Depends(require_user)])


@router.get("")
async def get_profile(user_id: str = Depends(current_user_id), db: AsyncIOMotorDatabase = Depends(get_db)):
    user = await db.users.find_one({"_id": parse_object_id(user_id)})
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return public_user(user)


@router.put("")
async def update_profile(
    fullName: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    avatar: Optional[UploadFile] = File(None),
    user_id: str = Depends(current_user_id),
    db: AsyncIOMotorDatabase = Depends(get_db),
    media: MediaStore = Depends(get_media_store),
):
    """Update name, email and/or avatar of the current user"""
    oid = parse_object_id(user_id)
    update_data = {}

    if fullName and fullName.strip():
        update_data["full_name"] = fullName.strip()

    if email and email.strip():
        email = normalize_email(email)
        if email is None:
            raise HTTPException(status_code=400, detail="email is invalid")
        existing_user = await db.users.find_one({"email": email, "_id": {"$ne": oid}})
        if existing_user:
            raise HTTPException(status_code=400, detail="Email already exists")
        update_data["email"] = email

    if avatar is not None and avatar.filename:
        update_data["avatar"] = await media.upload(avatar)

    update_data["updated_at"] = datetime.utcnow()

    try:
        updated_user = await db.users.find_one_and_update(
            {"_id": oid},
            {"$set": update_data},
            return_document=ReturnDocument.AFTER,
        )
    except pymongo.errors.DuplicateKeyError:
        raise HTTPException(status_code=400, detail="Email already exists")

    if not updated_user:
        raise HTTPException(status_code=404, detail="User not found")

    logger.info(f"Profile updated for user {user_id}: {sorted(update_data)}")
    return {"message": "Profile updated successfully", "user": public_user(updated_user)}
