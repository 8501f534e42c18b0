import logging
from datetime import datetime

import pymongo.errors
from fastapi import APIRouter, Depends, HTTPException, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from config import Settings
from database import get_db
from schemas import UserCreate, UserLogin
from utils.security import (create_access_token, current_user_id, get_settings,
                            hash_password, verify_password)
from utils.serializers import parse_object_id, public_user

logger = logging.getLogger("blog.auth")

router = APIRouter(prefix="/auth", tags=["auth"])

INVALID_CREDENTIALS = "email or password is invalid"


@router.post("/sign-up", status_code=status.HTTP_201_CREATED)
async def sign_up(user: UserCreate, db: AsyncIOMotorDatabase = Depends(get_db)):
    """Register a new user"""
    existing_user = await db.users.find_one({"email": user.email})
    if existing_user:
        raise HTTPException(status_code=400, detail="user already exist")

    now = datetime.utcnow()
    user_doc = {
        "full_name": user.fullName,
        "email": user.email,
        "password": hash_password(user.password),
        "role": "user",
        "avatar": None,
        "posts": [],
        "created_at": now,
        "updated_at": now,
    }

    try:
        await db.users.insert_one(user_doc)
    except pymongo.errors.DuplicateKeyError:
        raise HTTPException(status_code=400, detail="user already exist")

    logger.info(f"User registered: {user_doc['_id']}")
    return {"message": "user registered successfully"}


@router.post("/sign-in")
async def sign_in(
    credentials: UserLogin,
    db: AsyncIOMotorDatabase = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Exchange email and password for a bearer token"""
    if not credentials.email or not credentials.password:
        raise HTTPException(status_code=400, detail="email and password is required")

    user = await db.users.find_one({"email": credentials.email.strip().lower()})

    # same answer for unknown email and wrong password
    if not user or not verify_password(credentials.password, user["password"]):
        raise HTTPException(status_code=400, detail=INVALID_CREDENTIALS)

    token = create_access_token({"userId": str(user["_id"]), "role": user.get("role", "user")}, settings)
    return {"token": token}


@router.get("/current-user")
async def current_user(
    user_id: str = Depends(current_user_id),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    """Profile of the token's owner"""
    user = await db.users.find_one({"_id": parse_object_id(user_id)})
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return public_user(user)
