##########
# Imports
##########
from typing import Optional

import pymongo.errors
from fastapi import Depends, FastAPI, File, HTTPException, Request, UploadFile, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import load_settings
from database import connect, ensure_indexes
from logging_config import setup_logging
from routes import auth, comments, posts, users
from utils.media import MediaStore, get_media_store


#################
# Configuration
#################
settings = load_settings()
logger = setup_logging(settings)


#####################
# FastAPI App Setup
#####################
app = FastAPI(title="Blog API", description="Posts, reactions, comments and image uploads")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.settings = settings
app.state.db = connect(settings)
app.state.media = MediaStore(settings)


#################
# Error Handling
#################
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are client errors (400), not 422"""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "invalid input", "errors": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(pymongo.errors.PyMongoError)
async def database_exception_handler(request: Request, exc: pymongo.errors.PyMongoError):
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": "Server error"})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": "Server error"})


##############
# Startup Hook
##############
@app.on_event("startup")
async def startup_event():
    """Initialize DB indexes on startup"""
    await ensure_indexes(app.state.db)
    logger.info(f"Connected to database '{settings.database_name}'")


##########
# Routes
##########
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(posts.router)
app.include_router(comments.router)


@app.post("/upload")
async def upload_image(
    image: Optional[UploadFile] = File(None),
    media: MediaStore = Depends(get_media_store),
):
    """Upload a single image and return its hosted URL"""
    if image is None or not image.filename:
        raise HTTPException(status_code=400, detail="Image upload failed")
    url = await media.upload(image)
    return {"url": url}


@app.get("/")
async def home():
    return {"message": "Blog API is running"}


###############
# Entry Point
###############
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
