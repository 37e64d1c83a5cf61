"""
Users Router - User profiles
"""

import logging
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, HTTPException
from pymongo.errors import DuplicateKeyError

from api.schemas.users import User, UserCreate
from api.dependencies import get_current_user, get_repository
from api.repositories.base import BaseRepository, is_valid_id

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("", response_model=User, status_code=201)
def register_user(request: UserCreate, repo: BaseRepository = Depends(get_repository)) -> User:
    """Register a profile; its id is what callers send as X-User-Id."""
    try:
        if repo.get_user_by_email(request.email) is not None:
            raise HTTPException(status_code=409, detail="Email already registered")

        user = {
            **request.model_dump(),
            "created_at": datetime.now(timezone.utc).replace(tzinfo=None),
        }
        user["id"] = repo.insert_user(user)
        logger.info(f"Registered {request.role} {request.email}")
        return User.model_validate(user)
    except HTTPException:
        raise
    except DuplicateKeyError:
        raise HTTPException(status_code=409, detail="Email already registered")
    except Exception as e:
        logger.error(f"User registration failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to register user")


@router.get("/me", response_model=User)
def get_me(user: dict = Depends(get_current_user)) -> User:
    return User.model_validate(user)


@router.get("/{user_id}", response_model=User)
def get_user(user_id: str, repo: BaseRepository = Depends(get_repository)) -> User:
    if not is_valid_id(user_id):
        raise HTTPException(status_code=400, detail="Invalid user ID")
    try:
        user = repo.get_user(user_id)
        if user is None:
            raise HTTPException(status_code=404, detail="User not found")
        return User.model_validate(user)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"User lookup failed for {user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch user")
