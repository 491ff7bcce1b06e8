"""User API: create and look up marketplace users (identity only; auth lives upstream)."""
from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from swapshop.db.session import get_db
from swapshop.services import user_service
from swapshop.services.user_service import user_to_dict

router = APIRouter()


class CreateUserRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=64)
    display_name: str | None = Field(None, max_length=128)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_user(body: CreateUserRequest, db: Session = Depends(get_db)):
    return user_to_dict(user_service.create_user(db, body.username, body.display_name))


@router.get("/{target_id}")
def get_user(target_id: str, db: Session = Depends(get_db)):
    return user_to_dict(user_service.get_user(db, target_id))
