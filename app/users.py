"""User registration and profile routes for the Contacts API."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .auth import get_current_user, get_password_hash, rate_limit
from .database import get_db
from .models import User
from . import schemas, crud

router = APIRouter(prefix="/api/users", tags=["users"])


@router.post("", response_model=schemas.WebResponse[str])
def register(user_in: schemas.RegisterUserRequest, db: Session = Depends(get_db)):
    """
    Register a new user.

    Args:
        user_in (RegisterUserRequest): Username, password and display name.
        db (Session): Database session.

    Raises:
        Conflict: If the username is already taken.

    Returns:
        WebResponse[str]: ``"OK"`` on success.
    """
    crud.create_user(db, user_in, get_password_hash(user_in.password))
    return {"data": "OK"}


@router.get(
    "/current",
    response_model=schemas.WebResponse[schemas.UserResponse],
    dependencies=[Depends(rate_limit)],
)
def read_current(current_user: User = Depends(get_current_user)):
    """
    Retrieve details of the currently authenticated user.

    Args:
        current_user (User): Authenticated user resolved from the token header.

    Returns:
        WebResponse[UserResponse]: Username and display name.
    """
    return {"data": schemas.UserResponse.model_validate(current_user)}


@router.patch("/current", response_model=schemas.WebResponse[schemas.UserResponse])
def update_current(
    changes: schemas.UpdateUserRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Partially update the current user's name and/or password.

    Only non-null fields are applied; a new password is hashed first.
    """
    updates = changes.model_dump(exclude_none=True)
    if "password" in updates:
        updates["password"] = get_password_hash(updates["password"])
    user = crud.update_user(db, current_user, updates)
    return {"data": schemas.UserResponse.model_validate(user)}
