"""Contact management routes for the Contacts API."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from . import schemas, crud
from .database import get_db
from .auth import get_current_user
from .models import User

router = APIRouter(prefix="/api/contacts", tags=["contacts"])

MAX_PAGE = 2**31 - 1
MAX_PAGE_SIZE = 100


@router.post("", response_model=schemas.WebResponse[schemas.ContactOut])
def create_contact(
    contact_in: schemas.ContactCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Create a new contact owned by the current user.

    Args:
        contact_in (ContactCreate): Contact input data.
        db (Session): Database session.
        current_user (User): Authenticated user.

    Returns:
        WebResponse[ContactOut]: Created contact.
    """
    contact = crud.create_contact(db, contact_in, current_user)
    return {"data": schemas.ContactOut.model_validate(contact)}


@router.get("", response_model=schemas.PagedResponse[schemas.ContactOut])
def search_contacts(
    name: str | None = Query(None),
    email: str | None = Query(None),
    phone: str | None = Query(None),
    page: int = Query(0, ge=0, le=MAX_PAGE),
    size: int = Query(10, gt=0, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Search contacts belonging to the current user.

    ``name`` matches first or last name; ``email`` and ``phone`` match
    their own field. All given filters must match (case-sensitive
    substring). Omitted filters are ignored.

    Args:
        name (str | None): Name substring.
        email (str | None): Email substring.
        phone (str | None): Phone substring.
        page (int): Zero-based page number.
        size (int): Page size.
        db (Session): Database session.
        current_user (User): Authenticated user.

    Returns:
        PagedResponse[ContactOut]: One page of contacts with paging metadata.
    """
    contacts, paging = crud.search_contacts(
        db,
        current_user,
        name=name,
        email=email,
        phone=phone,
        page=page,
        size=size,
    )
    return {
        "data": [schemas.ContactOut.model_validate(c) for c in contacts],
        "paging": paging,
    }


@router.get("/{contact_id}", response_model=schemas.WebResponse[schemas.ContactOut])
def get_contact(
    contact_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Retrieve a single contact by ID for the current user.

    Raises:
        NotFound: If the contact does not exist or belongs to someone else.
    """
    contact = crud.get_contact(db, current_user, contact_id)
    return {"data": schemas.ContactOut.model_validate(contact)}


@router.patch("/{contact_id}", response_model=schemas.WebResponse[schemas.ContactOut])
def patch_contact(
    contact_id: str,
    changes: schemas.ContactUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Partially update an existing contact.

    Only fields provided with a non-null value are updated.

    Args:
        contact_id (str): Contact identifier.
        changes (ContactUpdate): Fields to update.
        db (Session): Database session.
        current_user (User): Authenticated user.

    Raises:
        NotFound: If the contact does not exist or belongs to someone else.

    Returns:
        WebResponse[ContactOut]: Updated contact.
    """
    contact = crud.get_contact(db, current_user, contact_id)
    contact = crud.update_contact(db, contact, changes.model_dump(exclude_none=True))
    return {"data": schemas.ContactOut.model_validate(contact)}


@router.delete("/{contact_id}", response_model=schemas.WebResponse[str])
def remove_contact(
    contact_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Delete a contact owned by the current user, including its addresses.

    Raises:
        NotFound: If the contact does not exist or belongs to someone else.
    """
    contact = crud.get_contact(db, current_user, contact_id)
    crud.delete_contact(db, contact)
    return {"data": "OK"}
