"""Address routes nested under a contact.

Every handler first resolves the contact through the caller, then the
address through that contact.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from . import schemas, crud
from .auth import get_current_user
from .database import get_db
from .models import User

router = APIRouter(prefix="/api/contacts/{contact_id}/addresses", tags=["addresses"])


@router.post("", response_model=schemas.WebResponse[schemas.AddressOut])
def create_address(
    contact_id: str,
    address_in: schemas.AddressCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Add an address to one of the current user's contacts.

    Raises:
        NotFound: If the contact is not owned by the caller.
    """
    contact = crud.get_contact(db, current_user, contact_id)
    address = crud.create_address(db, contact, address_in)
    return {"data": schemas.AddressOut.model_validate(address)}


@router.get("", response_model=schemas.WebResponse[List[schemas.AddressOut]])
def list_addresses(
    contact_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    contact = crud.get_contact(db, current_user, contact_id)
    return {
        "data": [
            schemas.AddressOut.model_validate(a)
            for a in crud.list_addresses(db, contact)
        ]
    }


@router.get("/{address_id}", response_model=schemas.WebResponse[schemas.AddressOut])
def get_address(
    contact_id: str,
    address_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    contact = crud.get_contact(db, current_user, contact_id)
    address = crud.get_address(db, contact, address_id)
    return {"data": schemas.AddressOut.model_validate(address)}


@router.put("/{address_id}", response_model=schemas.WebResponse[schemas.AddressOut])
def update_address(
    contact_id: str,
    address_id: str,
    changes: schemas.AddressUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Update an address; only fields with a non-null value overwrite.

    Raises:
        NotFound: If the contact or the address cannot be reached.
    """
    contact = crud.get_contact(db, current_user, contact_id)
    address = crud.get_address(db, contact, address_id)
    address = crud.update_address(db, address, changes.model_dump(exclude_none=True))
    return {"data": schemas.AddressOut.model_validate(address)}


@router.delete("/{address_id}", response_model=schemas.WebResponse[str])
def remove_address(
    contact_id: str,
    address_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    contact = crud.get_contact(db, current_user, contact_id)
    address = crud.get_address(db, contact, address_id)
    crud.delete_address(db, address)
    return {"data": "OK"}
