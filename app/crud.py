"""CRUD operations for users, contacts and addresses.

This module contains database interaction logic isolated from FastAPI
route handlers. Contacts are only ever looked up together with their
owner, and addresses together with their (already owner-checked)
contact, so a row belonging to another user is indistinguishable from
a missing one.
"""

import logging
import math

from sqlalchemy import and_, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from . import models, schemas
from .errors import Conflict, NotFound

logger = logging.getLogger(__name__)

CONTACT_NOT_FOUND = "Contact is not found."
ADDRESS_NOT_FOUND = "Address is not found."


def create_user(
    db: Session, user_in: schemas.RegisterUserRequest, hashed_password: str
) -> models.User:
    """
    Create and persist a new user.

    Args:
        db (Session): SQLAlchemy database session.
        user_in (RegisterUserRequest): Incoming user data.
        hashed_password (str): Securely hashed password.

    Raises:
        Conflict: If a user with the same username already exists.

    Returns:
        User: Newly created user instance.
    """
    if get_user_by_username(db, user_in.username) is not None:
        raise Conflict("Username already registered")

    user = models.User(
        username=user_in.username,
        password=hashed_password,
        name=user_in.name,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Username already registered")
    db.refresh(user)
    logger.info("Registered user %s", user.username)
    return user


def get_user_by_username(db: Session, username: str) -> models.User | None:
    """
    Retrieve a user by username.

    Args:
        db (Session): Database session.
        username (str): Username (natural key).

    Returns:
        User | None: User if found, otherwise ``None``.
    """
    return db.execute(
        select(models.User).where(models.User.username == username)
    ).scalar_one_or_none()


def get_user_by_token(db: Session, token: str) -> models.User | None:
    """
    Retrieve the user currently holding ``token``.

    Args:
        db (Session): Database session.
        token (str): Exact token value.

    Returns:
        User | None: User if found, otherwise ``None``.
    """
    return db.execute(
        select(models.User).where(models.User.token == token)
    ).scalar_one_or_none()


def set_user_token(
    db: Session, user: models.User, token: str | None, expired_at: int | None
) -> models.User:
    """
    Store (or clear, with ``None``) the user's token and its expiry.

    Args:
        db (Session): Database session.
        user (User): Target user.
        token (str | None): New token value.
        expired_at (int | None): Expiry in epoch milliseconds.

    Returns:
        User: Updated user instance.
    """
    user.token = token
    user.token_expired_at = expired_at if token is not None else None
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def update_user(db: Session, user: models.User, changes: dict) -> models.User:
    """
    Apply a partial update to a user.

    Args:
        db (Session): Database session.
        user (User): Target user.
        changes (dict): Non-null fields to overwrite. A ``password`` entry
            must already be hashed.

    Returns:
        User: Updated user instance.
    """
    for key, value in changes.items():
        setattr(user, key, value)

    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def create_contact(
    db: Session, contact_in: schemas.ContactCreate, user: models.User
) -> models.Contact:
    """
    Create a new contact owned by the given user.

    Args:
        db (Session): Database session.
        contact_in (ContactCreate): Contact data.
        user (User): Owner of the contact.

    Returns:
        Contact: Newly created contact.
    """
    contact = models.Contact(**contact_in.model_dump(), username=user.username)
    db.add(contact)
    db.commit()
    db.refresh(contact)
    return contact


def get_contact(db: Session, user: models.User, contact_id: str) -> models.Contact:
    """
    Retrieve a single contact owned by the given user.

    Args:
        db (Session): Database session.
        user (User): Contact owner.
        contact_id (str): Contact identifier.

    Raises:
        NotFound: If no contact matches both owner and id.

    Returns:
        Contact: The contact.
    """
    contact = db.execute(
        select(models.Contact).where(
            models.Contact.id == contact_id,
            models.Contact.username == user.username,
        )
    ).scalar_one_or_none()
    if contact is None:
        raise NotFound(CONTACT_NOT_FOUND)
    return contact


def update_contact(db: Session, contact: models.Contact, changes: dict):
    """
    Update mutable fields of a contact.

    Args:
        db (Session): Database session.
        contact (Contact): Contact instance.
        changes (dict): Fields to update; ``None`` values are skipped.

    Returns:
        Contact: Updated contact.
    """
    for key, value in changes.items():
        if value is not None:
            setattr(contact, key, value)

    db.add(contact)
    db.commit()
    db.refresh(contact)
    return contact


def delete_contact(db: Session, contact: models.Contact):
    """
    Delete a contact together with all of its addresses.

    Args:
        db (Session): Database session.
        contact (Contact): Contact to delete.
    """
    addresses = list_addresses(db, contact)
    for address in addresses:
        db.delete(address)
    db.flush()
    db.delete(contact)
    db.commit()
    logger.info("Deleted contact %s with %d address(es)", contact.id, len(addresses))
    return None


def contact_filters(
    user: models.User,
    name: str | None = None,
    email: str | None = None,
    phone: str | None = None,
) -> list:
    """
    Build the conjunctive filter list for a contact search.

    The owner clause is always present; every other clause is added only
    when its value is provided. Values are bound parameters with LIKE
    wildcards escaped, so they match as literal substrings.

    Args:
        user (User): Owner whose contacts are searched.
        name (str | None): Substring of first or last name.
        email (str | None): Substring of email.
        phone (str | None): Substring of phone.

    Returns:
        list: SQLAlchemy boolean clauses.
    """
    filters = [models.Contact.username == user.username]
    if name is not None:
        filters.append(
            or_(
                models.Contact.first_name.contains(name, autoescape=True),
                models.Contact.last_name.contains(name, autoescape=True),
            )
        )
    if email is not None:
        filters.append(models.Contact.email.contains(email, autoescape=True))
    if phone is not None:
        filters.append(models.Contact.phone.contains(phone, autoescape=True))
    return filters


def search_contacts(
    db: Session,
    user: models.User,
    name: str | None = None,
    email: str | None = None,
    phone: str | None = None,
    page: int = 0,
    size: int = 10,
) -> tuple[list[models.Contact], schemas.PagingResponse]:
    """
    Search the user's contacts and return one page of results.

    Results are ordered by creation time, then id. A page past the end
    yields an empty list while ``total_pages`` still reflects the full
    match count.

    Args:
        db (Session): Database session.
        user (User): Contact owner.
        name (str | None): Substring of first or last name.
        email (str | None): Substring of email.
        phone (str | None): Substring of phone.
        page (int): Zero-based page number.
        size (int): Page size, greater than zero.

    Returns:
        tuple[list[Contact], PagingResponse]: Page items and paging metadata.
    """
    criteria = and_(*contact_filters(user, name=name, email=email, phone=phone))

    total = db.scalar(
        select(func.count()).select_from(models.Contact).where(criteria)
    )
    offset = page * size
    contacts = []
    if offset < total:
        contacts = db.scalars(
            select(models.Contact)
            .where(criteria)
            .order_by(models.Contact.created_at, models.Contact.id)
            .offset(offset)
            .limit(size)
        ).all()

    paging = schemas.PagingResponse(
        current_page=page,
        total_pages=math.ceil(total / size),
        size=size,
    )
    return list(contacts), paging


def create_address(
    db: Session, contact: models.Contact, address_in: schemas.AddressCreate
) -> models.Address:
    """
    Create an address under an owner-verified contact.

    Args:
        db (Session): Database session.
        contact (Contact): Parent contact.
        address_in (AddressCreate): Address data.

    Returns:
        Address: Newly created address.
    """
    address = models.Address(**address_in.model_dump(), contact_id=contact.id)
    db.add(address)
    db.commit()
    db.refresh(address)
    return address


def get_address(
    db: Session, contact: models.Contact, address_id: str
) -> models.Address:
    """
    Retrieve an address belonging to ``contact``.

    Raises:
        NotFound: If no address matches both contact and id.
    """
    address = db.execute(
        select(models.Address).where(
            models.Address.id == address_id,
            models.Address.contact_id == contact.id,
        )
    ).scalar_one_or_none()
    if address is None:
        raise NotFound(ADDRESS_NOT_FOUND)
    return address


def list_addresses(db: Session, contact: models.Contact) -> list[models.Address]:
    return list(
        db.scalars(
            select(models.Address)
            .where(models.Address.contact_id == contact.id)
            .order_by(models.Address.id)
        ).all()
    )


def update_address(db: Session, address: models.Address, changes: dict):
    """Overwrite the address fields whose new value is not ``None``."""
    for key, value in changes.items():
        if value is not None:
            setattr(address, key, value)

    db.add(address)
    db.commit()
    db.refresh(address)
    return address


def delete_address(db: Session, address: models.Address):
    db.delete(address)
    db.commit()
    return None
