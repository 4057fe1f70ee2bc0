"""Database models for the Contacts API.

This module defines SQLAlchemy ORM models used by the application.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    String,
    ForeignKey,
)
from sqlalchemy.orm import relationship

from .database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    SQLAlchemy model representing an application user.

    ``token`` and ``token_expired_at`` are either both set (logged in)
    or both ``None`` (logged out). The expiry is stored as epoch millis.
    """

    __tablename__ = "users"

    username = Column(String(100), primary_key=True)
    password = Column(String(255), nullable=False)
    name = Column(String(100), nullable=False)
    token = Column(String(100), unique=True, nullable=True, index=True)
    token_expired_at = Column(BigInteger, nullable=True)

    #: List of contacts owned by the user
    contacts = relationship("Contact", back_populates="owner")


class Contact(Base):
    """
    SQLAlchemy model representing a contact entry.

    Each contact belongs to exactly one user.
    """

    __tablename__ = "contacts"

    id = Column(String(100), primary_key=True, default=_new_id)
    first_name = Column(String(100), nullable=False, index=True)
    last_name = Column(String(100), nullable=True, index=True)
    email = Column(String(100), nullable=True, index=True)
    phone = Column(String(20), nullable=True)
    created_at = Column(DateTime, nullable=False, default=_utcnow)

    #: Username of the owning user
    username = Column(
        String(100),
        ForeignKey("users.username"),
        nullable=False,
        index=True,
    )

    #: Reference to the owning User object
    owner = relationship("User", back_populates="contacts")

    #: Addresses attached to this contact
    addresses = relationship("Address", back_populates="contact")


class Address(Base):
    """SQLAlchemy model representing a postal address of a contact."""

    __tablename__ = "addresses"

    id = Column(String(100), primary_key=True, default=_new_id)
    street = Column(String(200), nullable=True)
    city = Column(String(100), nullable=True)
    province = Column(String(100), nullable=True)
    country = Column(String(100), nullable=False)
    postal_code = Column(String(10), nullable=True)

    contact_id = Column(
        String(100),
        ForeignKey("contacts.id"),
        nullable=False,
        index=True,
    )

    contact = relationship("Contact", back_populates="addresses")
