"""
SQLAlchemy models for participants, guardians, emergency contacts, submissions, activities.
Used by postgres_real when DATABASE_URL is set.
"""
from __future__ import annotations
from datetime import datetime
from typing import Any, Dict, Optional
from uuid import uuid4
from sqlalchemy import JSON, DateTime, String, Text, ForeignKey
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class Participant(Base):
    __tablename__ = "participants"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    fullname: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    dob: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    age: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    # Unique per person in practice; not enforced here.
    nric: Mapped[Optional[str]] = mapped_column(Text, nullable=True, index=True)
    nationality: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    phone_number: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    email: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    gender: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    race: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    health_declaration: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    participant_signature: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)


class Guardian(Base):
    __tablename__ = "guardians"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    guardian_name: Mapped[str] = mapped_column(Text, nullable=False)
    guardian_nric: Mapped[str] = mapped_column(Text, nullable=False)
    guardian_email: Mapped[str] = mapped_column(Text, nullable=False)
    guardian_phone: Mapped[str] = mapped_column(Text, nullable=False)
    guardian_signature: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)


class EmergencyContact(Base):
    __tablename__ = "emergency_contacts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    emergency_fullname: Mapped[str] = mapped_column(Text, nullable=False)
    emergency_phone: Mapped[str] = mapped_column(Text, nullable=False)
    emergency_relationship: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)


class Submission(Base):
    __tablename__ = "submissions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    # Idempotency key for webhook redeliveries.
    tally_submission_id: Mapped[Optional[str]] = mapped_column(String(255), unique=True, nullable=True)
    tally_respondent_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    branch: Mapped[Optional[str]] = mapped_column(Text, nullable=True, index=True)
    group: Mapped[Optional[str]] = mapped_column("group", Text, nullable=True, index=True)
    booking_status: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    activity_amount: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    participant_id: Mapped[str] = mapped_column(String(36), ForeignKey("participants.id"), nullable=False, index=True)
    guardian_id: Mapped[Optional[str]] = mapped_column(String(36), ForeignKey("guardians.id"), nullable=True)
    emergency_id: Mapped[Optional[str]] = mapped_column(String(36), ForeignKey("emergency_contacts.id"), nullable=True)
    yas_insurance: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)


class Activity(Base):
    __tablename__ = "activities"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    participant_id: Mapped[str] = mapped_column(String(36), ForeignKey("participants.id"), nullable=False, index=True)
    submission_id: Mapped[str] = mapped_column(String(36), ForeignKey("submissions.id"), nullable=False, index=True)
    activity_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    activity_date: Mapped[Optional[str]] = mapped_column(Text, nullable=True, index=True)
    activity_time: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
