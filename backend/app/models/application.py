"""Job application models"""
import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Table, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base

application_skills = Table(
    "application_skills",
    Base.metadata,
    Column(
        "application_id", Uuid,
        ForeignKey("applications.id", ondelete="CASCADE"), primary_key=True,
    ),
    Column("skill_id", Integer, ForeignKey("skills.id", ondelete="CASCADE"), primary_key=True),
)


class Application(Base):
    """A candidate's application to one job"""

    __tablename__ = "applications"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    job_id = Column(Uuid, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    job = relationship("Job", foreign_keys=[job_id], lazy="joined")

    # Candidate account that submitted it; null for guest applications
    applicant_id = Column(Uuid, ForeignKey("users.id"), index=True)

    applicant_name = Column(String(200), nullable=False)
    applicant_email = Column(String(255), nullable=False, index=True)
    phone_number = Column(String(50))
    resume_url = Column(String(500))

    status = Column(String(20), nullable=False, default="SUBMITTED", index=True)  # ApplicationStatus value

    skills = relationship("Skill", secondary=application_skills, lazy="selectin")

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
