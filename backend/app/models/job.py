"""Job posting models plus the skill and tag vocabularies they reference"""
import uuid

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Table,
    Text,
    Uuid,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base

job_skills = Table(
    "job_skills",
    Base.metadata,
    Column("job_id", Uuid, ForeignKey("jobs.id", ondelete="CASCADE"), primary_key=True),
    Column("skill_id", Integer, ForeignKey("skills.id", ondelete="CASCADE"), primary_key=True),
)

job_tags = Table(
    "job_tags",
    Base.metadata,
    Column("job_id", Uuid, ForeignKey("jobs.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class Skill(Base):
    """Skill name shared by jobs and applications"""

    __tablename__ = "skills"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, unique=True)  # stored lowercase


class Tag(Base):
    """Free-form job tag"""

    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, unique=True)  # stored lowercase


class Job(Base):
    """A job posting"""

    __tablename__ = "jobs"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    title = Column(String(200), nullable=False)
    company_name = Column(String(200), nullable=False)
    description = Column(Text)
    requirements = Column(Text)

    status = Column(String(20), nullable=False, default="DRAFT", index=True)  # JobStatus value
    employment_type = Column(String(20))  # EmploymentType value
    workplace_type = Column(String(20))  # WorkplaceType value

    # Salary band
    min_salary = Column(Numeric(12, 2))
    max_salary = Column(Numeric(12, 2))
    currency = Column(String(3))

    city = Column(String(100))
    country = Column(String(100))

    created_by_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    created_by = relationship("User", foreign_keys=[created_by_id], lazy="select")

    skills = relationship("Skill", secondary=job_skills, lazy="selectin")
    tags = relationship("Tag", secondary=job_tags, lazy="selectin")

    # Null means the posting never expires
    visible_until = Column(DateTime(timezone=True))

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        Index("idx_jobs_status_visible", "status", "visible_until"),
        Index("idx_jobs_owner_created", "created_by_id", "created_at"),
    )
