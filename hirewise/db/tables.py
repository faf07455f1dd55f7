"""SQLAlchemy tables for companies, users, jobs, applications and resumes."""

import json
import uuid
from datetime import datetime

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    TypeDecorator,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class JSONType(TypeDecorator):
    """JSON stored as text so SQLite and Postgres behave the same."""
    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return json.dumps(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return json.loads(value)


def new_id() -> str:
    return str(uuid.uuid4())


class CompanyRecord(Base):
    __tablename__ = "companies"
    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(200), nullable=False)
    website = Column(String(500))
    industry = Column(String(200))
    size = Column(String(50))
    location = Column(String(200))
    description = Column(Text)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)


class UserRecord(Base):
    __tablename__ = "users"
    id = Column(String(36), primary_key=True, default=new_id)
    email = Column(String(320), default="")
    user_type = Column(String(20), nullable=False, default="individual")  # individual | company
    company_id = Column(String(36), ForeignKey("companies.id"), nullable=True)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    company = relationship("CompanyRecord")


class JobPostingRecord(Base):
    __tablename__ = "job_postings"
    id = Column(String(36), primary_key=True, default=new_id)
    title = Column(String(300), nullable=False)
    description = Column(Text, default="")
    required_skills = Column(JSONType, default=list)
    location = Column(String(200))
    job_type = Column(String(20), nullable=False, default="FULL_TIME")
    salary_range = Column(String(100))
    company_id = Column(String(36), ForeignKey("companies.id"), nullable=False)
    status = Column(String(20), nullable=False, default="DRAFT")
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    company = relationship("CompanyRecord")
    applications = relationship("JobApplicationRecord", back_populates="job")


class JobApplicationRecord(Base):
    __tablename__ = "job_applications"
    __table_args__ = (
        UniqueConstraint("job_id", "applicant_id", name="uq_job_applications_job_applicant"),
    )
    id = Column(String(36), primary_key=True, default=new_id)
    job_id = Column(String(36), ForeignKey("job_postings.id"), nullable=False)
    applicant_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    resume_url = Column(String(500))
    cover_letter_url = Column(String(500))
    status = Column(String(20), nullable=False, default="NEW")
    matching_score = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    job = relationship("JobPostingRecord", back_populates="applications")
    applicant = relationship("UserRecord")


class ResumeRecord(Base):
    __tablename__ = "resumes"
    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    content = Column(JSONType, nullable=False)
    feedback = Column(JSONType)
    file_url = Column(String(500))
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    user = relationship("UserRecord")
