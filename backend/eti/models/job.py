from sqlalchemy import Column, String, Text, JSON

from eti.db.base import Base


class JobRecord(Base):
    """Job opening posted by an HR manager."""

    __tablename__ = "jobs"

    id = Column(String, primary_key=True, index=True)
    title = Column(String, nullable=False)
    company = Column(String)
    location = Column(String)
    type = Column(String)  # "Full-time", "Contract", "Casual"
    description = Column(Text)
    required_skills = Column(JSON, default=list)
    posted_date = Column(String, index=True)
