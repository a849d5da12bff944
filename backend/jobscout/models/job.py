from sqlalchemy import Column, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from jobscout.database import Base


class Job(Base):
    __tablename__ = "jobs"

    id = Column(Text, primary_key=True)
    org_id = Column(Text, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False)
    title = Column(Text, nullable=False)
    department = Column(Text)
    location = Column(Text)
    job_type = Column(Text)
    work_mode = Column(Text)
    description = Column(Text)
    salary_min = Column(Integer)
    salary_max = Column(Integer)
    salary_currency = Column(Text)
    status = Column(Text, nullable=False, default="draft")
    created_at = Column(Text, nullable=False)

    organization = relationship("Organization", back_populates="jobs")
