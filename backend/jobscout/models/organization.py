from sqlalchemy import Column, Text
from sqlalchemy.orm import relationship
from jobscout.database import Base


class Organization(Base):
    __tablename__ = "organizations"

    id = Column(Text, primary_key=True)
    name = Column(Text, nullable=False)
    slug = Column(Text, nullable=False, unique=True)
    created_at = Column(Text, nullable=False)

    jobs = relationship("Job", back_populates="organization", cascade="all, delete-orphan")
