"""
Project showcase models
"""
from uuid import uuid4

from sqlalchemy import (Boolean, Column, DateTime, ForeignKey, Integer, String,
                        Text, Uuid)
from sqlalchemy.orm import relationship

from folio.core.database import Base
from folio.models.types import utcnow


class Project(Base):
    """Portfolio project"""
    __tablename__ = "projects"

    id = Column(Uuid, primary_key=True, default=uuid4)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    demo_link = Column(String(2048), nullable=False, default="#")
    problem_statement = Column(Text, nullable=True)
    why_built = Column(Text, nullable=True)
    order_index = Column(Integer, nullable=False, default=0)
    enabled = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    images = relationship(
        "ProjectImage",
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="ProjectImage.order_index",
    )

    def __repr__(self):
        return f"<Project(id={self.id}, title={self.title})>"


class ProjectImage(Base):
    """Image attached to a project, ordered within the project"""
    __tablename__ = "project_images"

    id = Column(Uuid, primary_key=True, default=uuid4)
    project_id = Column(Uuid, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    image_url = Column(String(2048), nullable=False)
    image_path = Column(String(1024), nullable=True)  # path inside media storage
    order_index = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    project = relationship("Project", back_populates="images")
