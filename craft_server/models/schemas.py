from sqlalchemy import ForeignKey, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, relationship
from sqlalchemy.schema import Column
from sqlalchemy.types import String, Uuid, DateTime
from uuid6 import uuid7
from datetime import datetime


class Base(DeclarativeBase):
    pass


class Element(Base):
    __tablename__ = "elements"
    element_id = Column(Uuid, primary_key=True, default=uuid7)
    name = Column(String, nullable=False)
    name_key = Column(String, nullable=False, unique=True)  # lower-cased name
    emoji = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.now)


class Recipe(Base):
    __tablename__ = "recipes"
    # element_a_id <= element_b_id, so the pair is stored once in either order
    __table_args__ = (UniqueConstraint("element_a_id", "element_b_id"),)

    recipe_id = Column(Uuid, primary_key=True, default=uuid7)
    element_a_id = Column(Uuid, ForeignKey("elements.element_id"), nullable=False)
    element_b_id = Column(Uuid, ForeignKey("elements.element_id"), nullable=False)
    result_id = Column(Uuid, ForeignKey("elements.element_id"), nullable=False)
    first_discoverer = Column(String)
    created_at = Column(DateTime, default=datetime.now)

    result = relationship("Element", foreign_keys=[result_id])
