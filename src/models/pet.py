"""Pet model: the clinic's patients."""

from sqlalchemy import Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from .base import BaseModel


class Pet(BaseModel):
    """Animal patient registered to an owner."""

    __tablename__ = "pets"

    owner_id = Column(
        String(36),
        ForeignKey("owners.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Owner of the animal"
    )
    name = Column(String(255), nullable=False)
    species = Column(String(100), nullable=False)
    breed = Column(String(100))
    gender = Column(String(20))
    color = Column(String(100))
    age = Column(Integer, nullable=False, default=0, comment="Age in years")

    owner = relationship("Owner", back_populates="pets", lazy="select")
