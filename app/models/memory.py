"""Memories: pins claiming a map position."""
from sqlalchemy import Column, Integer, String, Text, Float, ForeignKey, DateTime, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base


class Memory(Base):
    __tablename__ = "memories"

    id = Column(Integer, primary_key=True, index=True)
    latitude = Column(Float, nullable=False, index=True)
    longitude = Column(Float, nullable=False)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    # [{"name": "beach.jpg", "type": "image"}, ...]
    files = Column(JSON, nullable=False, default=list)

    author_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    author = relationship("User", back_populates="memories")

    @property
    def position(self) -> list[float]:
        return [self.latitude, self.longitude]
