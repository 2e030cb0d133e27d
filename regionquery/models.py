"""
Data model for regionquery.

SQLAlchemy tables for the inspection schema, plus the immutable Point
record the query pipeline works with.

Schema:
    inspection_group   (id)
    inspection_region  (id, group_id -> inspection_group.id,
                        coord_x, coord_y, category)
"""
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy import BigInteger, Float, ForeignKey, Index, Integer
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


class InspectionGroup(Base):
    """A group of inspection points treated as a unit by proper crops."""
    __tablename__ = 'inspection_group'

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)

    regions: Mapped[List["InspectionRegion"]] = relationship(
        "InspectionRegion",
        back_populates="group",
    )

    def __repr__(self):
        return f"<InspectionGroup(id={self.id})>"


class InspectionRegion(Base):
    """
    A single inspection point.

    Attributes:
        id: Unique point id
        group_id: Owning group
        coord_x: x coordinate
        coord_y: y coordinate
        category: Category id
    """
    __tablename__ = 'inspection_region'

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    group_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey('inspection_group.id'), nullable=True
    )
    coord_x: Mapped[float] = mapped_column(Float, nullable=False)
    coord_y: Mapped[float] = mapped_column(Float, nullable=False)
    category: Mapped[int] = mapped_column(Integer, nullable=False)

    group: Mapped[Optional[InspectionGroup]] = relationship(
        "InspectionGroup",
        back_populates="regions",
    )

    __table_args__ = (
        Index('ix_inspection_region_xy', 'coord_x', 'coord_y'),
        Index('ix_inspection_region_group_id', 'group_id'),
    )

    def to_point(self) -> "Point":
        """Detach this row into an immutable Point."""
        return Point(
            id=self.id,
            group_id=self.group_id,
            x=self.coord_x,
            y=self.coord_y,
            category=self.category,
        )

    def __repr__(self):
        return (f"<InspectionRegion(id={self.id}, group_id={self.group_id}, "
                f"x={self.coord_x}, y={self.coord_y}, category={self.category})>")


@dataclass(frozen=True)
class Point:
    """
    An inspection point as seen by the query pipeline.

    Identity is the ``id``: two points with the same id compare equal
    and hash alike, whatever the other fields hold.
    """
    id: int
    group_id: int = field(compare=False)
    x: float = field(compare=False)
    y: float = field(compare=False)
    category: int = field(compare=False)

    def to_dict(self):
        return {
            'id': self.id,
            'group_id': self.group_id,
            'x': self.x,
            'y': self.y,
            'category': self.category,
        }
