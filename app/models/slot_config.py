"""Administrator-defined pickup capacity for a date range."""

from __future__ import annotations

from datetime import date

from sqlalchemy import Date, Integer
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, ULIDMixin


class SlotConfig(Base, ULIDMixin):
    __tablename__ = "slot_configs"

    start_date: Mapped[date] = mapped_column(Date, index=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True, default=None)  # None = open-ended
    max_bikes_per_day: Mapped[int] = mapped_column(Integer)
    max_bikes_per_order: Mapped[int | None] = mapped_column(Integer, nullable=True, default=None)

    @property
    def effective_max_bikes_per_order(self) -> int:
        if self.max_bikes_per_order is not None:
            return self.max_bikes_per_order
        return self.max_bikes_per_day

    def covers(self, day: date) -> bool:
        return self.start_date <= day and (self.end_date is None or day <= self.end_date)
