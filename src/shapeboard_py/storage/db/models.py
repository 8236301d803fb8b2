"""SQLAlchemy models for shapeboard-py database storage."""

from __future__ import annotations

from advanced_alchemy.base import UUIDAuditBase
from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column


class BoardStateModel(UUIDAuditBase):
    """SQLAlchemy model holding the saved state document of one board.

    Attributes:
        id: UUID primary key (from UUIDAuditBase).
        board_id: Public board identifier.
        document: The JSON state document.
        created_at: Creation timestamp (from UUIDAuditBase).
        updated_at: Last update timestamp (from UUIDAuditBase).
    """

    __tablename__ = "board_states"

    board_id: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    document: Mapped[str] = mapped_column(Text)
