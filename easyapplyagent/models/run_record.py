from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import String, Integer, DateTime, Enum as SQLEnum, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..db.database import Base


class RunStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    MANUAL_REQUIRED = "manual_required"
    FAILED = "failed"


class RunRecord(Base):
    """一次完整流程（登录 → 搜索 → Easy Apply）的运行记录，对应 runs 表。"""

    __tablename__ = "runs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    role: Mapped[str | None] = mapped_column(String(255), nullable=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[RunStatus] = mapped_column(
        SQLEnum(RunStatus),
        default=RunStatus.IN_PROGRESS,
        index=True,
        nullable=False,
    )
    auth_state: Mapped[str | None] = mapped_column(String(64), nullable=True)
    last_step: Mapped[str | None] = mapped_column(String(64), nullable=True)
    fail_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    final_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    create_time: Mapped[datetime] = mapped_column(
        DateTime, default=lambda: datetime.now(timezone.utc), nullable=False
    )
    finish_time: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
