from __future__ import annotations

from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase


# 相对运行目录，与 config.yaml 里的 storage/ 路径一致
DB_PATH = Path("storage") / "easyapplyagent.db"
DATABASE_URL = f"sqlite:///{DB_PATH}"


class Base(DeclarativeBase):
    """SQLAlchemy Base."""


engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False},
)

# 禁用 expire_on_commit，避免离开 Session 后对象属性失效导致 DetachedInstanceError
SessionLocal = sessionmaker(
    autocommit=False, autoflush=False, bind=engine, expire_on_commit=False
)


def init_db() -> None:
    """初始化数据库表结构。"""
    from ..models.run_record import RunRecord  # noqa: F401
    from ..models.run_log import RunLog  # noqa: F401

    DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    Base.metadata.create_all(bind=engine)
