from __future__ import annotations

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker


@pytest.fixture()
def isolated_db(monkeypatch, tmp_path):
    """
    Create an isolated sqlite database for workflow integration tests.
    """
    from easyapplyagent.core import workflow as workflow_module
    from easyapplyagent.db import database as db_module
    from easyapplyagent.db.database import Base
    from easyapplyagent.models.run_log import RunLog  # noqa: F401
    from easyapplyagent.models.run_record import RunRecord  # noqa: F401

    db_file = tmp_path / "test_easyapplyagent.db"
    test_engine = create_engine(
        f"sqlite:///{db_file}",
        connect_args={"check_same_thread": False},
    )
    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=test_engine,
        expire_on_commit=False,
    )

    # patch db module symbols
    monkeypatch.setattr(db_module, "engine", test_engine, raising=True)
    monkeypatch.setattr(db_module, "SessionLocal", TestingSessionLocal, raising=True)

    # patch modules that imported these symbols directly
    monkeypatch.setattr(workflow_module, "SessionLocal", TestingSessionLocal, raising=True)
    monkeypatch.setattr(workflow_module, "init_db", lambda: None, raising=True)

    # create tables after patching engine/session factory
    Base.metadata.create_all(bind=test_engine)
    return TestingSessionLocal
