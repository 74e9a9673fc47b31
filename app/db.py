# app/db.py

from sqlmodel import SQLModel, create_engine, Session

from app.config import DATABASE_URL

# SQLite needs check_same_thread off for FastAPI's threadpool
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

# Engine = connection to the database
engine = create_engine(
    DATABASE_URL,
    echo=False,
    connect_args=connect_args,
)


def create_db_and_tables(bind=engine):
    # models must be imported so their tables are registered
    from app import models  # noqa: F401

    SQLModel.metadata.create_all(bind)


# Dependency: one session per request
def get_session():
    with Session(engine) as session:
        yield session
