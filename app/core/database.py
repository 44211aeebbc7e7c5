from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from core.config import settings

# SQLite (lokální vývoj) potřebuje sdílení spojení mezi vlákny
connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args, pool_pre_ping=True)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base pro modely
Base = declarative_base()

# Dependency pro FastAPI
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
