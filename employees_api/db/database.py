"""
Database connection and session management
"""
import logging

from sqlalchemy import create_engine, select, func
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from employees_api.core.config import settings

logger = logging.getLogger(__name__)


def build_engine(database_url: str) -> Engine:
    """Create an engine with a bounded connection pool.

    Requests queue for up to ``db_pool_timeout`` seconds when the pool is
    exhausted. SQLite uses its own pool classes and ignores the sizing knobs.
    """
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            echo=False,
        )
    return create_engine(
        database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout,
        pool_pre_ping=True,
        pool_recycle=3600,
        echo=False,
    )


# Create SQLAlchemy engine
engine = build_engine(settings.database_url)

# Create session factory
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False
)

# Create declarative base
Base = declarative_base()


def get_db():
    """Dependency to get database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


DEFAULT_DEPARTMENTS = [
    ("d001", "Marketing"),
    ("d002", "Finance"),
    ("d003", "Human Resources"),
    ("d004", "Production"),
    ("d005", "Development"),
    ("d006", "Quality Management"),
    ("d007", "Sales"),
    ("d008", "Research"),
    ("d009", "Customer Service"),
]

DEFAULT_TITLES = [
    "Assistant Engineer",
    "Engineer",
    "Manager",
    "Senior Engineer",
    "Senior Staff",
    "Staff",
    "Technique Leader",
]


def seed_catalogs(bind: Engine) -> None:
    """Insert the standard department and title catalogs into empty tables"""
    from employees_api.models.models import Department, TitleCatalog

    with sessionmaker(bind=bind).begin() as session:
        if not session.scalar(select(func.count()).select_from(Department)):
            session.add_all(
                Department(dept_no=dept_no, dept_name=name)
                for dept_no, name in DEFAULT_DEPARTMENTS
            )
            logger.info("Seeded %d departments", len(DEFAULT_DEPARTMENTS))
        if not session.scalar(select(func.count()).select_from(TitleCatalog)):
            session.add_all(TitleCatalog(title=title) for title in DEFAULT_TITLES)
            logger.info("Seeded %d titles", len(DEFAULT_TITLES))


def init_db(bind: Engine = engine) -> None:
    """Create missing tables and, if enabled, seed the reference catalogs"""
    # Models must be imported so their tables are registered on Base.metadata
    from employees_api.models import models  # noqa: F401

    Base.metadata.create_all(bind=bind)
    if settings.seed_catalogs:
        seed_catalogs(bind)
