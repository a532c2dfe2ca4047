"""
Database configuration and session management
"""
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi import Request
from typing import Generator, Optional
import logging

from app.core.exceptions import AppError

logger = logging.getLogger(__name__)

# Create Base class for models
Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE unless this is set per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    Store handle owning the connection pool and the session factory.

    Built once by the application factory and handed to request handlers
    through the ``get_db`` dependency.
    """

    def __init__(self, url: str, echo: bool = False, engine: Optional[Engine] = None):
        self.url = url

        if engine is None:
            engine = self._create_engine(url, echo)
        self.engine = engine

        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine
        )

    @staticmethod
    def _create_engine(url: str, echo: bool) -> Engine:
        if not url:
            raise ValueError("DATABASE_URL is not configured")

        logger.info("Creating database engine...")

        if url.startswith("sqlite"):
            connect_args = {"check_same_thread": False}
            if url in ("sqlite://", "sqlite:///:memory:"):
                # In-memory databases only exist per connection, so share one
                return create_engine(
                    url,
                    connect_args=connect_args,
                    poolclass=StaticPool,
                    echo=echo,
                )
            return create_engine(url, connect_args=connect_args, echo=echo)

        return create_engine(
            url,
            pool_pre_ping=True,
            pool_size=5,
            max_overflow=10,
            pool_timeout=30,
            pool_recycle=1800,  # Recycle connections after 30 min
            echo=echo,
        )

    def session(self) -> Session:
        """Open a new ORM session bound to this store"""
        return self.SessionLocal()

    def create_all(self):
        """Create all tables declared on ``Base``"""
        Base.metadata.create_all(bind=self.engine)

    def drop_all(self):
        Base.metadata.drop_all(bind=self.engine)

    def dispose(self):
        self.engine.dispose()


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Dependency function to get database session.
    Use this in FastAPI route dependencies.

    Example:
        @router.get("/users")
        def get_users(db: Session = Depends(get_db)):
            return db.query(User).all()
    """
    database: Database = request.app.state.database
    db = database.session()
    try:
        yield db
    except AppError:
        db.rollback()
        raise
    except Exception as e:
        logger.error(f"Database session error: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def init_db(database: Database, settings) -> None:
    """Create tables if needed and seed the administrator account"""
    from app.core.security import get_password_hash
    from app.models import User

    try:
        database.create_all()
        logger.info("Database tables initialized")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise

    db = database.session()
    try:
        admin = db.query(User).filter(User.role == "admin").first()
        if admin is None:
            db.add(User(
                username=settings.ADMIN_USERNAME,
                email=settings.ADMIN_EMAIL,
                password=get_password_hash(settings.ADMIN_PASSWORD),
                full_name=settings.ADMIN_FULL_NAME,
                role="admin",
            ))
            db.commit()
            logger.info(f"Admin user created: {settings.ADMIN_EMAIL}")
    finally:
        db.close()
