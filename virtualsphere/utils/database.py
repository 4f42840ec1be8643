"""
SQLAlchemy 데이터베이스 설정
Engine 생성, Session 관리, Dependency Injection
"""

from pathlib import Path
from typing import Generator
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session, declarative_base

from .config_loader import config
from .logger import get_logger

logger = get_logger(__name__)


def create_db_engine(database_url: str) -> Engine:
    """
    데이터베이스 URL에 맞는 Engine을 생성합니다.

    SQLite는 스레드 간 세션 공유를 허용하고 DB 파일 디렉토리를 미리 만들며,
    그 외(PostgreSQL)는 Connection Pool 설정을 적용합니다.
    """
    url = make_url(database_url)

    if url.get_backend_name() == "sqlite":
        if url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            echo=False,
        )

    return create_engine(
        database_url,
        pool_size=10,          # Connection Pool 크기
        max_overflow=20,       # Pool이 가득 찰 때 추가로 생성할 수 있는 연결 수
        pool_pre_ping=True,    # 연결 전 Health Check
        echo=False,
    )


DATABASE_URL = config.settings.get_database_url()

engine = create_db_engine(DATABASE_URL)

# SessionLocal: Session을 생성하는 Factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)

# Base: 모든 ORM 모델의 부모 클래스
Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI Dependency로 사용될 DB 세션 제공

    Usage:
        @router.get("/users/{user_id}")
        def get_user(user_id: str, db: Session = Depends(get_db)):
            return db.get(UserORM, user_id)

    Yields:
        Session: SQLAlchemy Session 객체
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def health_check(session_factory: sessionmaker = SessionLocal) -> bool:
    """
    데이터베이스 연결 상태 확인

    Returns:
        bool: 연결 성공 시 True, 실패 시 False
    """
    db = session_factory()
    try:
        db.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.error(f"Database health check 실패: {e}")
        return False
    finally:
        db.close()


def init_db(bind: Engine = engine) -> None:
    """
    데이터베이스 테이블 생성
    ORM 모델이 정의된 후 호출해야 함

    주의: 프로덕션에서는 Alembic 마이그레이션 사용 권장
    """
    # ORM 모델을 Base.metadata에 등록
    from virtualsphere.models import orm_models  # noqa: F401

    Base.metadata.create_all(bind=bind)
    logger.info("데이터베이스 테이블 생성 완료")
