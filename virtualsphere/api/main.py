"""
FastAPI 메인 애플리케이션

VirtualSphere 추천 API 서버
- 유사 사용자 / 프로젝트 추천
- 관심사 업데이트 및 가상 휴먼 전파
- 메인 백엔드 데이터 동기화 스케줄러
"""

import asyncio
from datetime import datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
import pytz

from virtualsphere.api.routers import recommendations, users
from virtualsphere.utils.logger import get_logger
from virtualsphere.utils.config_loader import config
from virtualsphere.utils.database import init_db
from virtualsphere.clients.backend_client import ApiClient
from virtualsphere.services.data_sync_service import DataSyncService

logger = get_logger(__name__)

SYNC_JOB_ID = "data_sync"

DEFAULT_SYNC_TIMEZONE = "Asia/Seoul"

scheduler = BackgroundScheduler(timezone=pytz.timezone(DEFAULT_SYNC_TIMEZONE))

app = FastAPI(
    title="VirtualSphere Recommendation API",
    description="유사 사용자/프로젝트 추천 및 관심사 전파 API",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # 프로덕션에서는 특정 도메인만 허용
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(recommendations.router)
app.include_router(users.router)


def run_data_sync() -> bool:
    """
    메인 백엔드 데이터 동기화 작업

    스케줄러(백그라운드 스레드)가 호출하는 함수

    Returns:
        bool: 성공 여부
    """
    logger.info("=" * 60)
    logger.info("스케줄러: 데이터 동기화 시작")
    logger.info(f"실행 시각: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    logger.info("=" * 60)

    try:
        service = DataSyncService(ApiClient())
        synced = asyncio.run(service.run_sync())
        logger.info(
            f"스케줄러: 데이터 동기화 완료 - users={len(synced.users)}, "
            f"virtual_humans={len(synced.virtual_humans)}, projects={len(synced.projects)}"
        )
        return True
    except Exception as e:
        logger.error(f"스케줄러: 데이터 동기화 실패 - {e}", exc_info=True)
        return False


def schedule_data_sync():
    """
    동기화 크론 작업 등록

    sync.timezone / sync.cron 설정은 config 로드 이후에 읽습니다.

    Returns:
        Job: 등록된 스케줄러 작업
    """
    timezone = pytz.timezone(config.get("sync.timezone", DEFAULT_SYNC_TIMEZONE))

    job = scheduler.add_job(
        run_data_sync,
        CronTrigger(
            hour=config.get("sync.cron.hour", 4),
            minute=config.get("sync.cron.minute", 50),
            timezone=timezone,
        ),
        id=SYNC_JOB_ID,
        name='메인 백엔드 데이터 동기화',
        replace_existing=True
    )
    logger.info(f"동기화 작업 등록: {job.trigger} ({timezone})")
    return job


@app.on_event("startup")
def startup_event():
    """
    서버 시작 시 실행되는 이벤트

    - 설정 파일 로드
    - 테이블 생성
    - 동기화 스케줄러 시작 (sync.enabled=true일 때)
    """
    logger.info("=" * 60)
    logger.info("FastAPI 서버 시작")
    logger.info("=" * 60)

    try:
        config.load_config()
        logger.info(f"유사도 가중치: {config.get_similarity_weights()}")
    except (FileNotFoundError, ValueError) as e:
        logger.warning(f"Config 로드 실패, 기본값 사용: {e}")

    init_db()

    if not config.get("sync.enabled", False):
        logger.info("데이터 동기화 스케줄러 비활성화 (sync.enabled=false)")
        return

    try:
        schedule_data_sync()
        scheduler.start()
        logger.info("스케줄러 시작 완료")

    except Exception as e:
        logger.error(f"스케줄러 시작 실패: {e}", exc_info=True)


@app.on_event("shutdown")
def shutdown_event():
    """
    서버 종료 시 실행되는 이벤트

    - 스케줄러 종료
    """
    logger.info("FastAPI 서버 종료")

    if scheduler.running:
        scheduler.shutdown()
        logger.info("스케줄러 종료 완료")


@app.get("/")
def root():
    """
    루트 엔드포인트

    Returns:
        dict: 서비스 정보
    """
    return {
        "service": "VirtualSphere Recommendation API",
        "version": "1.0.0",
        "status": "running",
        "endpoints": {
            "health": "/recommendations/health",
            "similar_users": "/recommendations/users/{user_id}",
            "projects": "/recommendations/projects/{user_id}",
            "interests": "/users/{user_id}/interests",
            "config": "/recommendations/config",
            "stats": "/recommendations/stats",
            "docs": "/docs"
        }
    }


@app.get("/scheduler/status")
def scheduler_status():
    """
    스케줄러 상태 확인

    Returns:
        dict: 스케줄러 정보
    """
    jobs = []
    for job in scheduler.get_jobs():
        jobs.append({
            "id": job.id,
            "name": job.name,
            "next_run_time": job.next_run_time.strftime('%Y-%m-%d %H:%M:%S') if job.next_run_time else None,
            "trigger": str(job.trigger)
        })

    return {
        "scheduler_running": scheduler.running,
        "jobs": jobs
    }


@app.post("/scheduler/run-now")
def run_data_sync_now():
    """
    데이터 동기화 즉시 실행 (수동 트리거)

    Returns:
        dict: 실행 결과
    """
    logger.info("수동 트리거: 데이터 동기화 즉시 실행")
    succeeded = run_data_sync()

    return {
        "status": "success" if succeeded else "error",
        "message": "데이터 동기화가 실행되었습니다" if succeeded else "데이터 동기화 실패 (서버 로그 확인)",
        "timestamp": datetime.now().isoformat()
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "virtualsphere.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
