"""
더미 데이터 생성 스크립트

Faker 라이브러리를 사용하여 추천 테스트용 더미 데이터를 생성합니다.

생성 데이터:
- 사용자: 40명 (관심사 2~5개, 목표 0~3개)
- 가상 휴먼: 사용자당 0~2개
- 프로젝트: 25개 (태그 1~4개, 참여자 1~4명)

실행 방법:
    python scripts/generate_dummy_data.py

    # 기존 데이터 유지하고 추가만
    python scripts/generate_dummy_data.py --keep-existing

    # 기존 데이터 삭제하고 새로 생성
    python scripts/generate_dummy_data.py --clear
"""

import os
import sys
import random
import argparse
from datetime import datetime, timedelta
from faker import Faker
from sqlalchemy import text

# 프로젝트 루트를 Python 경로에 추가
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from virtualsphere.utils.logger import get_logger
from virtualsphere.utils.database import engine, SessionLocal, init_db
from virtualsphere.models.orm_models import (
    UserORM,
    VirtualHumanORM,
    ProjectORM,
    ProjectTagORM,
    ProjectMemberORM,
    TAG_KIND_INTEREST,
    TAG_KIND_GOAL,
)
from virtualsphere.models.schemas import Visibility

logger = get_logger(__name__)

fake = Faker('ko_KR')
Faker.seed(42)
random.seed(42)


class DummyDataGenerator:
    """
    더미 데이터 생성기
    """

    INTERESTS = [
        'ai', 'music', 'travel', 'photography', 'gaming', 'fitness', 'cooking',
        'reading', 'design', 'blockchain', 'nft', 'film', 'startup', 'language',
    ]
    GOALS = [
        'learn-python', 'run-marathon', 'launch-startup', 'write-book',
        'learn-japanese', 'build-portfolio', 'make-friends', 'save-money',
    ]
    PERSONALITIES = ['friendly', 'calm', 'energetic', 'analytical', 'creative']
    CATEGORIES = ['tech', 'art', 'education', 'social', 'business']
    PROJECT_STATUSES = ['planning', 'in-progress', 'completed']
    VISIBILITIES = [v.value for v in Visibility]

    def __init__(self):
        """
        기존 database.py의 engine과 SessionLocal 사용
        """
        self.engine = engine
        self.session = SessionLocal()

        logger.info(f"DB 연결: {self.engine.url}")

    def clear_existing_data(self):
        """
        기존 데이터 삭제 (외래키 순서 고려)
        """
        logger.warning("기존 데이터 삭제 중...")

        with self.engine.connect() as conn:
            # 외래키 순서: 자식 → 부모
            conn.execute(text("DELETE FROM project_member"))
            conn.execute(text("DELETE FROM project_tag"))
            conn.execute(text("DELETE FROM project"))
            conn.execute(text("DELETE FROM virtual_human"))
            conn.execute(text("DELETE FROM user_tag"))
            conn.execute(text("DELETE FROM users"))
            conn.commit()

        logger.info("기존 데이터 삭제 완료")

    def generate_users(self, count=40):
        """
        사용자 데이터 생성

        Args:
            count: 생성할 사용자 수

        Returns:
            list: 생성된 user_id 리스트
        """
        logger.info(f"사용자 {count}명 생성 중...")

        user_ids = []
        for i in range(1, count + 1):
            user_id = f"user{i:04d}"

            user = UserORM(
                user_id=user_id,
                username=f"{fake.user_name()}{i}"[:30],
                full_name=fake.name(),
                bio=fake.sentence(),
                skills=random.sample(self.INTERESTS, random.randint(0, 2)),
                created_at=datetime.now() - timedelta(days=random.randint(0, 180)),
            )
            user.set_tags(TAG_KIND_INTEREST, random.sample(self.INTERESTS, random.randint(2, 5)))
            # 10% 확률로 목표 없음
            goal_count = random.randint(1, 3) if random.random() > 0.1 else 0
            user.set_tags(TAG_KIND_GOAL, random.sample(self.GOALS, goal_count))

            self.session.add(user)
            user_ids.append(user_id)

        self.session.commit()
        logger.info(f"사용자 {count}명 생성 완료")
        return user_ids

    def generate_virtual_humans(self, user_ids):
        """
        가상 휴먼 생성 (사용자당 0~2개, 소유자 관심사 일부를 물려받음)

        Returns:
            int: 생성된 가상 휴먼 수
        """
        logger.info("가상 휴먼 생성 중...")

        created = 0
        for user_id in user_ids:
            owner = self.session.get(UserORM, user_id)
            for _ in range(random.randint(0, 2)):
                created += 1
                self.session.add(VirtualHumanORM(
                    virtual_human_id=f"vh{created:05d}",
                    owner_id=user_id,
                    name=fake.first_name(),
                    personality=random.choice(self.PERSONALITIES),
                    description=fake.sentence(),
                    interests=owner.interests[:2],
                    goals=owner.goals[:1],
                    skills=[],
                ))

        self.session.commit()
        logger.info(f"가상 휴먼 {created}개 생성 완료")
        return created

    def generate_projects(self, user_ids, count=25):
        """
        프로젝트 생성

        Args:
            user_ids: 사용자 ID 리스트
            count: 생성할 프로젝트 수

        Returns:
            list: 생성된 project_id 리스트
        """
        logger.info(f"프로젝트 {count}개 생성 중...")

        project_ids = []
        for i in range(1, count + 1):
            project_id = f"proj{i:04d}"
            creator_id = random.choice(user_ids)
            members = {creator_id} | set(random.sample(user_ids, random.randint(0, 3)))
            tags = random.sample(self.INTERESTS + self.GOALS, random.randint(1, 4))

            # 공개 70%, 링크 공개 20%, 비공개 10%
            visibility = random.choices(self.VISIBILITIES, weights=[7, 2, 1])[0]

            self.session.add(ProjectORM(
                project_id=project_id,
                title=fake.catch_phrase()[:200],
                description=fake.paragraph(),
                category=random.choice(self.CATEGORIES),
                status=random.choice(self.PROJECT_STATUSES),
                progress=random.randint(0, 100),
                visibility=visibility,
                creator_id=creator_id,
                created_at=datetime.now() - timedelta(days=random.randint(0, 90)),
                tags=[ProjectTagORM(tag=tag) for tag in tags],
                members=[
                    ProjectMemberORM(user_id=uid, role="owner" if uid == creator_id else "member")
                    for uid in sorted(members)
                ],
            ))
            project_ids.append(project_id)

        self.session.commit()
        logger.info(f"프로젝트 {len(project_ids)}개 생성 완료")
        return project_ids

    def generate_all(self, user_count=40, project_count=25):
        """
        모든 더미 데이터 생성

        Args:
            user_count: 사용자 수
            project_count: 프로젝트 수
        """
        logger.info("=" * 60)
        logger.info("더미 데이터 생성 시작")
        logger.info("=" * 60)

        try:
            user_ids = self.generate_users(user_count)
            vh_count = self.generate_virtual_humans(user_ids)
            project_ids = self.generate_projects(user_ids, project_count)

            logger.info("=" * 60)
            logger.info("더미 데이터 생성 완료")
            logger.info(f"  - 사용자: {len(user_ids)}명")
            logger.info(f"  - 가상 휴먼: {vh_count}개")
            logger.info(f"  - 프로젝트: {len(project_ids)}개")
            logger.info("=" * 60)

        except Exception as e:
            logger.error(f"더미 데이터 생성 실패: {e}", exc_info=True)
            self.session.rollback()
            raise
        finally:
            self.session.close()


def main():
    """메인 실행 함수"""
    parser = argparse.ArgumentParser(description='더미 데이터 생성')
    parser.add_argument('--clear', action='store_true', help='기존 데이터 삭제 후 생성')
    parser.add_argument('--keep-existing', action='store_true', help='기존 데이터 유지하고 추가')
    parser.add_argument('--users', type=int, default=40, help='사용자 수 (기본: 40)')
    parser.add_argument('--projects', type=int, default=25, help='프로젝트 수 (기본: 25)')

    args = parser.parse_args()

    try:
        init_db()
        generator = DummyDataGenerator()

        if args.clear:
            generator.clear_existing_data()
        elif not args.keep_existing:
            response = input("기존 데이터를 삭제하시겠습니까? (y/N): ")
            if response.lower() == 'y':
                generator.clear_existing_data()

        generator.generate_all(user_count=args.users, project_count=args.projects)

        logger.info("다음 단계: uvicorn virtualsphere.api.main:app --reload")
        sys.exit(0)

    except Exception as e:
        logger.error(f"실행 실패: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
