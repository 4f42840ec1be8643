"""
추천 엔진 예외 정의

- SubjectNotFoundError: 추천 대상 사용자가 존재하지 않음 (404)
- UpstreamReadError: 사용자/후보 조회 실패, 재시도 가능 (503)

관심사/목표가 없는 사용자는 예외가 아니라 빈 결과로 처리합니다.
"""


class RecommendationError(Exception):
    """추천 처리 중 발생하는 오류의 기본 클래스"""
    retryable = False


class SubjectNotFoundError(RecommendationError):
    """추천 대상 사용자를 찾을 수 없음"""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"사용자를 찾을 수 없습니다: {user_id}")


class UpstreamReadError(RecommendationError):
    """저장소 조회 실패 (빈 결과와 구분되어야 함)"""
    retryable = True

    def __init__(self, stage: str, cause: Exception):
        self.stage = stage
        self.cause = cause
        super().__init__(f"{stage} 조회 실패: {cause}")
