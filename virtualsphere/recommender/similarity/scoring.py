"""
태그 겹침 기반 유사도 계산

overlap(A, B) = |A ∩ B| / max(|A|, |B|)   (한쪽이라도 비어 있으면 0)
similarity   = w_interest × overlap(관심사) + w_goal × overlap(목표)
"""

from typing import Iterable


def calculate_overlap_ratio(tags_a: Iterable[str], tags_b: Iterable[str]) -> float:
    """
    두 태그 집합의 겹침 비율 계산

    Args:
        tags_a: 태그 목록 A (중복은 집합으로 취급)
        tags_b: 태그 목록 B

    Returns:
        float: 0~1 사이의 겹침 비율
    """
    set_a = set(tags_a)
    set_b = set(tags_b)

    if not set_a or not set_b:
        return 0.0

    return len(set_a & set_b) / max(len(set_a), len(set_b))


def calculate_similarity(
    subject_interests: Iterable[str],
    subject_goals: Iterable[str],
    candidate_interests: Iterable[str],
    candidate_goals: Iterable[str],
    interest_weight: float = 0.6,
    goal_weight: float = 0.4
) -> float:
    """
    관심사/목표 가중 유사도 계산

    가중치 합이 1 이하이면 결과는 항상 0~1 범위입니다.
    반올림하지 않고 원래 정밀도를 유지합니다.

    Args:
        subject_interests: 추천을 받는 사용자의 관심사
        subject_goals: 추천을 받는 사용자의 목표
        candidate_interests: 후보 사용자의 관심사
        candidate_goals: 후보 사용자의 목표
        interest_weight: 관심사 가중치
        goal_weight: 목표 가중치

    Returns:
        float: 유사도 점수
    """
    interest_score = calculate_overlap_ratio(subject_interests, candidate_interests)
    goal_score = calculate_overlap_ratio(subject_goals, candidate_goals)

    return interest_weight * interest_score + goal_weight * goal_score
