from pydantic import BaseModel


class ManagerScoreSummary(BaseModel):
    """매니저별 평균 점수 요약"""
    user_id: int
    username: str
    name: str | None
    average_score: float | None
    total_tests: int


class ManagerScoreListResponse(BaseModel):
    managers: list[ManagerScoreSummary]
    total: int
