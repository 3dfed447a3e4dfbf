from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from app.schemas.exam import ExamResultResponse
from app.schemas.question import ReviewQuestionResponse, normalize_answer_indices

SubjectiveStatus = Literal["pending", "ai_graded", "admin_reviewed"]


class SubjectiveAnswerResponse(BaseModel):
    """주관식 답변 기록 응답 스키마"""
    id: int
    question_id: int
    user_id: int
    test_result_id: int | None
    answer_text: str | None
    image_url: str | None
    ai_score: float | None
    ai_feedback: str | None
    ai_graded_at: datetime | None
    admin_score: float | None
    admin_feedback: str | None
    admin_reviewer_id: int | None
    admin_reviewed_at: datetime | None
    final_score: float | None
    status: SubjectiveStatus
    created_at: datetime

    model_config = {"from_attributes": True}


class ReviewQueueItem(SubjectiveAnswerResponse):
    """검토 대기 항목 (문제 및 응시자 정보 포함)"""
    question: str
    max_score: int
    grading_criteria: str | None
    model_answer: str | None
    category: str
    username: str | None


class ReviewQueueResponse(BaseModel):
    """관리자 검토 대기열 응답 스키마"""
    answers: list[ReviewQueueItem]
    total_pending: int
    total_ai_graded: int
    total: int


class ReviewOverrideRequest(BaseModel):
    """관리자 점수 수정 요청 스키마 (범위 검증은 서비스에서 문제 배점 기준으로 수행)"""
    score: float
    feedback: str | None = None


class ResultSubjectiveAnswer(SubjectiveAnswerResponse):
    """결과 상세의 주관식 답변 (문제 정보 포함)"""
    question: str
    max_score: int
    category: str


class ExamResultDetailResponse(BaseModel):
    """테스트 결과 상세 (주관식 피드백 포함)"""
    result: ExamResultResponse
    subjective_answers: list[ResultSubjectiveAnswer]


class WrongAnswerSubmission(BaseModel):
    question_id: int
    selected: list[int] = Field(default_factory=list)

    @field_validator("selected", mode="before")
    @classmethod
    def normalize_selected(cls, v):
        return normalize_answer_indices(v) or []


class WrongAnswerReviewRequest(BaseModel):
    """오답 복습 제출 요청 스키마"""
    test_result_id: int
    answers: list[WrongAnswerSubmission] = Field(..., min_length=1)


class WrongAnswerReviewItem(BaseModel):
    question_id: int
    selected: list[int]
    correct_answer: list[int]
    is_correct: bool


class WrongAnswerReviewResponse(BaseModel):
    """오답 복습 결과 응답 스키마"""
    test_result_id: int
    score: int
    correct_count: int
    total_count: int
    items: list[WrongAnswerReviewItem]


class ReviewQuestionListResponse(BaseModel):
    test_result_id: int
    category_title: str
    questions: list[ReviewQuestionResponse]
    total: int
