from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from app.schemas.question import AttemptQuestionResponse, normalize_answer_indices


class GradingResultSchema(BaseModel):
    """주관식 잠정 채점 결과"""
    score: float = Field(..., ge=0)
    max_score: int | None = None
    feedback: str = ""
    strengths: list[str] = Field(default_factory=list)
    improvements: list[str] = Field(default_factory=list)


class GradeRequest(BaseModel):
    """주관식 AI 채점 요청 스키마"""
    question_id: int
    answer_text: str | None = None
    image_url: str | None = None


class AnswerSubmission(BaseModel):
    """문제별 답안 (객관식은 selected, 주관식은 answer_text/image_url)"""
    question_id: int
    selected: list[int] = Field(default_factory=list, description="선택한 선택지 인덱스")
    answer_text: str | None = None
    image_url: str | None = None

    @field_validator("selected", mode="before")
    @classmethod
    def normalize_selected(cls, v):
        return normalize_answer_indices(v) or []


class ExamSubmitRequest(BaseModel):
    """테스트 제출 요청 스키마"""
    category: str = Field(..., min_length=1)
    answers: list[AnswerSubmission] = Field(..., min_length=1)
    retest_assignment_id: int | None = None


class QuestionOutcome(BaseModel):
    """문제별 채점 결과"""
    question_id: int
    question_type: Literal["multiple_choice", "subjective"]
    awarded_score: float
    max_score: int
    is_correct: bool
    selected: list[int] = Field(default_factory=list)
    correct_answer: list[int] | None = None
    grading: GradingResultSchema | None = None
    grading_status: str | None = None


class ExamSubmitResponse(BaseModel):
    """테스트 제출 응답 스키마"""
    test_result_id: int | None
    category: str
    score: int
    correct_count: int
    total_count: int
    outcomes: list[QuestionOutcome]
    save_error: str | None = Field(None, description="결과 저장 실패 시 안내 메시지")


class ExamStartResponse(BaseModel):
    """응시 시작 응답 스키마"""
    category: str
    category_title: str
    retest_assignment_id: int | None = None
    questions: list[AttemptQuestionResponse]
    total: int


class ExamResultResponse(BaseModel):
    """테스트 결과 응답 스키마"""
    id: int
    user_id: int
    category: str
    score: int
    correct_count: int
    total_count: int
    category_scores: dict
    test_date: datetime

    model_config = {"from_attributes": True}


class ExamResultListResponse(BaseModel):
    results: list[ExamResultResponse]
    total: int


class CategorySummary(BaseModel):
    category: str
    title: str
    question_count: int


class ExamListResponse(BaseModel):
    """테스트 목록 응답 스키마 (카테고리 + 최근 결과)"""
    categories: list[CategorySummary]
    recent_results: list[ExamResultResponse]
