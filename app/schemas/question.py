from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

QuestionType = Literal["multiple_choice", "subjective"]


def normalize_answer_indices(value):
    """정답/선택 인덱스를 정렬된 중복 없는 리스트로 정규화 (단일 정수도 허용)"""
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError("정답 인덱스는 정수여야 합니다")
    if isinstance(value, int):
        return [value]
    if isinstance(value, (list, tuple, set, frozenset)):
        if any(isinstance(v, bool) or not isinstance(v, int) for v in value):
            raise ValueError("정답 인덱스는 정수여야 합니다")
        return sorted(set(value))
    raise ValueError("정답 인덱스는 정수 또는 정수 목록이어야 합니다")


class QuestionCreateRequest(BaseModel):
    """문제 생성 요청 스키마"""
    category: str = Field(..., min_length=1, description="카테고리")
    sub_category: str | None = Field(None, description="세부 카테고리")
    question: str = Field(..., min_length=1, description="문제 내용")
    question_image_urls: list[str] = Field(default_factory=list, description="문제 이미지 URL 목록")
    question_type: QuestionType = Field("multiple_choice", description="문제 유형")
    options: list[str] | None = Field(None, description="선택지 (객관식)")
    correct_answer: list[int] | None = Field(None, description="정답 인덱스 집합 (객관식, 단일 정수 허용)")
    grading_criteria: str | None = Field(None, description="채점 기준 (주관식)")
    model_answer: str | None = Field(None, description="모범 답안 (주관식)")
    max_score: int = Field(10, gt=0, description="배점")
    related_post_id: int | None = Field(None, description="관련 교육 게시물 ID")

    @field_validator("correct_answer", mode="before")
    @classmethod
    def normalize_correct_answer(cls, v):
        return normalize_answer_indices(v)


class QuestionUpdateRequest(BaseModel):
    """문제 수정 요청 스키마 (전달된 필드만 반영)"""
    category: str | None = Field(None, min_length=1)
    sub_category: str | None = None
    question: str | None = Field(None, min_length=1)
    question_image_urls: list[str] | None = None
    question_type: QuestionType | None = None
    options: list[str] | None = None
    correct_answer: list[int] | None = None
    grading_criteria: str | None = None
    model_answer: str | None = None
    max_score: int | None = Field(None, gt=0)
    related_post_id: int | None = None

    @field_validator("correct_answer", mode="before")
    @classmethod
    def normalize_correct_answer(cls, v):
        return normalize_answer_indices(v)


class QuestionResponse(BaseModel):
    """문제 응답 스키마 (관리자용, 정답 포함)"""
    id: int
    category: str
    sub_category: str | None
    question: str
    question_image_urls: list[str]
    question_type: QuestionType
    options: list[str] | None
    correct_answer: list[int] | None
    grading_criteria: str | None
    model_answer: str | None
    max_score: int
    related_post_id: int | None
    created_at: datetime

    model_config = {"from_attributes": True}


class QuestionListResponse(BaseModel):
    """문제 목록 응답 스키마"""
    questions: list[QuestionResponse]
    total: int


class AttemptQuestionResponse(BaseModel):
    """응시용 문제 스키마 (정답, 채점 기준, 모범 답안 제외)"""
    id: int
    category: str
    sub_category: str | None
    question: str
    question_image_urls: list[str]
    question_type: QuestionType
    options: list[str] | None
    max_score: int
    related_post_id: int | None

    model_config = {"from_attributes": True}


class ReviewQuestionResponse(BaseModel):
    """오답 복습용 문제 스키마 (정답 포함, 클라이언트에서 오답 판별)"""
    id: int
    category: str
    question: str
    question_type: QuestionType
    question_image_urls: list[str]
    options: list[str]
    correct_answer: list[int]
    max_score: int
    related_post_id: int | None
    related_post_title: str | None = None


class QuestionDraftRequest(BaseModel):
    """AI 문제 초안 생성 요청 스키마 (게시물 ID 또는 본문 중 하나)"""
    question_type: QuestionType = "multiple_choice"
    category: str = Field(..., min_length=1)
    post_id: int | None = Field(None, description="교육 게시물 ID")
    content: str | None = Field(None, description="교육 자료 본문")
