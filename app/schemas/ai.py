from typing import Literal

from pydantic import BaseModel, Field


class AIGradingRequest(BaseModel):
    """AI 채점 요청 스키마 (내부 사용)"""
    question: str = Field(..., description="문제 내용")
    answer_text: str = Field("", description="학습자 답변")
    image_url: str | None = Field(None, description="답변 첨부 이미지 URL")
    grading_criteria: str = Field(..., description="채점 기준")
    model_answer: str | None = Field(None, description="모범 답안 (참고용)")
    max_score: int = Field(..., gt=0, description="배점")


class AIGradingResponse(BaseModel):
    """AI 채점 응답 스키마 (Structured Output)"""
    score: float = Field(..., description="점수")
    feedback: str = Field("", description="전체 평가 코멘트")
    strengths: list[str] = Field(default_factory=list, description="잘한 점")
    improvements: list[str] = Field(default_factory=list, description="개선할 점")

    def clamped(self, max_score: int) -> "AIGradingResponse":
        """점수를 0~max_score 범위로 보정한 사본"""
        score = min(max(self.score, 0), max_score)
        return self.model_copy(update={"score": score})


class AIQuestionDraftRequest(BaseModel):
    """AI 문제 초안 생성 요청 스키마 (내부 사용)"""
    content: str = Field(..., description="교육 자료 내용")
    question_type: Literal["multiple_choice", "subjective"]
    category: str


class AIQuestionDraftResponse(BaseModel):
    """AI 문제 초안 응답 스키마"""
    question: str
    options: list[str] | None = Field(None, description="선택지 (객관식)")
    correct_answer: int | None = Field(None, description="정답 인덱스 (객관식)")
    grading_criteria: str | None = Field(None, description="채점 기준 (주관식)")
    model_answer: str | None = Field(None, description="모범 답안 (주관식)")
    max_score: int = Field(10, gt=0)
