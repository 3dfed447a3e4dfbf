from app.schemas.ai import (
    AIGradingRequest,
    AIGradingResponse,
    AIQuestionDraftRequest,
    AIQuestionDraftResponse,
)
from app.schemas.exam import (
    AnswerSubmission,
    ExamListResponse,
    ExamResultListResponse,
    ExamResultResponse,
    ExamStartResponse,
    ExamSubmitRequest,
    ExamSubmitResponse,
    GradeRequest,
    GradingResultSchema,
    QuestionOutcome,
)
from app.schemas.question import (
    AttemptQuestionResponse,
    QuestionCreateRequest,
    QuestionDraftRequest,
    QuestionListResponse,
    QuestionResponse,
    QuestionUpdateRequest,
    ReviewQuestionResponse,
)
from app.schemas.retest import (
    RetestCreateRequest,
    RetestListResponse,
    RetestResponse,
)
from app.schemas.review import (
    ExamResultDetailResponse,
    ReviewOverrideRequest,
    ResultSubjectiveAnswer,
    ReviewQueueResponse,
    SubjectiveAnswerResponse,
    WrongAnswerReviewRequest,
    WrongAnswerReviewResponse,
)
from app.schemas.user import ManagerScoreListResponse, ManagerScoreSummary

__all__ = [
    "AIGradingRequest",
    "AIGradingResponse",
    "AIQuestionDraftRequest",
    "AIQuestionDraftResponse",
    "AnswerSubmission",
    "ExamListResponse",
    "ExamResultListResponse",
    "ExamResultResponse",
    "ExamStartResponse",
    "ExamSubmitRequest",
    "ExamSubmitResponse",
    "GradeRequest",
    "GradingResultSchema",
    "QuestionOutcome",
    "AttemptQuestionResponse",
    "QuestionCreateRequest",
    "QuestionDraftRequest",
    "QuestionListResponse",
    "QuestionResponse",
    "QuestionUpdateRequest",
    "ReviewQuestionResponse",
    "RetestCreateRequest",
    "RetestListResponse",
    "RetestResponse",
    "ExamResultDetailResponse",
    "ReviewOverrideRequest",
    "ResultSubjectiveAnswer",
    "ReviewQueueResponse",
    "SubjectiveAnswerResponse",
    "WrongAnswerReviewRequest",
    "WrongAnswerReviewResponse",
    "ManagerScoreListResponse",
    "ManagerScoreSummary",
]
