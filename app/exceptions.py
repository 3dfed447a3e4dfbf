"""커스텀 예외 클래스 정의"""


class BaseAppError(Exception):
    """애플리케이션 기본 예외 클래스"""

    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class GeminiServiceUnavailableError(BaseAppError):
    """Gemini API 서비스 일시적 과부하 에러 (503)"""

    def __init__(self, message: str = "AI 채점 서비스가 일시적으로 과부하 상태입니다. 잠시 후 다시 시도해주세요."):
        super().__init__(message, status_code=503)


class GeminiAPIKeyError(BaseAppError):
    """Gemini API 키 관련 에러 (403)"""

    def __init__(self, message: str = "Gemini API 키 문제로 AI 요청에 실패했습니다. 관리자에게 문의하세요."):
        super().__init__(message, status_code=403)


class GradingFailedError(BaseAppError):
    """AI 채점 실패 (502, 호출자가 재시도 가능)"""

    def __init__(self, message: str = "AI 채점 중 오류가 발생했습니다."):
        super().__init__(message, status_code=502)


class QuestionDraftFailedError(BaseAppError):
    """AI 문제 초안 생성 실패 (502)"""

    def __init__(self, message: str = "AI 문제 초안 생성 중 오류가 발생했습니다."):
        super().__init__(message, status_code=502)


class QuestionNotFoundError(BaseAppError):
    """문제를 찾을 수 없을 때 발생하는 예외 (404)"""

    def __init__(self, question_id: int):
        super().__init__(f"문제를 찾을 수 없습니다: {question_id}", status_code=404)


class InvalidQuestionError(BaseAppError):
    """문제 유형과 내용이 맞지 않을 때 발생하는 예외 (400)"""

    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class ResultNotFoundError(BaseAppError):
    """테스트 결과를 찾을 수 없을 때 발생하는 예외 (404)"""

    def __init__(self, test_result_id: int):
        super().__init__(f"테스트 결과를 찾을 수 없습니다: {test_result_id}", status_code=404)


class SubjectiveAnswerNotFoundError(BaseAppError):
    """주관식 답변을 찾을 수 없을 때 발생하는 예외 (404)"""

    def __init__(self, answer_id: int):
        super().__init__(f"주관식 답변을 찾을 수 없습니다: {answer_id}", status_code=404)


class RetestAssignmentNotFoundError(BaseAppError):
    """재시험 배정을 찾을 수 없을 때 발생하는 예외 (404)"""

    def __init__(self, assignment_id: int):
        super().__init__(f"재시험 배정을 찾을 수 없습니다: {assignment_id}", status_code=404)


class UserNotFoundError(BaseAppError):
    """사용자를 찾을 수 없을 때 발생하는 예외 (404)"""

    def __init__(self, user_id: int):
        super().__init__(f"사용자를 찾을 수 없습니다: {user_id}", status_code=404)


class InvalidScoreError(BaseAppError):
    """점수가 허용 범위를 벗어났을 때 발생하는 예외 (400)"""

    def __init__(self, max_score: int):
        super().__init__(f"점수는 0~{max_score} 사이여야 합니다.", status_code=400)


class InvalidReviewStateError(BaseAppError):
    """허용되지 않는 상태 전이 (409)"""

    def __init__(self, message: str):
        super().__init__(message, status_code=409)


class InvalidAttemptStateError(BaseAppError):
    """응시 세션의 선행 조건 위반 (400)"""

    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class PermissionDeniedError(BaseAppError):
    """권한이 없을 때 발생하는 예외 (403)"""

    def __init__(self, message: str = "관리자만 접근할 수 있습니다."):
        super().__init__(message, status_code=403)


class AuthenticationRequiredError(BaseAppError):
    """사용자 식별 정보가 없을 때 발생하는 예외 (401)"""

    def __init__(self, message: str = "사용자 정보가 필요합니다."):
        super().__init__(message, status_code=401)


class InvalidRequestError(BaseAppError):
    """잘못된 요청일 때 발생하는 예외 (400)"""

    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class PostNotFoundError(BaseAppError):
    """교육 게시물을 찾을 수 없을 때 발생하는 예외 (404)"""

    def __init__(self, post_id: int):
        super().__init__(f"교육 게시물을 찾을 수 없습니다: {post_id}", status_code=404)
