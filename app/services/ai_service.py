import asyncio
import json
import logging
import os
import random
import re

import httpx
from google import genai
from google.genai import types
from google.genai.errors import ClientError, ServerError
from pydantic import ValidationError

from app.core.config import settings
from app.exceptions import (
    GeminiAPIKeyError,
    GeminiServiceUnavailableError,
    GradingFailedError,
    QuestionDraftFailedError,
)
from app.schemas.ai import (
    AIGradingRequest,
    AIGradingResponse,
    AIQuestionDraftRequest,
    AIQuestionDraftResponse,
)

logger = logging.getLogger(__name__)

_gemini_client: genai.Client | None = None
# 동시 Gemini API 요청 수 제한 (제출 시 주관식 일괄 채점 과부하 방지)
_gemini_semaphore: asyncio.Semaphore | None = None

GRADING_SYSTEM_PROMPT = """당신은 매니저 교육 프로그램의 채점 전문가입니다.
주어진 문제에 대한 답변을 채점 기준에 따라 공정하고 상세하게 평가합니다.
점수는 0점부터 {max_score}점까지 부여할 수 있습니다.

채점 시 다음 사항을 고려하세요:
1. 답변이 문제의 핵심을 이해하고 있는지
2. 채점 기준에 명시된 요소들이 포함되어 있는지
3. 실제 상황에서 적용 가능한 답변인지
4. 전문성과 공감 능력이 드러나는지

응답은 반드시 다음 JSON 형식으로 해주세요:
{{
  "score": 점수(숫자),
  "feedback": "전체적인 평가 코멘트",
  "strengths": ["잘한 점 1", "잘한 점 2"],
  "improvements": ["개선할 점 1", "개선할 점 2"]
}}"""

DRAFT_SYSTEM_PROMPT = """당신은 매니저 교육 프로그램의 문제 출제 전문가입니다.
주어진 교육 자료를 분석하여 교육 효과를 측정할 수 있는 좋은 문제를 만듭니다.
카테고리: {category}

반드시 JSON 형식으로만 응답하세요."""

# 교육 자료는 앞부분만 프롬프트에 사용
DRAFT_CONTENT_LIMIT = 3000


def get_gemini_client() -> genai.Client:
    """Gemini 클라이언트 싱글톤"""
    global _gemini_client
    if _gemini_client is None:
        api_key = settings.gemini_api_key or os.getenv("GEMINI_API_KEY")
        if not api_key:
            raise ValueError("GEMINI_API_KEY가 설정되지 않았습니다")
        _gemini_client = genai.Client(api_key=api_key)
    return _gemini_client


def get_gemini_semaphore() -> asyncio.Semaphore:
    """Gemini API 동시 요청 제한 Semaphore 싱글톤"""
    global _gemini_semaphore
    if _gemini_semaphore is None:
        max_concurrent = settings.gemini_max_concurrent
        _gemini_semaphore = asyncio.Semaphore(max_concurrent)
        logger.info(f"Gemini API 동시 요청 제한 설정: 최대 {max_concurrent}개")
    return _gemini_semaphore


def parse_json_response(text: str | None) -> dict:
    """모델 응답에서 JSON 객체 추출 (마크다운 코드 블록 허용)"""
    if not text:
        raise ValueError("AI 응답이 비어있습니다")

    result = text.strip()
    if result.startswith("```json"):
        result = result[7:]
    if result.startswith("```"):
        result = result[3:]
    if result.endswith("```"):
        result = result[:-3]
    result = result.strip()

    try:
        data = json.loads(result)
    except json.JSONDecodeError:
        match = re.search(r"\{[\s\S]*\}", result)
        if not match:
            raise ValueError("AI 응답에서 JSON을 찾을 수 없습니다")
        data = json.loads(match.group(0))

    if not isinstance(data, dict):
        raise ValueError("AI 응답이 JSON 객체가 아닙니다")
    return data


async def fetch_image_part(image_url: str) -> types.Part:
    """답변 첨부 이미지를 내려받아 Gemini 입력 Part로 변환"""
    async with httpx.AsyncClient(timeout=10.0, follow_redirects=True) as client:
        response = await client.get(image_url)
        response.raise_for_status()
    mime_type = response.headers.get("content-type", "image/jpeg").split(";")[0].strip()
    return types.Part.from_bytes(data=response.content, mime_type=mime_type)


async def call_gemini_json(
    contents: list,
    system_instruction: str,
    temperature: float,
) -> dict:
    """Gemini 호출 후 JSON 응답 파싱 (재시도 로직 포함, 동시 요청 제한)"""
    client = get_gemini_client()
    semaphore = get_gemini_semaphore()

    # 재시도 설정 (503 에러 대응)
    max_retries = 5
    base_delay = 2.0
    max_delay = 16.0

    async with semaphore:
        for attempt in range(max_retries):
            try:
                # Gemini는 동기 API이므로 asyncio로 래핑
                loop = asyncio.get_running_loop()
                response = await loop.run_in_executor(
                    None,
                    lambda: client.models.generate_content(
                        model=settings.gemini_model,
                        contents=contents,
                        config=types.GenerateContentConfig(
                            system_instruction=system_instruction,
                            temperature=temperature,
                            response_mime_type="application/json",
                        ),
                    ),
                )

                data = parse_json_response(response.text)

                if attempt > 0:
                    logger.info(f"Gemini API 호출 성공 (시도 {attempt + 1}/{max_retries})")
                return data

            except ClientError as e:
                error_message = str(e).lower()
                if "403" in str(e) or "permission_denied" in error_message or "leaked" in error_message:
                    logger.error(
                        f"Gemini API 키 문제 감지: status_code=403, "
                        f"error_type={type(e).__name__}"
                    )
                    raise GeminiAPIKeyError()
                logger.error(
                    f"Gemini API ClientError: status_code={getattr(e, 'code', 'unknown')}, "
                    f"error_type={type(e).__name__}"
                )
                raise
            except ServerError as e:
                error_message = str(e)
                if "503" in error_message or "UNAVAILABLE" in error_message or "overloaded" in error_message.lower():
                    if attempt < max_retries - 1:
                        # 지수 백오프 + jitter: 2초, 4초, 8초, 16초 (최대 16초)
                        delay = min(base_delay * (2 ** attempt), max_delay)
                        jitter = delay * 0.2 * (random.random() * 2 - 1)
                        delay_with_jitter = max(0.5, delay + jitter)

                        logger.warning(
                            f"Gemini API 503 에러 발생 (시도 {attempt + 1}/{max_retries}). "
                            f"{delay_with_jitter:.1f}초 후 재시도합니다. (에러: {error_message[:100]})"
                        )
                        await asyncio.sleep(delay_with_jitter)
                        continue
                    logger.error(
                        f"Gemini API 503 에러: 최대 재시도 횟수({max_retries}) 도달. "
                        f"에러 메시지: {error_message}"
                    )
                    raise GeminiServiceUnavailableError()
                logger.error(f"Gemini API ServerError (503 아님): {error_message}")
                raise
            except Exception as e:
                # 다른 예외는 재시도하지 않고 즉시 전파
                logger.error(
                    f"Gemini API 호출 중 예외 발생: error_type={type(e).__name__}, "
                    f"error_message={str(e)[:200]}"
                )
                raise


def build_grading_message(request: AIGradingRequest) -> str:
    message = f"""## 문제
{request.question}

## 채점 기준
{request.grading_criteria}
"""
    if request.model_answer:
        message += f"""
## 모범 답안 (참고용)
{request.model_answer}
"""
    message += f"""
## 학생 답변
{request.answer_text}

위 답변을 채점해주세요. 배점은 {request.max_score}점입니다."""
    if request.image_url:
        message += "\n\n함께 첨부된 이미지는 답변의 참고 자료입니다. 이미지 내용도 함께 고려하여 채점해주세요."
    return message


async def grade_subjective_answer(request: AIGradingRequest) -> AIGradingResponse:
    """주관식 답변 AI 채점 (점수는 0~max_score로 보정)"""
    if not (settings.gemini_api_key or os.getenv("GEMINI_API_KEY")):
        raise GradingFailedError("AI 채점 설정이 없습니다. 관리자에게 문의하세요.")

    contents: list = []
    if request.image_url:
        try:
            contents.append(await fetch_image_part(request.image_url))
        except httpx.HTTPError as e:
            logger.warning(f"답변 이미지 로드 실패, 텍스트만 채점: url={request.image_url}, error={e}")
    contents.append(build_grading_message(request))

    try:
        data = await call_gemini_json(
            contents,
            system_instruction=GRADING_SYSTEM_PROMPT.format(max_score=request.max_score),
            temperature=0.2,
        )
        result = AIGradingResponse(**data)
    except (ValueError, ValidationError) as e:
        logger.error(f"AI 채점 응답 파싱 실패: {e}")
        raise GradingFailedError()
    except (ClientError, ServerError) as e:
        logger.error(
            f"AI 채점 호출 실패: status_code={getattr(e, 'code', 'unknown')}, "
            f"error_type={type(e).__name__}"
        )
        raise GradingFailedError()

    return result.clamped(request.max_score)


def build_draft_prompt(request: AIQuestionDraftRequest) -> str:
    content = request.content[:DRAFT_CONTENT_LIMIT]
    if request.question_type == "multiple_choice":
        return f"""다음 교육 자료를 바탕으로 객관식(4지선다) 문제를 1개 만들어주세요.

## 교육 자료
{content}

## 요구사항
- 교육 내용의 핵심을 확인하는 실용적인 문제
- 4개의 선택지 중 정답이 명확해야 함
- 오답도 그럴듯해야 함
- 실제 업무 상황에 적용 가능한 문제

JSON 형식:
{{
  "question": "문제 내용",
  "options": ["선택지1", "선택지2", "선택지3", "선택지4"],
  "correct_answer": 0,
  "max_score": 10
}}"""
    return f"""다음 교육 자료를 바탕으로 주관식 문제를 1개 만들어주세요.

## 교육 자료
{content}

## 요구사항
- 교육 내용의 이해도를 심층적으로 확인하는 문제
- 실제 업무 상황을 시나리오로 제시
- 명확한 채점 기준 제시
- 모범 답안 포함

JSON 형식:
{{
  "question": "문제 내용 (구체적인 상황을 제시)",
  "grading_criteria": "채점 기준 (구체적으로)",
  "model_answer": "모범 답안",
  "max_score": 10
}}"""


async def generate_question_draft(request: AIQuestionDraftRequest) -> AIQuestionDraftResponse:
    """교육 자료로부터 문제 초안 생성 (저장하지 않음)"""
    if not (settings.gemini_api_key or os.getenv("GEMINI_API_KEY")):
        raise QuestionDraftFailedError("AI 설정이 없습니다. 관리자에게 문의하세요.")

    try:
        data = await call_gemini_json(
            [build_draft_prompt(request)],
            system_instruction=DRAFT_SYSTEM_PROMPT.format(category=request.category),
            temperature=0.7,
        )
        return AIQuestionDraftResponse(**data)
    except (ValueError, ValidationError) as e:
        logger.error(f"AI 문제 초안 응답 파싱 실패: {e}")
        raise QuestionDraftFailedError()
    except (ClientError, ServerError) as e:
        logger.error(
            f"AI 문제 초안 호출 실패: status_code={getattr(e, 'code', 'unknown')}, "
            f"error_type={type(e).__name__}"
        )
        raise QuestionDraftFailedError()
