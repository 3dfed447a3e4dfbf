import logging
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import text

from app.api.v1 import (
    admin_managers,
    admin_questions,
    admin_retests,
    admin_reviews,
    results,
    retests,
    reviews,
    tests,
)
from app.core.config import settings
from app.core.logging import setup_logging
from app.exceptions import BaseAppError
from app.models.base import get_engine

# 로깅 설정
setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Manager Education Quiz API",
    description="매니저 교육 테스트 응시, 채점, 검토 및 재시험 관리 백엔드 API",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(tests.router, prefix="/api/v1")
app.include_router(results.router, prefix="/api/v1")
app.include_router(retests.router, prefix="/api/v1")
app.include_router(reviews.router, prefix="/api/v1")
app.include_router(admin_questions.router, prefix="/api/v1")
app.include_router(admin_reviews.router, prefix="/api/v1")
app.include_router(admin_retests.router, prefix="/api/v1")
app.include_router(admin_managers.router, prefix="/api/v1")


def cors_headers(request: Request) -> dict[str, str]:
    """허용된 Origin이면 예외 응답에도 CORS 헤더를 붙인다"""
    origin = request.headers.get("origin")
    if not origin or origin not in settings.allowed_origins_list:
        return {}
    return {
        "Access-Control-Allow-Origin": origin,
        "Access-Control-Allow-Credentials": "true",
        "Access-Control-Allow-Methods": "*",
        "Access-Control-Allow-Headers": "*",
    }


def error_response(request: Request, status_code: int, content: dict) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=content, headers=cors_headers(request))


def internal_error_response(request: Request, exc: Exception, public_detail: str) -> JSONResponse:
    """500 응답 (프로덕션에서는 내부 메시지를 숨김)"""
    if settings.environment == "production":
        content = {"detail": public_detail}
    else:
        content = {"detail": str(exc), "type": exc.__class__.__name__}
    return error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, content)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"요청 검증 오류: path={request.url.path}, errors={exc.errors()}")
    return error_response(request, status.HTTP_422_UNPROCESSABLE_ENTITY, {"detail": exc.errors()})


@app.exception_handler(BaseAppError)
async def app_exception_handler(request: Request, exc: BaseAppError):
    """도메인 예외를 상태 코드와 메시지로 변환 (AI 채점 실패 등 5xx는 error 레벨)"""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"요청 처리 실패: error_type={exc.__class__.__name__}, status_code={exc.status_code}, "
        f"method={request.method}, path={request.url.path}, message={exc.message}"
    )
    return error_response(request, exc.status_code, {"detail": exc.message})


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.error(
        f"DB 오류: error_type={exc.__class__.__name__}, method={request.method}, path={request.url.path}",
        exc_info=True,
    )
    return internal_error_response(request, exc, "Database error occurred")


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """처리되지 않은 예외"""
    logger.error(
        f"처리되지 않은 예외: error_type={exc.__class__.__name__}, method={request.method}, "
        f"path={request.url.path}, query={dict(request.query_params)}",
        exc_info=True,
    )
    return internal_error_response(request, exc, "Internal Server Error")


@app.get("/")
async def root():
    return {"message": app.title, "version": app.version}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


@app.get("/health/db")
async def health_check_db():
    """DB 연결 확인 (테스트 결과 저장소)"""
    try:
        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"DB 연결 확인 실패: error_type={type(e).__name__}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unhealthy", "database": "disconnected"},
        )
    return {"status": "healthy", "database": "connected"}
