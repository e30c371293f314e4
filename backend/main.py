"""
FastAPI 메인 애플리케이션
정시 환산 점수 계산 서버
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from config.logging_config import setup_logger
from routes import calculator
from services.scoring import InvalidFormulaError, MissingConfigurationError

logger = setup_logger('main')

# FastAPI 앱 생성
app = FastAPI(
    title="정시 환산 점수 API",
    description="수능/실기 환산 점수 계산 엔진",
    version="1.0.0",
)

# CORS 설정 (프론트엔드 연결)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        settings.FRONTEND_URL,
        "http://localhost:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(InvalidFormulaError)
async def invalid_formula_handler(request: Request, exc: InvalidFormulaError):
    logger.warning(f"특수공식 오류: {exc}")
    return JSONResponse(status_code=400, content={"success": False, "message": str(exc)})


@app.exception_handler(MissingConfigurationError)
async def missing_config_handler(request: Request, exc: MissingConfigurationError):
    return JSONResponse(status_code=404, content={"success": False, "message": str(exc)})


# 라우터 등록
app.include_router(calculator.calculator_bp, prefix="/api/calculate", tags=["점수계산"])


@app.get("/health")
async def health_check():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=settings.BACKEND_PORT, reload=True)
