"""
Kanpo AI — サンドボックス Webhook (FastAPI)

本物の診断エンジンの代わりに、同じ形の応答を返すローカルサーバー。

起動:
    uvicorn kanpo_ai.api.app:app --port 5678

    または:

    python scripts/run_sandbox.py

フォーム側は次のように向ける:
    KANPO_DIAGNOSIS_URL=http://127.0.0.1:5678/webhook/diagnosis
    KANPO_FOLLOWUP_URL=http://127.0.0.1:5678/webhook/followup
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from kanpo_ai import __version__
from kanpo_ai.utils import get_logger

from .config import config
from .dependencies import suggestion_engine
from .routes import health_router, webhook_router

log = get_logger("api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    print("=" * 60)
    print("🌿 Kanpo AI Sandbox Webhook Starting...")
    print("=" * 60)
    print(f"✅ {len(suggestion_engine.formulas)} formulas loaded")
    print(f"📍 Diagnosis: {config.diagnosis_url}")
    print(f"📍 Follow-up: {config.followup_url}")
    print(f"📍 Swagger UI: {config.base_url}/docs")
    print("=" * 60)

    yield

    print("🛑 Kanpo AI Sandbox Webhook Stopping...")


app = FastAPI(
    title=config.api_title,
    description=config.api_description,
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=config.cors_allow_credentials,
    allow_methods=config.cors_allow_methods,
    allow_headers=config.cors_allow_headers,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()

    response = await call_next(request)

    process_time = time.time() - start_time
    if request.url.path.startswith("/webhook"):
        log.info(f"{request.method} {request.url.path} → {response.status_code} ({process_time*1000:.1f}ms)")

    return response


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    log.error(f"Unhandled error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "detail": str(exc) if config.debug else None,
        },
    )


app.include_router(health_router)
app.include_router(webhook_router)


@app.get("/", tags=["Root"])
async def root():
    return {
        "name": config.api_title,
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
        "webhooks": ["/webhook/diagnosis", "/webhook/followup"],
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "kanpo_ai.api.app:app",
        host=config.host,
        port=config.port,
        reload=config.reload,
    )
