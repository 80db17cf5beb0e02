from __future__ import annotations

import logging
import os
import uuid
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from google.genai import errors as genai_errors

from app.config import ConfigurationError, get_settings
from app.middlewares.body_guard import BodyGuardMiddleware
from app.models import SourceAsset
from app.schemas import (
    FORMAT_LABELS,
    ConvertImageRequest,
    FormatOption,
    GenerateKitRequest,
    GenerateSourceImageRequest,
    GenerateSourceImageResponse,
    MarketingKit,
)
from app.services.encoding import InvalidImagePayload
from app.services.export import convert_image, download_name
from app.services.genai_client import get_generation_client
from app.services.kit import (
    KitClient,
    NoPosterReturned,
    generate_marketing_kit,
    generate_source_image,
)
from app.services.session import SessionBusy, SessionRegistry

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logging.getLogger("uvicorn").setLevel(LOG_LEVEL)
logging.getLogger("uvicorn.error").setLevel(LOG_LEVEL)
logging.getLogger("uvicorn.access").setLevel(LOG_LEVEL)
logging.getLogger("kit-service").setLevel(LOG_LEVEL)

logger = logging.getLogger("kit-service")
app = FastAPI(title="Campaign Kit API", version="1.0.0")

settings = get_settings()
logger.info("campaign kit service starting environment=%s", settings.environment)

app.state.sessions = SessionRegistry(max_sessions=settings.guard.max_sessions)

app.add_middleware(BodyGuardMiddleware, max_bytes=settings.guard.max_body_bytes)
logger.info("BodyGuardMiddleware ready max_body_bytes=%s", settings.guard.max_body_bytes)

cors_allow_origins = settings.allowed_origins
allow_all = "*" in cors_allow_origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_allow_origins,
    allow_credentials=not allow_all,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Request-Trace"],
    max_age=86400,
)


@app.get("/", include_in_schema=False)
def root() -> dict[str, Any]:
    return {"service": "campaign-kit", "environment": settings.environment, "ok": True}


@app.head("/", include_in_schema=False)
def root_head() -> Response:
    return Response(status_code=200)


@app.get("/health")
def health() -> dict[str, bool]:
    return {"ok": True}


def get_kit_client() -> KitClient:
    """Resolve the generation client; a missing credential fails here, before any stage."""

    return get_generation_client()


def _sessions(request: Request) -> SessionRegistry:
    return request.app.state.sessions


def _session_id(request: Request) -> str:
    header = (request.headers.get("X-Session-ID") or "").strip()
    if header:
        return header
    if request.client and request.client.host:
        return request.client.host
    return "anonymous"


def _ensure_trace_id(request: Request) -> str:
    trace = getattr(request.state, "trace_id", None)
    if not trace:
        trace = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:8]
        request.state.trace_id = trace
    return trace


def _is_quota_error(exc: Exception) -> bool:
    return isinstance(exc, genai_errors.APIError) and getattr(exc, "code", None) == 429


def _quota_exception() -> HTTPException:
    return HTTPException(
        status_code=429,
        detail={
            "error": "genai_quota_exceeded",
            "message": "The image model quota is exhausted. Please try again later.",
            "provider": "google-genai",
        },
    )


@app.exception_handler(ConfigurationError)
async def _configuration_error(request: Request, exc: ConfigurationError) -> JSONResponse:
    logger.error("configuration error path=%s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=503,
        content={"detail": {"error": "configuration_error", "message": str(exc)}},
    )


@app.exception_handler(InvalidImagePayload)
async def _invalid_image(request: Request, exc: InvalidImagePayload) -> JSONResponse:
    logger.warning("invalid image payload path=%s: %s", request.url.path, exc)
    return JSONResponse(status_code=422, content={"detail": exc.detail})


@app.exception_handler(SessionBusy)
async def _session_busy(request: Request, exc: SessionBusy) -> JSONResponse:
    logger.info("session busy session=%s running=%s", exc.session_id, exc.running)
    return JSONResponse(
        status_code=409,
        content={"detail": {"error": "session_busy", "running": exc.running, "message": str(exc)}},
    )


@app.get("/api/formats", response_model=list[FormatOption])
def list_formats() -> list[FormatOption]:
    return [FormatOption(name=name, label=label) for name, label in FORMAT_LABELS.items()]


@app.post("/api/source-image", response_model=GenerateSourceImageResponse)
def api_generate_source_image(
    request: Request,
    payload: GenerateSourceImageRequest,
    client: KitClient = Depends(get_kit_client),
) -> JSONResponse:
    trace = _ensure_trace_id(request)
    session_id = _session_id(request)
    logger.info(
        "source image request trace=%s business_type=%s description_len=%s",
        trace,
        payload.campaign.business_type,
        len(payload.campaign.image_description),
    )

    with _sessions(request).claim(session_id, "source"):
        try:
            asset = generate_source_image(payload.campaign, client=client, trace_id=trace)
        except Exception as exc:
            if _is_quota_error(exc):
                logger.warning("genai quota exceeded trace=%s: %s", trace, exc)
                raise _quota_exception() from exc
            logger.exception("source image generation failed trace=%s", trace)
            raise HTTPException(
                status_code=500,
                detail={
                    "error": "source_image_failed",
                    "message": f"Image generation failed: {exc}",
                },
            ) from exc

    response = GenerateSourceImageResponse(image=asset.to_data_url(), media_type=asset.media_type)
    return JSONResponse(content=jsonable_encoder(response), headers={"X-Request-Trace": trace})


@app.post("/api/kit", response_model=MarketingKit)
def api_generate_kit(
    request: Request,
    payload: GenerateKitRequest,
    client: KitClient = Depends(get_kit_client),
) -> JSONResponse:
    trace = _ensure_trace_id(request)
    session_id = _session_id(request)
    campaign = payload.campaign

    source = SourceAsset.from_data_url(payload.source_image)
    selfie = SourceAsset.from_data_url(payload.customer_selfie) if payload.customer_selfie else None
    logger.info(
        "generate_kit request trace=%s source_type=%s has_selfie=%s formats=%s mockups=%s languages=%s",
        trace,
        source.media_type,
        selfie is not None,
        campaign.format_selections.selected(),
        len(campaign.mockup_list),
        len(campaign.language_list),
    )

    sessions = _sessions(request)
    with sessions.claim(session_id, "kit"):
        try:
            kit = generate_marketing_kit(
                campaign, source, selfie, client=client, trace_id=trace
            )
        except NoPosterReturned as exc:
            logger.warning("generate_kit no poster trace=%s", trace)
            raise HTTPException(
                status_code=502,
                detail={"error": exc.error_code, "message": f"Generation failed: {exc}"},
            ) from exc
        except Exception as exc:
            if _is_quota_error(exc):
                logger.warning("genai quota exceeded trace=%s: %s", trace, exc)
                raise _quota_exception() from exc
            logger.exception("generate_kit failed trace=%s", trace)
            raise HTTPException(
                status_code=500,
                detail={"error": "kit_generation_failed", "message": f"Generation failed: {exc}"},
            ) from exc
        sessions.store_kit(session_id, kit)

    logger.info("generate_kit completed trace=%s counts=%s", trace, kit.counts())
    return JSONResponse(content=jsonable_encoder(kit), headers={"X-Request-Trace": trace})


@app.get("/api/kit", response_model=MarketingKit)
def api_latest_kit(request: Request) -> MarketingKit:
    kit = _sessions(request).latest_kit(_session_id(request))
    if kit is None:
        raise HTTPException(status_code=404, detail="No marketing kit has been generated yet.")
    return kit


@app.post("/api/convert")
def api_convert_image(payload: ConvertImageRequest) -> Response:
    data, media_type = convert_image(payload.image, payload.format)
    filename = download_name(payload.filename or "asset.png", payload.format).replace('"', "")
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}
    return Response(content=data, media_type=media_type, headers=headers)


__all__ = ["app", "get_kit_client"]
