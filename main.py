from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, ValidationError
from typing import Any, Type, TypeVar
import json
import logging
import uvicorn

from config import Settings, configure_logging
from errors import InvalidRequest, PayloadTooLarge, SummarizerError
from mailer import EtherealMailer, render_summary_html, render_summary_text
from models import (
    GenerateSummaryRequest,
    SendSummaryRequest,
    SendSummaryResponse,
    SummaryResponse,
    ensure_summary_shape,
    parse_recipients,
)
from summarizer import SummaryService

logger = logging.getLogger("meeting_summarizer")

FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")

Body = TypeVar("Body", bound=BaseModel)


class BodySizeLimit:
    """Reject request bodies larger than ``max_bytes``, with or without Content-Length."""

    def __init__(self, app, max_bytes: int):
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        length = dict(scope["headers"]).get(b"content-length", b"")
        if length.isdigit() and int(length) > self.max_bytes:
            response = JSONResponse(status_code=PayloadTooLarge.status_code, content={"error": PayloadTooLarge.message})
            await response(scope, receive, send)
            return

        received = 0

        async def limited_receive():
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_bytes:
                    raise PayloadTooLarge()
            return message

        await self.app(scope, limited_receive, send)


async def read_body(request: Request, model: Type[Body]) -> Body:
    """Parse a JSON or form-encoded request body into ``model``."""
    content_type = request.headers.get("content-type", "")
    try:
        if content_type.startswith(FORM_TYPES):
            form = await request.form()
            data: Any = {}
            for key in form.keys():
                values = form.getlist(key)
                # "recipients[]=a&recipients[]=b" style arrays
                if key.endswith("[]"):
                    data[key[:-2]] = values
                else:
                    data[key] = values if len(values) > 1 else values[0]
        else:
            raw = await request.body()
            data = json.loads(raw) if raw.strip() else {}
        return model.model_validate(data)
    except (json.JSONDecodeError, UnicodeDecodeError, ValidationError) as exc:
        logger.warning("Rejected request body: %s", exc)
        raise InvalidRequest() from exc


def _maybe_json(value: Any) -> Any:
    # Form posts carry the summary as a JSON string
    if isinstance(value, str):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return None
    return value


def create_app(settings: Settings, llm_client=None, mailer=None) -> FastAPI:
    app = FastAPI(title="Meeting Summarizer")
    app.state.settings = settings
    app.state.summaries = SummaryService(settings, llm_client=llm_client)
    app.state.mailer = mailer or EtherealMailer(settings)

    app.add_middleware(BodySizeLimit, max_bytes=settings.max_body_bytes)
    # An empty allow-list means any origin may call us
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins or ["*"],
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        max_age=86400,
    )

    @app.exception_handler(SummarizerError)
    async def summarizer_error(_request: Request, exc: SummarizerError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.get("/", response_class=PlainTextResponse)
    def home():
        return "Backend is running"

    @app.post("/generate-summary", response_model=SummaryResponse)
    async def generate_summary(request: Request):
        body = await read_body(request, GenerateSummaryRequest)
        try:
            summary = await run_in_threadpool(app.state.summaries.generate, body.transcript, body.instruction)
        except SummarizerError:
            raise
        except Exception as exc:
            logger.exception("generate-summary error")
            raise SummarizerError("Failed to generate summary (server error)") from exc
        return SummaryResponse(summary=summary)

    @app.post("/send-summary", response_model=SendSummaryResponse)
    async def send_summary(request: Request):
        body = await read_body(request, SendSummaryRequest)
        summary = ensure_summary_shape(_maybe_json(body.summary))
        recipients = parse_recipients(body.recipients)
        if not recipients:
            raise InvalidRequest("Recipients array is required")

        try:
            preview_url = await run_in_threadpool(
                app.state.mailer.send,
                recipients,
                "Meeting Summary",
                render_summary_html(summary),
                render_summary_text(summary),
            )
        except SummarizerError:
            raise
        except Exception as exc:
            logger.exception("send-summary error")
            raise SummarizerError("Failed to send summary") from exc
        return SendSummaryResponse(message="Email sent (preview available)", previewUrl=preview_url)

    return app


settings = Settings.from_env()
configure_logging(settings.log_level)
app = create_app(settings)


if __name__ == "__main__":
    logger.info("Mock mode: %s", settings.mock_mode)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level)
