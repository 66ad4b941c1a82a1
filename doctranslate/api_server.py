import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import List, Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, Response
from starlette.datastructures import FormData, UploadFile
from starlette.requests import ClientDisconnect

from doctranslate.cancellation import DISCONNECTED, RequestCancelled, run_cancellable
from doctranslate.config import TranslatorSettings
from doctranslate.credentials import GoogleCredentialProvider
from doctranslate.limits import BodySizeLimitMiddleware
from doctranslate.naming import content_disposition, derive_output_filename
from doctranslate.schemas import DocumentInputConfig, TranslateDocumentRequest
from doctranslate.translate_client import DocumentTranslationClient, TranslateApiError

logger = logging.getLogger("DocTranslate.Handler")

FORM_PAGE = Path(__file__).parent / "static" / "translate.html"
UPSTREAM_ERROR_MESSAGE = "translateDocument returned an error."

# nginx convention for "client closed request"
STATUS_CLIENT_CLOSED = 499


class InvalidForm(Exception):
    pass


def signal_shutdown(app: FastAPI):
    """Tells in-flight translations to stop; a no-op before lifespan startup."""
    event = getattr(app.state, "shutdown_event", None)
    if event is not None:
        event.set()


def _single(values: List, required: bool) -> Optional[str]:
    """targetlang는 정확히 1개, sourcelang는 0~1개만 허용"""
    texts = [v for v in values if isinstance(v, str)]
    if len(texts) > 1 or (required and not texts):
        raise InvalidForm()
    return texts[0] if texts else None


def _uploaded_file(form: FormData) -> UploadFile:
    for value in form.getlist("docfile"):
        if isinstance(value, UploadFile):
            return value
    raise InvalidForm()


async def _read_fully(upload: UploadFile) -> bytes:
    """Reads the whole upload; a part shorter than its declared Content-Length raises EOFError."""
    content = await upload.read()
    declared = upload.headers.get("content-length", "")
    if declared.isdigit() and len(content) < int(declared):
        raise EOFError(f"docfile ended after {len(content)} of {declared} bytes")
    return content


def create_app(
    settings: TranslatorSettings,
    credentials=None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Builds the translation app around one immutable settings object.

    The credential provider and shared HTTP client live for the process lifetime;
    `credentials` and `transport` exist so callers can inject replacements.
    """
    if credentials is None:
        credentials = GoogleCredentialProvider.from_service_account_info(settings.credential_info)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.shutdown_event = asyncio.Event()
        async with httpx.AsyncClient(timeout=settings.request_timeout, transport=transport) as http_client:
            app.state.translator = DocumentTranslationClient(settings, credentials, http_client)
            logger.info(f"Translator ready (project={settings.project_id}, location={settings.location})")
            try:
                yield
            finally:
                app.state.shutdown_event.set()
        logger.info("Translator shut down.")

    app = FastAPI(title="Document Translator", lifespan=lifespan)
    app.add_middleware(BodySizeLimitMiddleware, max_body_size=settings.body_limit)

    @app.get("/health")
    def health():
        return {"status": "ok", "service": "doctranslate"}

    @app.api_route("/api/translate", methods=["GET", "POST"])
    async def translate(request: Request):
        if request.method == "GET":
            return HTMLResponse(FORM_PAGE.read_text(encoding="utf-8"))

        shutdown = request.app.state.shutdown_event
        translator = request.app.state.translator

        async def read_form() -> FormData:
            return await request.form()

        try:
            # body reads are aborted by the server's own ClientDisconnect
            form = await run_cancellable(read_form, shutdown)
        except ClientDisconnect:
            logger.info("Client disconnected while uploading")
            return Response(status_code=STATUS_CLIENT_CLOSED)
        except RequestCancelled:
            return Response(status_code=503)

        try:
            try:
                source_lang = _single(form.getlist("sourcelang"), required=False)
                target_lang = _single(form.getlist("targetlang"), required=True)
                doc_file = _uploaded_file(form)
            except InvalidForm:
                return Response(status_code=400)

            async def process() -> Response:
                content = await _read_fully(doc_file)
                payload = TranslateDocumentRequest(
                    source_language_code=source_lang,
                    target_language_code=target_lang,
                    document_input_config=DocumentInputConfig(
                        mime_type=doc_file.content_type or "application/octet-stream",
                        content=content,
                    ),
                )
                try:
                    result = await translator.translate_document(payload)
                except TranslateApiError as e:
                    logger.error(f"API returned {e.status_code} {e.body}")
                    return PlainTextResponse(UPSTREAM_ERROR_MESSAGE, status_code=500)

                filename = derive_output_filename(doc_file.filename, target_lang)
                return Response(
                    content=result.byte_stream_outputs[0],
                    media_type=result.mime_type,
                    headers={"Content-Disposition": content_disposition(filename)},
                )

            try:
                return await run_cancellable(process, shutdown, receive=request.receive)
            except RequestCancelled as e:
                return Response(status_code=STATUS_CLIENT_CLOSED if e.reason == DISCONNECTED else 503)
        finally:
            await form.close()

    return app
