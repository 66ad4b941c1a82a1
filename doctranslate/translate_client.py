import logging
from urllib.parse import quote

import httpx

from doctranslate.config import TranslatorSettings
from doctranslate.schemas import (
    DocumentTranslation,
    TranslateDocumentRequest,
    TranslateDocumentResponse,
)

logger = logging.getLogger("DocTranslate.Client")

JSON_MEDIA_TYPE = "application/json; charset=utf-8"


class TranslateApiError(Exception):
    """translateDocument가 성공 응답을 주지 않은 경우"""
    def __init__(self, status_code: int, body: str):
        super().__init__(f"translateDocument returned {status_code}")
        self.status_code = status_code
        self.body = body


def build_translate_url(settings: TranslatorSettings) -> str:
    project = quote(settings.project_id, safe="")
    location = quote(settings.location, safe="")
    return f"{settings.api_base_url}/projects/{project}/locations/{location}:translateDocument"


class DocumentTranslationClient:
    def __init__(self, settings: TranslatorSettings, credentials, http_client: httpx.AsyncClient):
        self.url = build_translate_url(settings)
        self.credentials = credentials
        self.http_client = http_client

    async def translate_document(self, request: TranslateDocumentRequest) -> DocumentTranslation:
        """
        Sends one translateDocument call and returns the decoded translation.

        No retries: any non-2xx status raises TranslateApiError carrying the raw body.
        Timeouts come from the shared client.
        """
        access_token = await self.credentials.get_access_token()
        headers = {
            "Accept": JSON_MEDIA_TYPE,
            "Content-Type": JSON_MEDIA_TYPE,
            "Authorization": f"Bearer {access_token}",
        }

        resp = await self.http_client.post(self.url, content=request.to_wire(), headers=headers)
        if not resp.is_success:
            raise TranslateApiError(resp.status_code, resp.text)

        result = TranslateDocumentResponse.model_validate(resp.json()).document_translation
        if not result.byte_stream_outputs:
            raise TranslateApiError(resp.status_code, "response contained no byteStreamOutputs")

        logger.debug(f"translateDocument returned {len(result.byte_stream_outputs[0])} bytes ({result.mime_type})")
        return result
