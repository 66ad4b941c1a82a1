import base64
import binascii
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel

# -------------------------------------------------------------------------
# [translateDocument Wire Schemas]
# JSON field names are lowerCamelCase and bytes travel as base64 strings.
# -------------------------------------------------------------------------

class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> bytes:
        """Serialized JSON body; None fields are left out entirely."""
        return self.model_dump_json(by_alias=True, exclude_none=True).encode("utf-8")


def _decode_base64(value: str) -> bytes:
    # protobuf JSON accepts standard or URL-safe alphabets, padded or not
    normalized = value.replace("-", "+").replace("_", "/")
    normalized += "=" * (-len(normalized) % 4)
    try:
        return base64.b64decode(normalized, validate=True)
    except binascii.Error as e:
        raise ValueError(f"invalid base64 payload: {e}") from e


class DocumentInputConfig(WireModel):
    """업로드된 원본 문서"""
    mime_type: str
    content: bytes

    @field_serializer("content", when_used="json")
    def _encode_content(self, content: bytes) -> str:
        return base64.b64encode(content).decode("ascii")


class TranslateDocumentRequest(WireModel):
    source_language_code: Optional[str] = None
    target_language_code: str
    document_input_config: DocumentInputConfig


class DocumentTranslation(WireModel):
    """번역 결과. byte_stream_outputs[0]만 사용"""
    mime_type: str
    byte_stream_outputs: List[bytes] = Field(default_factory=list)
    detected_language_code: Optional[str] = None

    @field_validator("byte_stream_outputs", mode="before")
    @classmethod
    def _decode_outputs(cls, value):
        if isinstance(value, list):
            return [_decode_base64(v) if isinstance(v, str) else v for v in value]
        return value


class TranslateDocumentResponse(WireModel):
    document_translation: DocumentTranslation
