import logging
from typing import Any, Dict

import google.auth.transport.requests
from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from fastapi.concurrency import run_in_threadpool

from doctranslate.config import ConfigurationError

TRANSLATION_SCOPES = ["https://www.googleapis.com/auth/cloud-translation"]

logger = logging.getLogger("DocTranslate.Credentials")


class GoogleCredentialProvider:
    """
    서비스 계정 키로 Translation API용 Bearer 토큰을 발급합니다.
    토큰 갱신은 google-auth가 담당하며, 동기 HTTP 호출이므로 스레드풀에서 실행됩니다.
    """
    def __init__(self, credentials):
        self.credentials = credentials
        self._auth_request = google.auth.transport.requests.Request()

    @classmethod
    def from_service_account_info(cls, info: Dict[str, Any]) -> "GoogleCredentialProvider":
        try:
            credentials = service_account.Credentials.from_service_account_info(
                info, scopes=TRANSLATION_SCOPES
            )
        except (ValueError, KeyError, GoogleAuthError) as e:
            raise ConfigurationError(f"GOOGLE_CREDENTIAL_JSON is not a usable service account key: {e}") from e
        logger.info(f"Loaded service account credential for {credentials.service_account_email}")
        return cls(credentials)

    async def get_access_token(self) -> str:
        if not self.credentials.valid:
            logger.debug("Refreshing access token")
            await run_in_threadpool(self.credentials.refresh, self._auth_request)
        return self.credentials.token
