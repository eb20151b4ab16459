from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from kwollect_input.config.settings import settings
from kwollect_input.ingestion.core.errors import InvalidPayload, TransportError
from kwollect_input.utils.logger import logger


class KwollectClient:
    """One authenticated GET per call. Retrying belongs to the caller."""

    def __init__(
        self,
        login: str | None = None,
        password: str | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ):
        self.auth = (
            login if login is not None else settings.KWOLLECT_LOGIN,
            password if password is not None else settings.KWOLLECT_PASSWORD,
        )
        self.timeout = timeout if timeout is not None else settings.KWOLLECT_TIMEOUT
        self.session = session or self._build_session()

    def _build_session(self):
        # A single attempt: urllib3 must not retry behind our back
        adapter = HTTPAdapter(max_retries=Retry(total=0))
        session = requests.Session()
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        return session

    def fetch(self, url: str) -> Any:
        logger.info(f"Fetching Kwollect data from {url}")

        try:
            response = self.session.get(url, auth=self.auth, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise TransportError(url, e) from e

        logger.debug(f"Kwollect response: {len(response.content)} bytes")

        try:
            return response.json()
        except ValueError as e:
            raise InvalidPayload(url, e) from e

    def close(self) -> None:
        self.session.close()
