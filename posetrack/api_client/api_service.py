# api_service.py
import logging
import uuid
import requests
from typing import Optional

from .score_request import ScoreRequest, parse_probability
from . import config

log = logging.getLogger(__name__)

class ApiResult:
    def __init__(self, success: bool, status_code: int, probability: Optional[float], correlation_id: str):
        self.success = success
        self.status_code = status_code
        self.probability = probability
        self.correlation_id = correlation_id
        self.error: Optional[str] = None

class ApiService:
    def __init__(self, base_url: str = config.SERVER_BASE_URL, timeout: float = config.DEFAULT_TIMEOUT):
        """
        :param base_url: The host URL (e.g. http://ip:port). Defaults to config.SERVER_BASE_URL.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.path = config.CHEATING_SCORE_PATH

        log.info("[API] Initialized target=%s path=%s timeout=%.1fs", self.base_url, self.path, self.timeout)

    def _url(self) -> str:
        return f"{self.base_url}{self.path}"

    def request_score(self, request: ScoreRequest) -> ApiResult:
        cid = str(uuid.uuid4())
        headers = {
            "Content-Type": "application/json",
            config.CORRELATION_HEADER: cid,
            config.IDEMPOTENCY_HEADER: str(uuid.uuid4()),
        }
        payload = request.to_transport_payload()

        try:
            resp = requests.post(self._url(), json=payload, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            r = ApiResult(False, 0, None, cid)
            r.error = str(e)
            return r

        if not (200 <= resp.status_code < 300):
            r = ApiResult(False, resp.status_code, None, cid)
            r.error = f"HTTP {resp.status_code}"
            return r

        try:
            probability = parse_probability(resp.json())
        except ValueError as e:
            r = ApiResult(False, resp.status_code, None, cid)
            r.error = f"bad response: {e}"
            return r

        return ApiResult(True, resp.status_code, probability, cid)
