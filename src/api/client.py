import logging
from typing import Any, Dict, Optional, Tuple

import requests

from config.settings import BACKEND_API_URL, REQUEST_TIMEOUT

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = 'application/json'
PDF_CONTENT_TYPE = 'application/pdf'
EXCEL_CONTENT_TYPES = (
    'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
    'application/vnd.ms-excel',
    'application/octet-stream',
)


class BackendError(Exception):
    """A failed call to the backend REST API"""

    def __init__(self, message: str, status_code: Optional[int] = None, payload: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload or {}


class SessionExpiredError(BackendError):
    """The backend rejected the bearer token (HTTP 401)"""


def normalize_base_url(raw: str) -> str:
    """Return the API base URL with '/api' exactly once and no trailing slash"""
    base = (raw or '').strip().rstrip('/')
    if base.endswith('/api'):
        return base
    return f"{base}/api"


def clean_params(params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Drop None and empty-string query values"""
    if not params:
        return {}
    return {key: value for key, value in params.items() if value is not None and value != ''}


def error_message(body: Any, fallback: str) -> str:
    """Pick the backend's explanation out of an error body"""
    if isinstance(body, dict):
        for key in ('message', 'msg', 'error'):
            if body.get(key):
                return str(body[key])
    return fallback


def unwrap(body: Any) -> Any:
    """Return the 'data' member of a {success, data, message} envelope, or the body itself"""
    if isinstance(body, dict) and 'data' in body:
        return body['data']
    return body


class BackendClient:
    """Thin wrapper around requests.Session for the HR backend"""

    def __init__(self, base_url: str = BACKEND_API_URL, token: Optional[str] = None,
                 timeout: float = REQUEST_TIMEOUT, session: Optional[requests.Session] = None):
        self.base_url = normalize_base_url(base_url)
        self.timeout = timeout
        self.session = session or requests.Session()
        self.token = token

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def headers(self, json_body: bool = True) -> Dict[str, str]:
        headers = {}
        if json_body:
            headers['Content-Type'] = JSON_CONTENT_TYPE
        if self.token:
            headers['Authorization'] = f"Bearer {self.token}"
        return headers

    # ========== Core request ==========

    def request(self, method: str, path: str, params: Optional[dict] = None, json: Any = None,
                data: Optional[dict] = None, files: Optional[dict] = None,
                fallback: str = 'Request failed') -> requests.Response:
        """Send a request and raise BackendError for any non-2xx answer"""
        multipart = files is not None or data is not None
        try:
            response = self.session.request(
                method,
                self.url(path),
                params=clean_params(params),
                json=json,
                data=data,
                files=files,
                headers=self.headers(json_body=not multipart),
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            logger.warning("%s %s timed out: %s", method, path, e)
            raise BackendError(f"{fallback}: backend timed out") from e
        except requests.exceptions.RequestException as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise BackendError(f"{fallback}: backend unreachable") from e

        logger.debug("%s %s -> %s", method, path, response.status_code)

        if response.status_code == 401:
            raise SessionExpiredError(
                error_message(self._json_or_none(response), 'Session expired, please log in again'),
                status_code=401,
            )
        if not response.ok:
            body = self._json_or_none(response)
            logger.warning("%s %s -> %s", method, path, response.status_code)
            raise BackendError(error_message(body, fallback), status_code=response.status_code,
                               payload=body if isinstance(body, dict) else None)
        return response

    @staticmethod
    def _json_or_none(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return None

    def _json(self, response: requests.Response, fallback: str) -> Any:
        body = self._json_or_none(response)
        if body is None:
            raise BackendError(f"{fallback}: invalid response format", status_code=response.status_code)
        if isinstance(body, dict) and body.get('success') is False:
            raise BackendError(error_message(body, fallback), status_code=response.status_code, payload=body)
        return body

    # ========== JSON helpers ==========

    def get(self, path: str, params: Optional[dict] = None, fallback: str = 'Request failed') -> Any:
        return self._json(self.request('GET', path, params=params, fallback=fallback), fallback)

    def post(self, path: str, json: Any = None, data: Optional[dict] = None, files: Optional[dict] = None,
             fallback: str = 'Request failed') -> Any:
        response = self.request('POST', path, json=json, data=data, files=files, fallback=fallback)
        return self._json(response, fallback)

    def put(self, path: str, json: Any = None, fallback: str = 'Request failed') -> Any:
        return self._json(self.request('PUT', path, json=json, fallback=fallback), fallback)

    def delete(self, path: str, fallback: str = 'Request failed') -> Any:
        response = self.request('DELETE', path, fallback=fallback)
        if not response.content:
            return None
        return self._json(response, fallback)

    # ========== File helpers ==========

    def get_file(self, path: str, params: Optional[dict] = None, fallback: str = 'Download failed',
                 expected: Tuple[str, ...] = EXCEL_CONTENT_TYPES) -> Tuple[bytes, str]:
        response = self.request('GET', path, params=params, fallback=fallback)
        return self._file(response, fallback, expected)

    def post_file(self, path: str, json: Any = None, fallback: str = 'Download failed',
                  expected: Tuple[str, ...] = (PDF_CONTENT_TYPE,)) -> Tuple[bytes, str]:
        response = self.request('POST', path, json=json, fallback=fallback)
        return self._file(response, fallback, expected)

    def _file(self, response: requests.Response, fallback: str, expected: Tuple[str, ...]) -> Tuple[bytes, str]:
        """Return (content, content_type); a JSON answer in place of a file is an error"""
        content_type = response.headers.get('Content-Type', '').split(';')[0].strip().lower()
        if content_type == JSON_CONTENT_TYPE or (content_type and content_type not in expected):
            body = self._json_or_none(response)
            raise BackendError(error_message(body, fallback), status_code=response.status_code,
                               payload=body if isinstance(body, dict) else None)
        return response.content, content_type
