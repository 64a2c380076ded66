import os
import re
import requests
from requests import Response
from requests.exceptions import RequestException

BASE_URL = os.getenv("API_BASE_URL", "http://127.0.0.1:8000/api")
_FILENAME_RE = re.compile(r'filename="?([^";]+)"?')
DEFAULT_TIMEOUT = 30
UPLOAD_TIMEOUT = 120


def _error_response(error: Exception) -> Response:
    resp = Response()
    resp.status_code = 503
    resp._content = f"Backend unavailable: {error}".encode("utf-8")
    return resp


def error_message(resp: Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text
    return body.get("message", resp.text)


def attachment_filename(resp: Response, default: str) -> str:
    match = _FILENAME_RE.search(resp.headers.get("Content-Disposition", ""))
    return match.group(1).strip() if match else default


def post(path: str, json: dict):
    try:
        return requests.post(f"{BASE_URL}{path}", json=json, timeout=DEFAULT_TIMEOUT)
    except RequestException as exc:
        return _error_response(exc)


def get(path: str, params: dict | None = None):
    try:
        return requests.get(f"{BASE_URL}{path}", params=params, timeout=DEFAULT_TIMEOUT)
    except RequestException as exc:
        return _error_response(exc)


def post_file(path: str, upload_file):
    mime = "text/csv" if upload_file.name.lower().endswith(".csv") else "text/plain"
    files = {"file": (upload_file.name, upload_file.getvalue(), mime)}
    try:
        return requests.post(f"{BASE_URL}{path}", files=files, timeout=UPLOAD_TIMEOUT)
    except RequestException as exc:
        return _error_response(exc)
