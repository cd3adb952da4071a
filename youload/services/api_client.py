"""HTTP adapter for the publishing service upload endpoint."""
from __future__ import annotations

import logging
import mimetypes
from pathlib import Path
from typing import Any, BinaryIO, Dict, Optional

import httpx

from ..exceptions import NotAuthenticatedError, SubmissionError
from ..models import SubmissionResult, UploadItem
from ..protocols import ISessionGuard, ProgressCallback

logger = logging.getLogger(__name__)

UPLOAD_ENDPOINT = "/upload"


class ProgressReader:
    """
    File wrapper that reports how much of the file httpx has streamed.

    httpx reads multipart file fields in chunks; each read reports the
    current position as a percentage of the file size.
    """

    def __init__(self, raw: BinaryIO, total: int, callback: Optional[ProgressCallback] = None):
        self._raw = raw
        self._total = total
        self._callback = callback

    def read(self, size: int = -1) -> bytes:
        chunk = self._raw.read(size)
        if self._callback and self._total > 0:
            self._callback(min(self._raw.tell() * 100 / self._total, 100.0))
        return chunk

    def seek(self, offset: int, whence: int = 0) -> int:
        return self._raw.seek(offset, whence)

    def tell(self) -> int:
        return self._raw.tell()

    def fileno(self) -> int:
        return self._raw.fileno()


class HTTPSubmissionClient:
    """
    HTTP client adapter for uploads.

    Implements ISubmissionClient protocol. One request per item, no retry.

    Usage:
        async with HTTPSubmissionClient(settings.backend_url, session) as client:
            result = await client.submit(item, progress_callback=print)
    """

    def __init__(
        self,
        base_url: str,
        session: ISessionGuard,
        timeout: float = 600,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url
        self._session = session
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args):
        if self._client:
            await self._client.aclose()
            self._client = None

    @staticmethod
    def build_fields(item: UploadItem) -> Dict[str, str]:
        """Form fields sent alongside the file."""
        return {
            "title": item.title.strip(),
            "description": item.description,
            "tags": ",".join(item.tags),
            "visibility": item.visibility.value,
            "isShorts": "true" if item.is_short_form else "false",
        }

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict) and payload.get("error"):
            return str(payload["error"])
        return "Upload failed"

    async def submit(
        self,
        item: UploadItem,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> SubmissionResult:
        if not self._client:
            raise RuntimeError("HTTPSubmissionClient not initialized. Use 'async with' context.")

        token = self._session.current_credential()
        if not token:
            raise NotAuthenticatedError("No credential available, please log in")

        path = Path(item.file_path)
        mimetype = mimetypes.guess_type(path.name)[0] or "application/octet-stream"

        try:
            with open(path, "rb") as fh:
                total = path.stat().st_size
                reader = ProgressReader(fh, total, progress_callback)
                response = await self._client.post(
                    UPLOAD_ENDPOINT,
                    data=self.build_fields(item),
                    files={"video": (path.name, reader, mimetype)},
                    headers={"Authorization": f"Bearer {token}"},
                )
        except OSError as exc:
            raise SubmissionError(f"Cannot read {path.name}: {exc}") from exc
        except httpx.HTTPError as exc:
            raise SubmissionError(f"Transfer failed: {exc}") from exc

        if not response.is_success:
            raise SubmissionError(self._error_message(response), status_code=response.status_code)

        try:
            payload: Dict[str, Any] = response.json()
        except ValueError as exc:
            raise SubmissionError("Upload response is not JSON", status_code=response.status_code) from exc

        remote_id = payload.get("videoId")
        if not remote_id:
            raise SubmissionError("Upload response has no videoId", status_code=response.status_code)

        logger.debug("Uploaded %s as %s", path.name, remote_id)
        return SubmissionResult(
            remote_id=str(remote_id),
            remote_title=str(payload.get("title") or item.title),
        )
