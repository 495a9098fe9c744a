"""Streamed download response

BlobStreamResponse pipes chunks from the blob store straight into the ASGI
send channel. Its progress is tracked by DownloadState, and the state at the
moment of a failure decides the recovery path:

- NOT_STARTED: the stream failed to open or to produce its first chunk.
  A structured 500 body is sent instead of the file.
- HEADERS_SENT / STREAMING: the 200 status line is already on the wire.
  The failure is logged, the upstream stream is closed and
  DownloadAbortedError is raised out of the app so the server drops the
  connection. No error payload is appended to the partial body.

A client disconnect cancels the transfer and closes the upstream stream
without raising.
"""

import logging
from typing import AsyncIterator, Optional
from urllib.parse import quote

import anyio
from starlette.responses import JSONResponse, Response
from starlette.types import Receive, Scope, Send

from ..domain.deals.ports.document_registry_port import FileRecordData
from ..domain.documents.download_state import (
    DownloadState,
    InvalidDownloadTransition,
    can_transition,
    headers_committed,
    is_terminal,
)
from ..domain.errors import DownloadAbortedError, InternalError
from ..observability.metrics import download_bytes_total, downloads_total

logger = logging.getLogger(__name__)


def content_disposition(filename: str) -> str:
    """Build an attachment Content-Disposition header value.

    Plain ASCII names are sent as-is; anything else gets an ASCII fallback
    plus an RFC 5987 filename* parameter.

    Example:
        >>> content_disposition("contract.pdf")
        'attachment; filename="contract.pdf"'
        >>> content_disposition("vertrag-ü.pdf")
        'attachment; filename="vertrag-_.pdf"; filename*=utf-8\\'\\'vertrag-%C3%BC.pdf'
    """
    fallback = "".join(
        c if 32 <= ord(c) < 127 and c not in '"\\' else "_"
        for c in filename
    )
    if fallback == filename:
        return f'attachment; filename="{filename}"'
    return f"attachment; filename=\"{fallback}\"; filename*=utf-8''{quote(filename)}"


class BlobStreamResponse(Response):
    """ASGI response streaming one file record's blob."""

    def __init__(
        self,
        record: FileRecordData,
        chunks: AsyncIterator[bytes],
        chunk_timeout: Optional[float] = None,
    ):
        self.record = record
        self.chunks = chunks
        self.chunk_timeout = chunk_timeout
        self.status_code = 200
        self.media_type = record.content_type
        self.background = None
        self.state = DownloadState.NOT_STARTED
        self.bytes_sent = 0
        self._failure: Optional[BaseException] = None

        # Headers are fixed before the blob stream is opened
        self.init_headers({
            "content-disposition": content_disposition(record.filename),
            "content-length": str(record.size),
            "x-content-type-options": "nosniff",
        })

    def _transition(self, to_state: DownloadState) -> None:
        if not can_transition(self.state, to_state):
            raise InvalidDownloadTransition(f"{self.state.value} -> {to_state.value}")
        self.state = to_state

    async def _read_chunk(self) -> Optional[bytes]:
        """Next chunk from upstream, or None once the blob is exhausted."""
        try:
            if self.chunk_timeout:
                with anyio.fail_after(self.chunk_timeout):
                    return await self.chunks.__anext__()
            return await self.chunks.__anext__()
        except StopAsyncIteration:
            return None

    async def _close_upstream(self) -> None:
        aclose = getattr(self.chunks, "aclose", None)
        if aclose is None:
            return
        with anyio.CancelScope(shield=True):
            try:
                await aclose()
            except Exception as e:
                logger.warning(
                    f"Failed to close blob stream: storage_key={self.record.storage_key}, error={e}"
                )

    def _log_extra(self) -> dict:
        return {
            "deal_id": self.record.deal_id,
            "file_id": self.record.id,
            "storage_key": self.record.storage_key,
            "download_state": self.state.value,
            "bytes_sent": self.bytes_sent,
        }

    async def _fail_before_headers(self, send: Send, exc: Exception) -> None:
        logger.error(
            f"Error opening file stream: deal_id={self.record.deal_id}, file_id={self.record.id}",
            exc_info=exc,
            extra=self._log_extra(),
        )
        self._transition(DownloadState.ABORTED)

        error = InternalError("Error downloading file")
        response = JSONResponse(
            status_code=error.status_code,
            content={"error": error.error_code, "message": error.message},
        )
        await send({
            "type": "http.response.start",
            "status": response.status_code,
            "headers": response.raw_headers,
        })
        await send({"type": "http.response.body", "body": response.body})

    async def _stream(self, send: Send) -> None:
        try:
            chunk = await self._read_chunk()
        except Exception as exc:
            await self._fail_before_headers(send, exc)
            return

        try:
            await send({
                "type": "http.response.start",
                "status": self.status_code,
                "headers": self.raw_headers,
            })
            self._transition(DownloadState.HEADERS_SENT)

            while chunk is not None:
                await send({"type": "http.response.body", "body": chunk, "more_body": True})
                self.bytes_sent += len(chunk)
                if self.state == DownloadState.HEADERS_SENT:
                    self._transition(DownloadState.STREAMING)
                chunk = await self._read_chunk()

            await send({"type": "http.response.body", "body": b"", "more_body": False})
            self._transition(DownloadState.DONE)
        except Exception as exc:
            if is_terminal(self.state):
                # Client disconnect already ended the transfer
                return
            # Either the headers are committed or the send channel itself
            # failed; in both cases only dropping the connection is left.
            stage = "after headers were sent" if headers_committed(self.state) else "while sending headers"
            self._failure = exc
            logger.error(
                f"Download aborted {stage}: deal_id={self.record.deal_id}, "
                f"file_id={self.record.id}, bytes_sent={self.bytes_sent}",
                exc_info=exc,
                extra=self._log_extra(),
            )
            self._transition(DownloadState.ABORTED)

    async def _listen_for_disconnect(self, receive: Receive) -> None:
        while True:
            message = await receive()
            if message["type"] == "http.disconnect":
                break

        if not is_terminal(self.state):
            logger.info(
                f"Client disconnected during download: deal_id={self.record.deal_id}, "
                f"file_id={self.record.id}, bytes_sent={self.bytes_sent}",
                extra=self._log_extra(),
            )
            self._transition(DownloadState.ABORTED)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            async with anyio.create_task_group() as task_group:

                async def run_and_cancel(func, *args) -> None:
                    await func(*args)
                    task_group.cancel_scope.cancel()

                task_group.start_soon(run_and_cancel, self._stream, send)
                await run_and_cancel(self._listen_for_disconnect, receive)
        finally:
            await self._close_upstream()
            downloads_total.labels(final_state=self.state.value).inc()
            download_bytes_total.inc(self.bytes_sent)

        if self._failure is not None:
            raise DownloadAbortedError(
                deal_id=self.record.deal_id,
                file_id=self.record.id,
                bytes_sent=self.bytes_sent,
            ) from self._failure
