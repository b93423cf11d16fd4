"""Per-request log files for the gateway.

Each chat request can be captured in ``logs/requests/<timestamp>-<id>_<model>.log``
with the inbound request, how the session token was obtained, the backend
status and headers, raw stream chunks, errors and the final outcome. Files are
written off the event loop once the request finishes.
"""

import asyncio
import json
import logging
import os
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Mapping, Optional

from ..core.backend import safe_headers_for_log

logger = logging.getLogger("duckproxy")

REQUEST_LOG_DIR = Path(__file__).resolve().parent.parent.parent.joinpath("logs").joinpath("requests")
_PENDING_LOG_TASKS: set[asyncio.Task] = set()


def _register_background_task(task: asyncio.Task) -> None:
    """Keep a reference to a flush task until it completes."""
    _PENDING_LOG_TASKS.add(task)
    task.add_done_callback(_PENDING_LOG_TASKS.discard)


async def wait_for_pending_logs() -> None:
    """Wait for every scheduled log flush (used on shutdown)."""
    if not _PENDING_LOG_TASKS:
        return
    logger.info("Waiting for %d pending log flush tasks", len(_PENDING_LOG_TASKS))
    await asyncio.gather(*list(_PENDING_LOG_TASKS), return_exceptions=True)


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


class RequestLogRecorder:
    """Capture one request's lifecycle and flush it to disk asynchronously.

    With ``enabled=False`` every method is a no-op, so call sites never need
    to check whether disk logging is configured.
    """

    def __init__(
        self,
        model_name: str,
        is_stream: bool,
        enabled: bool = True,
        log_dir: Optional[Path] = None,
    ) -> None:
        self.enabled = enabled
        self.model_name = model_name or "unknown"
        self.is_stream = is_stream
        timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
        short_id = uuid.uuid4().hex[:4]
        filename = f"{timestamp}-{short_id}_{self._safe_fragment(self.model_name)}.log"
        self.log_path = (log_dir or REQUEST_LOG_DIR) / filename
        self._buffer = bytearray()
        self._finalized = False
        self._stream_chunks = 0
        if self.enabled:
            self._append_text(f"log_start={_utcnow()}\nmodel={self.model_name}\nstream={is_stream}\n")

    @property
    def finalized(self) -> bool:
        return self._finalized

    def _active(self) -> bool:
        return self.enabled and not self._finalized

    def _append_text(self, text: str) -> None:
        self._buffer.extend(text.encode("utf-8"))

    def record_request(self, method: str, path: str, headers: Mapping[str, str], body: bytes) -> None:
        if not self._active():
            return
        header_dump = json.dumps(safe_headers_for_log(headers), sort_keys=True)
        self._append_text(f"=== REQUEST ===\n{method} {path}\nheaders={header_dump}\n")
        self._append_text(f"body_len={len(body)}\n-- REQUEST BODY START --\n")
        self._append_text(self._format_payload(body))
        self._append_text("-- REQUEST BODY END --\n")

    def record_token_source(self, source: str) -> None:
        if not self._active():
            return
        self._append_text(f"token_source={source}\n")

    def record_backend_response(self, status: int, headers: Mapping[str, str], body: bytes = b"") -> None:
        if not self._active():
            return
        header_dump = json.dumps(safe_headers_for_log(headers), sort_keys=True)
        self._append_text(f"=== BACKEND RESPONSE ===\nstatus={status}\nresponse_headers={header_dump}\n")
        if body:
            self._append_text(f"body_len={len(body)}\n-- RESPONSE BODY START --\n")
            self._append_text(self._format_payload(body))
            self._append_text("-- RESPONSE BODY END --\n")

    def record_stream_chunk(self, chunk: bytes) -> None:
        if not self._active():
            return
        self._stream_chunks += 1
        self._append_text(f"-- STREAM CHUNK {self._stream_chunks} len={len(chunk)} --\n")
        self._append_text(self._format_payload(chunk))
        self._append_text("-- END STREAM CHUNK --\n")

    def record_error(self, message: str) -> None:
        if not self._active():
            return
        self._append_text(f"ERROR: {message}\n")

    def finalize(self, outcome: str) -> None:
        if self._finalized:
            return
        self._finalized = True
        if not self.enabled:
            return
        self._append_text(f"=== FINAL STATUS: {outcome} at {_utcnow()} ===\n")

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._write_to_disk(bytes(self._buffer))
            return
        task = loop.create_task(asyncio.to_thread(self._write_to_disk, bytes(self._buffer)))
        _register_background_task(task)

    def _write_to_disk(self, data: bytes) -> None:
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.log_path.with_suffix(self.log_path.suffix + ".tmp")
        with tmp_path.open("wb") as fh:
            fh.write(data)
        os.replace(tmp_path, self.log_path)

    @staticmethod
    def _safe_fragment(text: str) -> str:
        filtered = [
            ch if ch.isalnum() or ch in {"-", "_"} else "-"
            for ch in text.strip()
        ]
        collapsed = "".join(filtered).strip("-") or "model"
        return collapsed[:48]

    @staticmethod
    def _format_payload(data: bytes) -> str:
        if not data:
            return ""
        text = data.decode("utf-8", errors="replace")
        if text.endswith("\n"):
            return text
        return text + "\n"
