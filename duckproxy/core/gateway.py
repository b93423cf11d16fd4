"""Drive one chat completion against the backend.

For every inbound request the gateway opens a request-scoped HTTP client,
obtains a session token (the caller's, or a fresh one from the status probe),
posts the translated conversation to the chat endpoint and either bridges
the event stream to the caller or aggregates it into one completion.
"""

import logging
from typing import AsyncIterator, Optional

import httpx
from fastapi.responses import JSONResponse, Response, StreamingResponse
from starlette.background import BackgroundTask

from ..types import ChatRequest
from .aggregator import aggregate
from .backend import BackendSettings, format_httpx_error, safe_headers_for_log
from .exceptions import BackendRequestError, StreamReadError
from .frames import StreamContext
from .sse import encode_sse
from .stream_bridge import bridge_stream
from .token import TokenProvider
from .translator import translate_request

logger = logging.getLogger("duckproxy")


class BackendChat:
    """An open backend chat response and the client that owns it.

    Closing is idempotent; it may be triggered both by the body iterator's
    ``finally`` and by the response's background task.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        response: httpx.Response,
        request_log: Optional[object] = None,
    ) -> None:
        self.client = client
        self.response = response
        self.request_log = request_log
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        logger.debug("Closing backend chat stream")
        try:
            await self.response.aclose()
        finally:
            await self.client.aclose()

    async def iter_bytes(self) -> AsyncIterator[bytes]:
        """Yield decoded body bytes.

        Raises:
            StreamReadError: The connection failed mid-body.
        """
        try:
            async for chunk in self.response.aiter_bytes():
                if not chunk:
                    continue
                if self.request_log is not None:
                    self.request_log.record_stream_chunk(chunk)
                yield chunk
        except (httpx.HTTPError, httpx.StreamError) as exc:
            message = format_httpx_error(exc)
            if self.request_log is not None:
                self.request_log.record_error(f"stream read error: {message}")
            raise StreamReadError(message) from exc


class ChatGateway:
    """Entry point used by the chat completion route."""

    def __init__(
        self,
        settings: BackendSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings = settings
        self.transport = transport
        self.token_provider = TokenProvider(settings)

    def _new_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.settings.build_timeout(), transport=self.transport)

    async def open_chat(
        self,
        chat_request: ChatRequest,
        caller_token: Optional[str] = None,
        request_log: Optional[object] = None,
    ) -> tuple[BackendChat, str]:
        """Post the conversation and return the open response.

        Returns:
            The open chat and the session token to report back to the caller.

        Raises:
            TokenAcquisitionError: No caller token and the probe failed.
            BackendRequestError: The chat call failed or returned an error status.
        """
        client = self._new_client()
        try:
            if caller_token:
                token = caller_token
                if request_log is not None:
                    request_log.record_token_source("caller")
            else:
                token = await self.token_provider.acquire(client)
                if request_log is not None:
                    request_log.record_token_source("status probe")

            body = translate_request(chat_request)
            request = client.build_request(
                "POST",
                self.settings.chat_url,
                headers=self.settings.chat_headers(token),
                json=body,
            )
            logger.debug("Sending chat request to %s", self.settings.chat_url)
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("Request headers: %s", safe_headers_for_log(request.headers))
            try:
                resp = await client.send(request, stream=True)
            except httpx.HTTPError as exc:
                message = format_httpx_error(exc, self.settings.chat_url)
                logger.error("Failed to send chat request: %s", message)
                raise BackendRequestError(message, body=message) from exc
        except BaseException:
            await client.aclose()
            raise

        if not resp.is_success:
            try:
                data = await resp.aread()
            except httpx.HTTPError as exc:
                data = format_httpx_error(exc).encode("utf-8")
            finally:
                await resp.aclose()
                await client.aclose()
            text = data.decode("utf-8", errors="replace")
            logger.warning(
                "Chat request to %s returned status %s", self.settings.chat_url, resp.status_code
            )
            if request_log is not None:
                request_log.record_backend_response(resp.status_code, resp.headers, data)
            raise BackendRequestError(
                f"chat request returned status {resp.status_code}",
                body=text,
                status_code=resp.status_code,
            )

        if request_log is not None:
            request_log.record_backend_response(resp.status_code, resp.headers)
        response_token = resp.headers.get(self.settings.token_header) or token
        return BackendChat(client, resp, request_log), response_token

    async def complete(
        self,
        chat_request: ChatRequest,
        caller_token: Optional[str] = None,
        request_log: Optional[object] = None,
    ) -> Response:
        """Run a chat completion and build the response for the caller."""
        chat, token = await self.open_chat(chat_request, caller_token, request_log)
        context = StreamContext(model=chat_request.model)
        reply_headers = {self.settings.token_header: token}
        logger.info(
            "Chat completion: model=%s, messages=%d, stream=%s",
            chat_request.model,
            len(chat_request.messages),
            chat_request.wants_stream,
        )

        if chat_request.wants_stream:
            return self._stream_response(chat, context, reply_headers)

        try:
            completion = await aggregate(chat.iter_bytes(), context)
        except BaseException:
            if request_log is not None and not request_log.finalized:
                request_log.finalize("error")
            raise
        finally:
            await chat.aclose()

        content = completion["choices"][0]["message"]["content"]
        logger.info("Aggregated completion for model=%s, length=%d", chat_request.model, len(content))
        if request_log is not None and not request_log.finalized:
            request_log.finalize("success")
        return JSONResponse(content=completion, headers=reply_headers)

    def _stream_response(
        self,
        chat: BackendChat,
        context: StreamContext,
        headers: dict[str, str],
    ) -> StreamingResponse:
        request_log = chat.request_log

        async def iterator() -> AsyncIterator[bytes]:
            outcome = "error"
            try:
                async for frame in bridge_stream(chat.iter_bytes(), context):
                    yield encode_sse(frame)
                outcome = "success"
            finally:
                await chat.aclose()
                if request_log is not None and not request_log.finalized:
                    request_log.finalize(outcome)

        return StreamingResponse(
            iterator(),
            headers=headers,
            media_type="text/event-stream",
            background=BackgroundTask(chat.aclose),
        )
