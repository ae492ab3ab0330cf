"""
Protocol Adapter

Owns the lifecycle of one webhook call:

    verify -> detect -> build turn -> hydrate Conversation -> dispatch
           -> serialize -> write once

Every failure path still writes exactly one response: configuration and
request errors become a 400 with a short text body, while unknown intents
and failed handlers become an apology in the caller's own wire format.
"""

import asyncio
import time
import uuid
from typing import Any, Callable, Dict, Mapping, Optional

import structlog
from pydantic import ValidationError

from actions_bridge.adapter.transport import ResponseWriter, WebhookRequest, WebhookResponse
from actions_bridge.adapter.verification import HeaderVerifier
from actions_bridge.conversation.conversation import Conversation
from actions_bridge.conversation.turns import Turn, build_turn
from actions_bridge.core.config import AdapterSettings
from actions_bridge.core.exceptions import (
    ActionsBridgeError,
    HandlerExecutionError,
    InvalidResponseError,
    MalformedRequestError,
    VerificationError,
)
from actions_bridge.responses.builder import build_tell
from actions_bridge.routing.handlers import Deferred, HandlerTable, classify
from actions_bridge.routing.router import ErrorHandler, IntentRouter
from actions_bridge.serialization.serializer import Serializer, response_headers
from actions_bridge.wire.detector import detect, is_known_shape
from actions_bridge.wire.models import (
    CONTENT_TYPE_HEADER,
    CONTENT_TYPE_TEXT,
    RESPONSE_CODE_OK,
    ConversationType,
)

logger = structlog.get_logger(__name__)

SessionStarted = Callable[[Conversation], Any]


class ProtocolAdapter:
    """
    Webhook façade.

    Args:
        handlers: HandlerTable, a mapping of intents/states to handlers and
            redirects, or a single callable receiving every turn
        settings: Adapter settings (defaults read from the environment)
        error_handler: Called as ``error_handler(conversation, error)`` when a
            handler raises; the default re-raises
        session_started: Called with the conversation when a new
            conversation starts
    """

    def __init__(
        self,
        handlers: Any,
        settings: Optional[AdapterSettings] = None,
        error_handler: Optional[ErrorHandler] = None,
        session_started: Optional[SessionStarted] = None,
    ) -> None:
        self.settings = settings or AdapterSettings()
        self.table = HandlerTable.coerce(handlers)
        self.router = IntentRouter(self.table, error_handler)
        self.serializer = Serializer(self.settings)
        self.session_started = session_started
        self.verifier: Optional[HeaderVerifier] = None
        if self.settings.verification_enabled:
            self.verifier = HeaderVerifier(self.settings.verification_header, self.settings.verification_value)

    # =========================================================================
    # Intake
    # =========================================================================

    def build_conversation(self, request: WebhookRequest) -> Conversation:
        """
        Detect the wire format and hydrate the Conversation.

        Raises:
            MalformedRequestError: The body has no known shape or fails validation
        """
        body = request.body
        if not is_known_shape(body):
            raise MalformedRequestError("Request body must carry inputs, result or queryResult")
        wire_format = detect(request.headers, body)
        try:
            turn: Turn = build_turn(wire_format, body)
        except ValidationError as e:
            raise MalformedRequestError(f"Malformed {wire_format.label} request: {e.error_count()} invalid field(s)") from e
        return Conversation(turn, request.headers)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def handle(self, request: WebhookRequest) -> WebhookResponse:
        """Process one webhook call and return its single response."""
        request_id = uuid.uuid4().hex[:12]
        log = logger.bind(request_id=request_id)
        started = time.monotonic()
        writer = ResponseWriter()

        if self.settings.log_payloads:
            log.debug("webhook_request", body=request.body)

        try:
            if self.verifier is not None:
                valid, reason = self.verifier.verify(request.headers)
                if not valid:
                    log.warning("verification_failed", reason=reason)
                    raise VerificationError(self.verifier.header)

            conversation = self.build_conversation(request)
            log = log.bind(format=conversation.wire_format.label, intent=conversation.intent)
            log.info("webhook_received", state=conversation.state)

            try:
                await self._session_started(conversation)
            except HandlerExecutionError as e:
                log.error("session_started_failed", error=str(e.original))
                self._apologize(conversation, request, writer)
                return self._finish(writer, log, started)

            result = await self.router.dispatch(conversation)
            if result.error is not None:
                log.warning("dispatch_failed", error=result.error.message, code=result.error.code)
                self._apologize(conversation, request, writer)
            else:
                if conversation.response is None:
                    raise InvalidResponseError("Intent handler did not respond")
                body = conversation.serialize(self.serializer)
                writer.send(RESPONSE_CODE_OK, body, response_headers(request.headers))
        except ActionsBridgeError as e:
            log.warning("webhook_rejected", error=e.message, code=e.code, status=e.http_status)
            writer.send(
                e.http_status,
                f"{self.settings.error_prefix}{e.message}",
                {CONTENT_TYPE_HEADER: CONTENT_TYPE_TEXT},
            )

        return self._finish(writer, log, started)

    def _finish(self, writer: ResponseWriter, log: Any, started: float) -> WebhookResponse:
        response = writer.response
        if self.settings.log_payloads:
            log.debug("webhook_response", status=response.status, body=response.body)
        log.info(
            "webhook_completed",
            status=response.status,
            duration_ms=round((time.monotonic() - started) * 1000, 2),
        )
        return response

    def handle_sync(self, request: WebhookRequest) -> WebhookResponse:
        """Blocking variant for synchronous hosts; not usable inside a running loop."""
        return asyncio.run(self.handle(request))

    async def handle_body(self, body: Any, headers: Optional[Mapping[str, Any]] = None) -> WebhookResponse:
        return await self.handle(WebhookRequest(body=body, headers=dict(headers or {})))

    def _apologize(self, conversation: Conversation, request: WebhookRequest, writer: ResponseWriter) -> None:
        body = conversation.serialize(self.serializer, build_tell(self.settings.apology_text))
        writer.send(self.settings.apology_status_code, body, response_headers(request.headers))

    async def _session_started(self, conversation: Conversation) -> None:
        if self.session_started is None or conversation.conversation_type != ConversationType.NEW:
            return
        logger.debug("session_started", conversation_id=conversation.conversation_id)
        try:
            outcome = classify(self.session_started(conversation))
            if isinstance(outcome, Deferred):
                await outcome.awaitable
        except ActionsBridgeError:
            raise
        except Exception as e:
            raise HandlerExecutionError("session_started", e) from e

    def describe(self) -> Dict[str, Any]:
        return {
            "handlers": [str(key) for key in self.table],
            "single_handler": self.table.default is not None,
            "verification": self.verifier is not None,
        }
