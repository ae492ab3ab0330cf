"""
Intent Router

Resolves a turn's dispatch key against the handler table, follows redirects,
invokes the handler and records how dispatch ended.

States:
    AWAITING_DISPATCH -> REDIRECTED* -> DISPATCHED
                                     -> TERMINAL_ERROR

A redirect loop is a configuration error and fails the turn. An unknown key
or a failing handler ends in TERMINAL_ERROR, which the façade turns into an
apology.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional, Tuple

import structlog

from actions_bridge.core.exceptions import (
    ActionsBridgeError,
    CircularRedirectError,
    ConfigurationError,
    HandlerExecutionError,
    HandlerNotFoundError,
)
from actions_bridge.routing.handlers import Deferred, Direct, HandlerTable, Redirect, classify

logger = structlog.get_logger(__name__)

ErrorHandler = Callable[[Any, BaseException], Any]


class DispatchState(str, Enum):
    """Router state for one turn."""

    AWAITING_DISPATCH = "awaiting_dispatch"
    DISPATCHED = "dispatched"
    REDIRECTED = "redirected"
    TERMINAL_ERROR = "terminal_error"


@dataclass
class DispatchResult:
    """
    How dispatch of one turn ended.

    Attributes:
        state: DISPATCHED or TERMINAL_ERROR
        key: Dispatch key of the turn
        resolved: Key whose handler ran, after redirects
        redirects: Keys visited through redirects
        error: Error that ended dispatch, if any
        history: (state, timestamp) transitions
    """

    state: DispatchState
    key: Optional[str]
    resolved: Optional[str] = None
    redirects: List[str] = field(default_factory=list)
    error: Optional[ActionsBridgeError] = None
    history: List[Tuple[DispatchState, float]] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.state == DispatchState.DISPATCHED


async def reraise(conversation: Any, error: BaseException) -> None:
    """Default error handler."""
    raise error


class IntentRouter:
    """Dispatches one conversation turn to its handler."""

    def __init__(self, table: HandlerTable, error_handler: Optional[ErrorHandler] = None) -> None:
        self.table = table
        self.error_handler = error_handler or reraise

    def resolve(self, key: Optional[str], state: Optional[str] = None) -> Tuple[str, Direct, List[str]]:
        """
        Follow redirects from ``key`` to a handler.

        Returns:
            Tuple of (resolved key, handler entry, redirect chain)

        Raises:
            CircularRedirectError: A key repeats while following redirects
            HandlerNotFoundError: No entry matches
        """
        if self.table.default is not None:
            return key or "", self.table.default, []

        dispatch_key, entry = self.table.lookup(key, state)
        visited = [dispatch_key] if dispatch_key else []
        chain = [key] if key else []
        while isinstance(entry, Redirect):
            target = entry.target
            dispatch_key, entry = self.table.lookup(target, state)
            chain.append(target)
            if dispatch_key in visited:
                raise CircularRedirectError(chain)
            if dispatch_key is not None:
                visited.append(dispatch_key)
        if not isinstance(entry, Direct):
            raise HandlerNotFoundError(chain[-1] if chain else key)
        return chain[-1], entry, chain[1:]

    async def dispatch(self, conversation: Any) -> DispatchResult:
        """
        Run the handler for ``conversation``.

        The handler is called as ``handler(conversation, parameters,
        first_argument)`` and may return an awaitable. Configuration errors
        raised while resolving or while the handler builds its response
        propagate; everything else ends in a DispatchResult.
        """
        key = conversation.intent
        result = DispatchResult(state=DispatchState.AWAITING_DISPATCH, key=key)

        def transition(state: DispatchState) -> None:
            result.state = state
            result.history.append((state, time.time()))

        transition(DispatchState.AWAITING_DISPATCH)
        try:
            resolved, entry, redirects = self.resolve(key, conversation.state)
        except HandlerNotFoundError as e:
            logger.warning("handler_not_found", key=key, state=conversation.state)
            transition(DispatchState.TERMINAL_ERROR)
            result.error = e
            return result

        if redirects:
            transition(DispatchState.REDIRECTED)
        result.resolved = resolved
        result.redirects = redirects
        logger.debug("handler_resolved", key=key, resolved=resolved, redirects=redirects)

        try:
            outcome = classify(entry.handler(conversation, conversation.parameters, conversation.arguments.first()))
            if isinstance(outcome, Deferred):
                await outcome.awaitable
        except ConfigurationError:
            transition(DispatchState.TERMINAL_ERROR)
            raise
        except Exception as e:
            logger.error("handler_failed", key=resolved, error=str(e), exc_info=True)
            try:
                recovered = classify(self.error_handler(conversation, e))
                if isinstance(recovered, Deferred):
                    await recovered.awaitable
            except Exception as final:
                transition(DispatchState.TERMINAL_ERROR)
                result.error = HandlerExecutionError(resolved, final)
                return result
            logger.info("handler_error_recovered", key=resolved)

        transition(DispatchState.DISPATCHED)
        return result
