"""Unit tests for handler tables and intent routing."""

import asyncio
from types import SimpleNamespace

import pytest

from actions_bridge.conversation import State
from actions_bridge.core.exceptions import (
    CircularRedirectError,
    ConfigurationError,
    HandlerExecutionError,
    HandlerNotFoundError,
    InvalidResponseError,
)
from actions_bridge.routing import (
    Deferred,
    Direct,
    DispatchKey,
    DispatchState,
    HandlerTable,
    Immediate,
    IntentRouter,
    Redirect,
    classify,
)


def _turn(intent, state=None):
    """Minimal stand-in for a Conversation."""
    return SimpleNamespace(
        intent=intent,
        state=state,
        parameters={"number": "7"},
        arguments=SimpleNamespace(first=lambda: "first-arg"),
        calls=[],
    )


class TestHandlerTable:
    """Tests for building handler tables."""

    def test_from_mapping(self):
        """Test callables, redirects and state scopes are flattened."""
        def welcome(conv, params, arg):
            pass

        table = HandlerTable.from_mapping({
            "input.welcome": welcome,
            "input.unknown": "input.welcome",
            State("guessing"): {"check_guess": welcome},
            "done": {"check_guess": "input.welcome"},
        })

        assert table.lookup("input.welcome") == (DispatchKey(None, "input.welcome"), Direct(welcome))
        assert table.lookup("input.unknown")[1] == Redirect("input.welcome")
        assert table.lookup("check_guess", "guessing")[0] == DispatchKey("guessing", "check_guess")
        assert table.lookup("check_guess", "done")[1] == Redirect("input.welcome")
        assert table.lookup("check_guess") == (None, None)
        assert len(table) == 4

    def test_state_scope_falls_back_to_stateless(self):
        """Test stateless entries apply in any state."""
        table = HandlerTable.from_mapping({"input.welcome": lambda *a: None})

        key, entry = table.lookup("input.welcome", "guessing")

        assert key == DispatchKey(None, "input.welcome")
        assert isinstance(entry, Direct)

    @pytest.mark.parametrize(
        "mapping",
        [
            {"a": 5},
            {"a": ""},
            {"": lambda *a: None},
            {"s": {"a": {"b": lambda *a: None}}},
        ],
    )
    def test_invalid_tables(self, mapping):
        """Test invalid entries are configuration errors."""
        with pytest.raises(ConfigurationError):
            HandlerTable.from_mapping(mapping)

    def test_coerce(self):
        """Test tables, mappings and callables are accepted."""
        def handler(conv, params, arg):
            pass

        assert HandlerTable.coerce(handler).default == Direct(handler)
        assert "x" not in HandlerTable.coerce({"x": handler})
        assert DispatchKey(None, "x") in HandlerTable.coerce({"x": handler})
        with pytest.raises(ConfigurationError):
            HandlerTable.coerce(42)

    def test_classify(self):
        """Test handler results are classified once."""
        async def deferred():
            return None

        awaitable = deferred()
        try:
            assert isinstance(classify(awaitable), Deferred)
        finally:
            awaitable.close()
        assert classify(None) == Immediate(None)


class TestResolve:
    """Tests for redirect resolution."""

    def test_redirect_resolves(self):
        """Test {"A": "B", "B": handler} dispatches A to the handler."""
        def handler(conv, params, arg):
            pass

        router = IntentRouter(HandlerTable.from_mapping({"A": "B", "B": handler}))

        resolved, entry, redirects = router.resolve("A")

        assert resolved == "B"
        assert entry.handler is handler
        assert redirects == ["B"]

    @pytest.mark.parametrize("key", ["A", "B"])
    def test_cycle_detected(self, key):
        """Test {"A": "B", "B": "A"} is a circular map from either key."""
        router = IntentRouter(HandlerTable.from_mapping({"A": "B", "B": "A"}))

        with pytest.raises(CircularRedirectError) as exc_info:
            router.resolve(key)

        assert exc_info.value.chain[0] == key
        assert exc_info.value.chain[-1] == key

    def test_self_redirect(self):
        """Test a key redirecting to itself is circular."""
        router = IntentRouter(HandlerTable.from_mapping({"A": "A"}))

        with pytest.raises(CircularRedirectError):
            router.resolve("A")

    def test_dangling_redirect(self):
        """Test a redirect to an unknown key is not found."""
        router = IntentRouter(HandlerTable.from_mapping({"A": "missing"}))

        with pytest.raises(HandlerNotFoundError) as exc_info:
            router.resolve("A")

        assert exc_info.value.key == "missing"

    def test_single_handler(self):
        """Test a single handler receives every key."""
        def handler(conv, params, arg):
            pass

        router = IntentRouter(HandlerTable.single(handler))

        assert router.resolve("anything")[1].handler is handler


class TestDispatch:
    """Tests for dispatching a turn."""

    @pytest.mark.asyncio
    async def test_sync_handler(self):
        """Test sync handlers get conversation, parameters and first argument."""
        def handler(conv, params, arg):
            conv.calls.append((params, arg))

        turn = _turn("A")
        result = await IntentRouter(HandlerTable.from_mapping({"A": "B", "B": handler})).dispatch(turn)

        assert result.succeeded
        assert result.resolved == "B"
        assert result.redirects == ["B"]
        assert turn.calls == [({"number": "7"}, "first-arg")]
        assert [state for state, _ in result.history] == [
            DispatchState.AWAITING_DISPATCH,
            DispatchState.REDIRECTED,
            DispatchState.DISPATCHED,
        ]

    @pytest.mark.asyncio
    async def test_async_handler_awaited(self):
        """Test deferred handlers settle before dispatch completes."""
        async def handler(conv, params, arg):
            await asyncio.sleep(0)
            conv.calls.append("done")

        turn = _turn("A")
        result = await IntentRouter(HandlerTable.from_mapping({"A": handler})).dispatch(turn)

        assert result.state == DispatchState.DISPATCHED
        assert turn.calls == ["done"]

    @pytest.mark.asyncio
    async def test_state_scoped_dispatch(self):
        """Test the state's table is consulted first."""
        def stateless(conv, params, arg):
            conv.calls.append("stateless")

        def scoped(conv, params, arg):
            conv.calls.append("scoped")

        table = HandlerTable.from_mapping({"guess": stateless, "guessing": {"guess": scoped}})
        turn = _turn("guess", state="guessing")

        await IntentRouter(table).dispatch(turn)

        assert turn.calls == ["scoped"]

    @pytest.mark.asyncio
    async def test_unknown_key(self):
        """Test an unknown key ends in a terminal error."""
        result = await IntentRouter(HandlerTable.from_mapping({"A": lambda *a: None})).dispatch(_turn("Z"))

        assert result.state == DispatchState.TERMINAL_ERROR
        assert isinstance(result.error, HandlerNotFoundError)

    @pytest.mark.asyncio
    async def test_cycle_propagates(self):
        """Test a circular map fails the turn."""
        router = IntentRouter(HandlerTable.from_mapping({"A": "B", "B": "A"}))

        with pytest.raises(CircularRedirectError):
            await router.dispatch(_turn("A"))

    @pytest.mark.asyncio
    async def test_handler_error_default_reraise(self):
        """Test the default error handler re-raises into a terminal error."""
        async def handler(conv, params, arg):
            raise RuntimeError("boom")

        result = await IntentRouter(HandlerTable.from_mapping({"A": handler})).dispatch(_turn("A"))

        assert result.state == DispatchState.TERMINAL_ERROR
        assert isinstance(result.error, HandlerExecutionError)
        assert isinstance(result.error.original, RuntimeError)

    @pytest.mark.asyncio
    async def test_error_handler_recovers(self):
        """Test a registered error handler can recover the turn."""
        def handler(conv, params, arg):
            raise ValueError("bad")

        def on_error(conv, error):
            conv.calls.append(type(error).__name__)

        turn = _turn("A")
        result = await IntentRouter(HandlerTable.from_mapping({"A": handler}), on_error).dispatch(turn)

        assert result.succeeded
        assert turn.calls == ["ValueError"]

    @pytest.mark.asyncio
    async def test_configuration_error_propagates(self):
        """Test response construction errors bypass the error handler."""
        def handler(conv, params, arg):
            raise InvalidResponseError("bad response")

        def on_error(conv, error):
            conv.calls.append("called")

        turn = _turn("A")
        with pytest.raises(InvalidResponseError):
            await IntentRouter(HandlerTable.from_mapping({"A": handler}), on_error).dispatch(turn)
        assert turn.calls == []
