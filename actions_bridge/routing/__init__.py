# Intent/state-keyed handler dispatch

from actions_bridge.routing.handlers import (
    Deferred,
    Direct,
    DispatchKey,
    HandlerOutcome,
    HandlerTable,
    Immediate,
    Redirect,
    classify,
)
from actions_bridge.routing.router import DispatchResult, DispatchState, IntentRouter

__all__ = [
    "Deferred",
    "Direct",
    "DispatchKey",
    "DispatchResult",
    "DispatchState",
    "HandlerOutcome",
    "HandlerTable",
    "Immediate",
    "IntentRouter",
    "Redirect",
    "classify",
]
