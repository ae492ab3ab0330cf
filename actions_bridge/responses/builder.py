"""
Response Builder

Turns what a handler passes to ``ask``/``tell`` into a validated
ResponseModel. Validation happens here, before anything reaches the
serializer, so an invalid response never produces a partial write.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

from actions_bridge.core.exceptions import InvalidResponseError
from actions_bridge.responses.prompts import InputPrompt, checked_prompts
from actions_bridge.responses.rich import RichResponse, SimpleResponse
from actions_bridge.responses.ssml import speech_fields
from actions_bridge.responses.system_intents import SystemIntent

ResponseInput = Union[str, SimpleResponse, RichResponse, InputPrompt]


@dataclass
class FollowupEvent:
    """Dialogflow event that triggers another intent instead of speaking."""

    name: str
    parameters: Dict[str, Any] = field(default_factory=dict)
    language: Optional[str] = None


@dataclass
class ResponseModel:
    """
    Everything a handler declared for this turn.

    Exactly one of ``prompt``, ``rich_response`` or ``followup`` is set.
    Reprompts for a rich response live in ``no_input`` and ``no_match``; a
    plain prompt carries its own. Handler-supplied objects are snapshotted
    when the response is committed.
    """

    expect_user_response: bool
    prompt: Optional[InputPrompt] = None
    rich_response: Optional[RichResponse] = None
    system_intent: Optional[SystemIntent] = None
    followup: Optional[FollowupEvent] = None
    no_input: List[str] = field(default_factory=list)
    no_match: List[str] = field(default_factory=list)
    speech_biasing_hints: List[str] = field(default_factory=list)

    @property
    def is_ask(self) -> bool:
        return self.expect_user_response

    def validate(self) -> None:
        if self.system_intent is not None and not self.expect_user_response:
            raise InvalidResponseError("A system intent requires expecting a user response")
        if self.rich_response is not None:
            self.rich_response.validate()

    def no_input_prompts(self) -> List[Dict[str, Any]]:
        if self.prompt is not None:
            return self.prompt.no_input_prompts()
        return [speech_fields(prompt) for prompt in self.no_input]

    def no_match_prompts(self) -> List[Dict[str, Any]]:
        if self.prompt is not None:
            return self.prompt.no_match_prompts()
        return [speech_fields(prompt) for prompt in self.no_match]

    def speech(self) -> Optional[str]:
        """The first spoken string, used for Dialogflow's plain speech field."""
        if self.prompt is not None:
            return self.prompt.initial
        if self.rich_response is not None:
            first = self.rich_response.first_simple_response()
            if first:
                return first.get("textToSpeech") or first.get("ssml")
        return None

    def display_text(self) -> Optional[str]:
        if self.rich_response is not None:
            first = self.rich_response.first_simple_response()
            if first:
                return first.get("displayText") or first.get("textToSpeech") or first.get("ssml")
        return self.speech()


def _coerce(
    response: ResponseInput,
    no_input: Optional[Sequence[str]],
    no_match: Optional[Sequence[str]],
) -> ResponseModel:
    if isinstance(response, InputPrompt):
        return ResponseModel(expect_user_response=True, prompt=copy.deepcopy(response))
    if isinstance(response, str):
        prompt = InputPrompt(initial=response, no_input=list(no_input or []), no_match=list(no_match or []))
        return ResponseModel(expect_user_response=True, prompt=prompt)
    if isinstance(response, SimpleResponse):
        response = RichResponse().add_simple_response(response)
    if isinstance(response, RichResponse):
        response.validate()
        return ResponseModel(
            expect_user_response=True,
            rich_response=copy.deepcopy(response),
            no_input=checked_prompts("no-input", no_input),
            no_match=checked_prompts("no-match", no_match),
        )
    raise InvalidResponseError(f"Invalid response type: {type(response).__name__}")


def build_ask(
    response: ResponseInput,
    no_input: Optional[Sequence[str]] = None,
    no_match: Optional[Sequence[str]] = None,
    speech_biasing_hints: Optional[Sequence[str]] = None,
) -> ResponseModel:
    """
    Build a response that keeps the microphone open.

    Args:
        response: Text/SSML, a SimpleResponse, a RichResponse or an InputPrompt
        no_input: Up to three reprompts when the user says nothing
        no_match: Up to three reprompts when input is not understood
        speech_biasing_hints: Phrases that bias speech recognition
    """
    model = _coerce(response, no_input, no_match)
    model.speech_biasing_hints = list(speech_biasing_hints or [])
    return model


def build_tell(response: Union[str, SimpleResponse, RichResponse]) -> ResponseModel:
    """Build a final response that ends the conversation."""
    if isinstance(response, InputPrompt):
        raise InvalidResponseError("A final response cannot carry reprompts")
    model = _coerce(response, None, None)
    model.expect_user_response = False
    return model


def build_system_intent(intent: SystemIntent, prompt: Optional[ResponseInput] = None) -> ResponseModel:
    """
    Build an ask that hands the next turn to a platform dialog.

    Without a prompt the platform-owned placeholder is spoken.
    """
    model = build_ask(prompt if prompt is not None else intent.placeholder)
    model.system_intent = intent
    return model


def build_followup(name: str, parameters: Optional[Dict[str, Any]] = None, language: Optional[str] = None) -> ResponseModel:
    if not name:
        raise InvalidResponseError("Followup event requires a name")
    return ResponseModel(
        expect_user_response=True,
        followup=FollowupEvent(name=name, parameters=dict(parameters or {}), language=language),
    )
