"""Plain-text prompts with reprompt arrays."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from actions_bridge.core.exceptions import InvalidResponseError, PromptLimitError
from actions_bridge.responses.ssml import is_ssml, speech_fields

INPUTS_MAX = 3


def checked_prompts(kind: str, prompts: Optional[Sequence[str]]) -> List[str]:
    """Validate a reprompt array against the platform ceiling."""
    prompts = list(prompts or [])
    if len(prompts) > INPUTS_MAX:
        raise PromptLimitError(kind, len(prompts), INPUTS_MAX)
    for prompt in prompts:
        if not isinstance(prompt, str) or not prompt:
            raise InvalidResponseError(f"Invalid {kind} prompt: {prompt!r}")
    return prompts


@dataclass
class InputPrompt:
    """
    An initial prompt and its reprompts.

    Attributes:
        initial: Spoken text or SSML
        no_input: Prompts for when the user says nothing (max 3)
        no_match: Prompts for when input is not understood (max 3)
    """

    initial: str
    no_input: List[str] = field(default_factory=list)
    no_match: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not isinstance(self.initial, str) or not self.initial.strip():
            raise InvalidResponseError("Invalid text to speech")
        self.no_input = checked_prompts("no-input", self.no_input)
        self.no_match = checked_prompts("no-match", self.no_match)

    @property
    def is_ssml(self) -> bool:
        return is_ssml(self.initial)

    def initial_prompts(self) -> List[Dict[str, Any]]:
        return [speech_fields(self.initial)]

    def no_input_prompts(self) -> List[Dict[str, Any]]:
        return [speech_fields(prompt) for prompt in self.no_input]

    def no_match_prompts(self) -> List[Dict[str, Any]]:
        return [speech_fields(prompt) for prompt in self.no_match]
