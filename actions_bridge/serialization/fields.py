"""
Generation 1 field names.

Generation 1 spells every response field in snake_case. The rename is a
fixed table over the fields this library emits; keys not in the table
pass through untouched. Values under developer-owned fields (orders,
update arguments) are copied verbatim, so their keys are never renamed.
"""

import copy
from typing import Any, Dict, FrozenSet

GEN1_FIELD_NAMES: Dict[str, str] = {
    # Envelope
    "conversationToken": "conversation_token",
    "expectUserResponse": "expect_user_response",
    "expectedInputs": "expected_inputs",
    "finalResponse": "final_response",
    "speechResponse": "speech_response",
    "userStorage": "user_storage",
    # Prompts
    "inputPrompt": "input_prompt",
    "initialPrompts": "initial_prompts",
    "noInputPrompts": "no_input_prompts",
    "noMatchPrompts": "no_match_prompts",
    "richInitialPrompt": "rich_initial_prompt",
    "textToSpeech": "text_to_speech",
    "displayText": "display_text",
    "isSsml": "is_ssml",
    "speechBiasingHints": "speech_biasing_hints",
    # Intents
    "possibleIntents": "possible_intents",
    "inputValueData": "input_value_data",
    "inputValueSpec": "input_value_spec",
    "permissionValueSpec": "permission_value_spec",
    "optionValueSpec": "option_value_spec",
    "updatePermissionValueSpec": "update_permission_value_spec",
    "systemIntent": "system_intent",
    "optContext": "opt_context",
    "listSelect": "list_select",
    "carouselSelect": "carousel_select",
    "optionInfo": "option_info",
    "dialogSpec": "dialog_spec",
    # Rich items
    "richResponse": "rich_response",
    "simpleResponse": "simple_response",
    "basicCard": "basic_card",
    "formattedText": "formatted_text",
    "imageDisplayOptions": "image_display_options",
    "accessibilityText": "accessibility_text",
    "openUrlAction": "open_url_action",
    "linkOutSuggestion": "link_out_suggestion",
    "destinationName": "destination_name",
    "tableCard": "table_card",
    "columnProperties": "column_properties",
    "horizontalAlignment": "horizontal_alignment",
    "dividerAfter": "divider_after",
    "mediaResponse": "media_response",
    "mediaType": "media_type",
    "mediaObjects": "media_objects",
    "contentUrl": "content_url",
    "largeImage": "large_image",
    "carouselBrowse": "carousel_browse",
    "structuredResponse": "structured_response",
    "orderUpdate": "order_update",
}

GEN1_OPAQUE_FIELDS: FrozenSet[str] = frozenset({"orderUpdate", "proposedOrder", "arguments"})


def to_gen1(value: Any) -> Any:
    """Return a copy of ``value`` with emitted field names in snake_case."""
    if isinstance(value, list):
        return [to_gen1(item) for item in value]
    if isinstance(value, dict):
        return {
            GEN1_FIELD_NAMES.get(key, key): copy.deepcopy(item) if key in GEN1_OPAQUE_FIELDS else to_gen1(item)
            for key, item in value.items()
        }
    return value
