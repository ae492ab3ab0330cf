"""
System Intents

Builders for platform-owned dialogs (permission, sign-in, confirmation,
date-time, transactions, option select and the rest). Each builder validates
its required fields and returns a SystemIntent; the prompt spoken while the
platform runs the dialog is a fixed placeholder.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from actions_bridge.core.exceptions import SystemIntentError
from actions_bridge.responses.options import CarouselSelect, ListSelect
from actions_bridge.responses.transactions import (
    TransactionConfig,
    parse_transaction_config,
    transaction_options,
)
from actions_bridge.wire.models import (
    ANY_TYPE_PROPERTY,
    PLACEHOLDER_PROMPTS,
    ApiGeneration,
    DialogSpecTypes,
    InputValueDataTypes,
    StandardIntents,
    SupportedPermissions,
    standard_intents,
)

ASSISTANT_PERMISSIONS = (
    SupportedPermissions.NAME.value,
    SupportedPermissions.DEVICE_PRECISE_LOCATION.value,
    SupportedPermissions.DEVICE_COARSE_LOCATION.value,
)


@dataclass
class SystemIntent:
    """
    A request for the platform to run one of its own dialogs.

    Attributes:
        kind: Key into the standard intent table (e.g. ``PERMISSION``)
        value_type: ``@type`` of the generation 2 payload
        spec: Payload body without ``@type``
        legacy_spec_key: Generation 1 ``*ValueSpec`` wrapper key, when the
            dialog existed in generation 1
    """

    kind: str
    value_type: str
    spec: Dict[str, Any] = field(default_factory=dict)
    legacy_spec_key: Optional[str] = None

    @property
    def placeholder(self) -> str:
        return PLACEHOLDER_PROMPTS[self.kind]

    def intent_name(self, generation: ApiGeneration) -> str:
        return getattr(standard_intents(generation), self.kind)

    def uses_legacy_spec(self, generation: ApiGeneration) -> bool:
        return generation == ApiGeneration.GEN1 and self.legacy_spec_key is not None

    def value_data(self) -> Dict[str, Any]:
        data = {ANY_TYPE_PROPERTY: self.value_type}
        data.update(copy.deepcopy(self.spec))
        return data

    def legacy_spec(self) -> Dict[str, Any]:
        return {self.legacy_spec_key: copy.deepcopy(self.spec)}

    def expected_intent(self, generation: ApiGeneration) -> Dict[str, Any]:
        """Actions SDK ``possibleIntents`` entry."""
        if self.uses_legacy_spec(generation):
            return {"intent": self.intent_name(generation), "inputValueSpec": self.legacy_spec()}
        return {"intent": self.intent_name(generation), "inputValueData": self.value_data()}

    def dialogflow_system_intent(self, generation: ApiGeneration) -> Dict[str, Any]:
        """Dialogflow ``google.systemIntent`` block."""
        if self.uses_legacy_spec(generation):
            return {"intent": self.intent_name(generation), "spec": self.legacy_spec()}
        return {"intent": self.intent_name(generation), "data": self.value_data()}


def _require(value: Any, message: str, kind: str) -> None:
    if value is None or (isinstance(value, (str, list, tuple, dict)) and not value):
        raise SystemIntentError(message, intent=getattr(StandardIntents, kind))


def _prune(value: Dict[str, Any]) -> Dict[str, Any]:
    return {key: item for key, item in value.items() if item is not None}


# =============================================================================
# Permissions and Sign-in
# =============================================================================


def permission_intent(context: str, permissions: Union[str, Sequence[str]]) -> SystemIntent:
    """Ask for NAME and/or device location permissions."""
    if isinstance(permissions, str):
        permissions = [permissions]
    permissions = [getattr(permission, "value", permission) for permission in permissions]
    _require(context, "Assistant permissions must have a context", "PERMISSION")
    _require(permissions, "Assistant permissions must be a non-empty list", "PERMISSION")
    for permission in permissions:
        if permission not in ASSISTANT_PERMISSIONS:
            raise SystemIntentError(
                "Assistant permission must be one of [NAME, DEVICE_PRECISE_LOCATION, DEVICE_COARSE_LOCATION]",
                intent=StandardIntents.PERMISSION,
            )
    return SystemIntent(
        kind="PERMISSION",
        value_type=InputValueDataTypes.PERMISSION,
        spec={"optContext": context, "permissions": list(permissions)},
        legacy_spec_key="permissionValueSpec",
    )


def update_permission_intent(intent: str, arguments: Optional[List[Dict[str, Any]]] = None) -> SystemIntent:
    """Ask for permission to push updates that trigger ``intent``."""
    _require(intent, "Update permission requires an intent", "PERMISSION")
    update_spec: Dict[str, Any] = {"intent": intent}
    if arguments:
        update_spec["arguments"] = copy.deepcopy(arguments)
    return SystemIntent(
        kind="PERMISSION",
        value_type=InputValueDataTypes.PERMISSION,
        spec={
            "permissions": [SupportedPermissions.UPDATE.value],
            "updatePermissionValueSpec": update_spec,
        },
        legacy_spec_key="permissionValueSpec",
    )


def sign_in_intent(action_phrase: str) -> SystemIntent:
    """Start account linking; ``action_phrase`` explains why."""
    if not isinstance(action_phrase, str) or not action_phrase.strip():
        raise SystemIntentError("Sign in requires a non-empty action phrase", intent=StandardIntents.SIGN_IN)
    return SystemIntent(
        kind="SIGN_IN",
        value_type=InputValueDataTypes.SIGN_IN,
        spec={"optContext": action_phrase},
    )


# =============================================================================
# Simple Value Dialogs
# =============================================================================


def confirmation_intent(prompt: Optional[str] = None) -> SystemIntent:
    spec: Dict[str, Any] = {}
    if prompt:
        spec["dialogSpec"] = {"requestConfirmationText": prompt}
    return SystemIntent(kind="CONFIRMATION", value_type=InputValueDataTypes.CONFIRMATION, spec=spec)


def datetime_intent(
    initial_prompt: Optional[str] = None,
    date_prompt: Optional[str] = None,
    time_prompt: Optional[str] = None,
) -> SystemIntent:
    dialog_spec = _prune({
        "requestDatetimeText": initial_prompt,
        "requestDateText": date_prompt,
        "requestTimeText": time_prompt,
    })
    return SystemIntent(
        kind="DATETIME",
        value_type=InputValueDataTypes.DATETIME,
        spec={"dialogSpec": dialog_spec} if dialog_spec else {},
    )


def option_intent(options: Union[ListSelect, CarouselSelect]) -> SystemIntent:
    if isinstance(options, ListSelect):
        spec = {"listSelect": options.to_wire()}
    elif isinstance(options, CarouselSelect):
        spec = {"carouselSelect": options.to_wire()}
    else:
        raise SystemIntentError("Option select requires a list or carousel", intent=StandardIntents.OPTION)
    return SystemIntent(
        kind="OPTION",
        value_type=InputValueDataTypes.OPTION,
        spec=spec,
        legacy_spec_key="optionValueSpec",
    )


def place_intent(request_prompt: str, permission_context: str) -> SystemIntent:
    _require(request_prompt, "Place request requires a prompt", "PLACE")
    _require(permission_context, "Place request requires a permission context", "PLACE")
    return SystemIntent(
        kind="PLACE",
        value_type=InputValueDataTypes.PLACE,
        spec={"dialogSpec": {"extension": {
            ANY_TYPE_PROPERTY: DialogSpecTypes.PLACE,
            "requestPrompt": request_prompt,
            "permissionContext": permission_context,
        }}},
    )


def deep_link_intent(
    destination: str,
    url: str,
    package_name: Optional[str] = None,
    reason: Optional[str] = None,
) -> SystemIntent:
    _require(destination, "Deep link requires a destination name", "LINK")
    _require(url, "Deep link requires a url", "LINK")
    open_url: Dict[str, Any] = {"url": url}
    if package_name:
        open_url["androidApp"] = {"packageName": package_name}
    return SystemIntent(
        kind="LINK",
        value_type=InputValueDataTypes.LINK,
        spec={
            "openUrlAction": open_url,
            "dialogSpec": {"extension": _prune({
                ANY_TYPE_PROPERTY: DialogSpecTypes.LINK,
                "destinationName": destination,
                "requestLinkReason": reason,
            })},
        },
    )


def new_surface_intent(context: str, notification_title: str, capabilities: Union[str, Sequence[str]]) -> SystemIntent:
    if isinstance(capabilities, str):
        capabilities = [capabilities]
    _require(context, "New surface request requires a context", "NEW_SURFACE")
    _require(notification_title, "New surface request requires a notification title", "NEW_SURFACE")
    _require(list(capabilities), "New surface request requires capabilities", "NEW_SURFACE")
    return SystemIntent(
        kind="NEW_SURFACE",
        value_type=InputValueDataTypes.NEW_SURFACE,
        spec={
            "capabilities": list(capabilities),
            "context": context,
            "notificationTitle": notification_title,
        },
    )


def register_update_intent(
    intent: str,
    arguments: Optional[List[Dict[str, Any]]] = None,
    frequency: str = "DAILY",
) -> SystemIntent:
    _require(intent, "Update registration requires an intent", "REGISTER_UPDATE")
    return SystemIntent(
        kind="REGISTER_UPDATE",
        value_type=InputValueDataTypes.REGISTER_UPDATE,
        spec={
            "intent": intent,
            "arguments": copy.deepcopy(arguments or []),
            "triggerContext": {"timeContext": {"frequency": frequency}},
        },
    )


# =============================================================================
# Transactions
# =============================================================================


def delivery_address_intent(reason: str) -> SystemIntent:
    _require(reason, "Delivery address request requires a reason", "DELIVERY_ADDRESS")
    return SystemIntent(
        kind="DELIVERY_ADDRESS",
        value_type=InputValueDataTypes.DELIVERY_ADDRESS,
        spec={"addressOptions": {"reason": reason}},
    )


def transaction_requirements_intent(
    config: Union[TransactionConfig, Mapping[str, Any], None] = None,
) -> SystemIntent:
    order_options, payment_options = transaction_options(parse_transaction_config(config))
    return SystemIntent(
        kind="TRANSACTION_REQUIREMENTS_CHECK",
        value_type=InputValueDataTypes.TRANSACTION_REQ_CHECK,
        spec=_prune({"orderOptions": order_options, "paymentOptions": payment_options}),
    )


def transaction_decision_intent(
    order: Mapping[str, Any],
    config: Union[TransactionConfig, Mapping[str, Any]],
) -> SystemIntent:
    _require(order, "Transaction decision requires a proposed order", "TRANSACTION_DECISION")
    parsed = parse_transaction_config(config)
    _require(parsed, "Transaction decision requires a transaction configuration", "TRANSACTION_DECISION")
    order_options, payment_options = transaction_options(parsed, include_customer_info=True)
    return SystemIntent(
        kind="TRANSACTION_DECISION",
        value_type=InputValueDataTypes.TRANSACTION_DECISION,
        spec=_prune({
            "proposedOrder": copy.deepcopy(dict(order)),
            "orderOptions": order_options,
            "paymentOptions": payment_options,
        }),
    )
