"""
Transaction Configuration

Payment and order options attached to transaction requirement checks and
transaction decisions. A configuration is either action-provided (the Action
charges through its own payment type) or Google-provided (card networks with
tokenization), never both.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from actions_bridge.core.exceptions import SystemIntentError


class PaymentType(str, Enum):
    UNSPECIFIED = "PAYMENT_TYPE_UNSPECIFIED"
    PAYMENT_CARD = "PAYMENT_CARD"
    BANK = "BANK"
    LOYALTY_PROGRAM = "LOYALTY_PROGRAM"
    ON_FULFILLMENT = "ON_FULFILLMENT"
    GIFT_CARD = "GIFT_CARD"


class CardNetwork(str, Enum):
    UNSPECIFIED = "UNSPECIFIED_CARD_NETWORK"
    AMEX = "AMEX"
    DISCOVER = "DISCOVER"
    MASTERCARD = "MASTERCARD"
    VISA = "VISA"
    JCB = "JCB"


class TokenizationType(str, Enum):
    UNSPECIFIED = "UNSPECIFIED_TOKENIZATION_TYPE"
    PAYMENT_GATEWAY = "PAYMENT_GATEWAY"
    DIRECT = "DIRECT"


class CustomerInfoProperty(str, Enum):
    EMAIL = "EMAIL"


INVALID_CONFIG_MESSAGE = (
    "Invalid transaction configuration. Must be of type "
    "ActionPaymentTransactionConfig or GooglePaymentTransactionConfig"
)


def _value(item: Any) -> Any:
    return item.value if isinstance(item, Enum) else item


@dataclass
class ActionPaymentTransactionConfig:
    """Payment handled by the Action itself."""

    payment_type: Union[PaymentType, str]
    display_name: str
    delivery_address_required: bool = False
    customer_info_options: List[Union[CustomerInfoProperty, str]] = field(default_factory=list)

    def payment_options(self) -> Dict[str, Any]:
        return {
            "actionProvidedOptions": {
                "paymentType": _value(self.payment_type),
                "displayName": self.display_name,
            }
        }


@dataclass
class GooglePaymentTransactionConfig:
    """Payment through a card stored with Google."""

    card_networks: List[Union[CardNetwork, str]]
    tokenization_parameters: Optional[Dict[str, str]] = None
    tokenization_type: Union[TokenizationType, str] = TokenizationType.PAYMENT_GATEWAY
    prepaid_card_disallowed: bool = False
    delivery_address_required: bool = False
    customer_info_options: List[Union[CustomerInfoProperty, str]] = field(default_factory=list)

    def payment_options(self) -> Dict[str, Any]:
        options: Dict[str, Any] = {
            "supportedCardNetworks": [_value(network) for network in self.card_networks],
            "prepaidCardDisallowed": self.prepaid_card_disallowed,
        }
        if self.tokenization_parameters:
            options["tokenizationParameters"] = {
                "tokenizationType": _value(self.tokenization_type),
                "parameters": dict(self.tokenization_parameters),
            }
        return {"googleProvidedOptions": options}


TransactionConfig = Union[ActionPaymentTransactionConfig, GooglePaymentTransactionConfig]


def parse_transaction_config(config: Union[TransactionConfig, Mapping[str, Any], None]) -> Optional[TransactionConfig]:
    """
    Accept a config object or its JSON form.

    The JSON form uses ``type``/``displayName`` for action payments and
    ``cardNetworks``/``tokenizationParameters`` for Google payments.
    """
    if config is None or isinstance(config, (ActionPaymentTransactionConfig, GooglePaymentTransactionConfig)):
        return config
    if not isinstance(config, Mapping):
        raise SystemIntentError(INVALID_CONFIG_MESSAGE)
    if config.get("type") and config.get("cardNetworks"):
        raise SystemIntentError(INVALID_CONFIG_MESSAGE)
    common = {
        "delivery_address_required": bool(config.get("deliveryAddressRequired", False)),
        "customer_info_options": list(config.get("customerInfoOptions") or []),
    }
    if config.get("type"):
        return ActionPaymentTransactionConfig(
            payment_type=config["type"],
            display_name=config.get("displayName", ""),
            **common,
        )
    if config.get("cardNetworks"):
        return GooglePaymentTransactionConfig(
            card_networks=list(config["cardNetworks"]),
            tokenization_parameters=config.get("tokenizationParameters"),
            tokenization_type=config.get("tokenizationType") or TokenizationType.PAYMENT_GATEWAY,
            prepaid_card_disallowed=bool(config.get("prepaidCardDisallowed", False)),
            **common,
        )
    raise SystemIntentError(INVALID_CONFIG_MESSAGE)


def transaction_options(
    config: Optional[TransactionConfig],
    include_customer_info: bool = False,
) -> Tuple[Optional[Dict[str, Any]], Optional[Dict[str, Any]]]:
    """
    Build ``(orderOptions, paymentOptions)`` for a system-intent spec.

    Args:
        config: Parsed transaction configuration
        include_customer_info: Decisions carry customer info options;
            requirement checks do not
    """
    if config is None:
        return None, None
    order_options: Dict[str, Any] = {}
    if config.delivery_address_required:
        order_options["requestDeliveryAddress"] = True
    if include_customer_info and config.customer_info_options:
        order_options["customerInfoOptions"] = {
            "customerInfoProperties": [_value(option) for option in config.customer_info_options],
        }
    return (order_options or None), config.payment_options()
