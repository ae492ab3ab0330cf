# HTTP host integrations

from actions_bridge.integrations.fastapi import create_app, create_webhook_router

__all__ = ["create_app", "create_webhook_router"]
