"""
Woop Webhook Module

Inbound HTTP relay for strobe, buzzer and RGB lighting commands.
Exports: router, RequestDispatcher, get_dispatcher
"""

from webhook.dispatcher import RequestDispatcher, Variant, get_dispatcher, select_variant
from webhook.routes import router

__all__ = [
    "router",
    "RequestDispatcher",
    "Variant",
    "get_dispatcher",
    "select_variant",
]
