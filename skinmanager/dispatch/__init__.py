"""Message dispatch."""

from skinmanager.dispatch.router import MISSING_TYPE_ERROR, DispatchRouter, HandlerRegistration

__all__ = ["MISSING_TYPE_ERROR", "DispatchRouter", "HandlerRegistration"]
