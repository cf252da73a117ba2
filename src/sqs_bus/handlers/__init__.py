from sqs_bus.handlers.base import BaseHandler

__all__ = ["BaseHandler"]
