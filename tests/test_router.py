"""Tests for message routing by MessageType."""

from unittest import TestCase

from sqs_bus.exceptions import AmbiguousHandler, ConfigurationError, HandlerNotFound, UnroutableMessage
from sqs_bus.handlers.base import BaseHandler
from sqs_bus.queue_model_dto import Message
from sqs_bus.router import MessageRouter, get_message_type


def make_message(**attributes: str) -> Message:
    return Message(message_id="m-1", body="{}", receipt_handle="rh-1", attributes=attributes)


class OrdersHandler(BaseHandler):
    message_types = ("order_created", "order_cancelled")

    async def process(self, message: Message) -> None:
        pass


class RefundsHandler(BaseHandler):
    message_types = ("refund_issued",)

    async def process(self, message: Message) -> None:
        pass


class CatchAllHandler(BaseHandler):
    """Claims every type through a custom rule instead of a declaration."""

    def can_process(self, message_type: str) -> bool:
        return True

    async def process(self, message: Message) -> None:
        pass


class TestGetMessageType(TestCase):
    def test_returns_attribute_value(self):
        self.assertEqual(get_message_type(make_message(MessageType="order_created")), "order_created")

    def test_missing_attribute_returns_none(self):
        self.assertIsNone(get_message_type(make_message(Other="x")))

    def test_key_match_is_case_sensitive(self):
        self.assertIsNone(get_message_type(make_message(messagetype="order_created")))


class TestMessageRouter(TestCase):
    def setUp(self):
        self.orders = OrdersHandler()
        self.refunds = RefundsHandler()
        self.router = MessageRouter([self.orders, self.refunds])

    def test_select_handler_returns_single_match(self):
        self.assertIs(self.router.select_handler("order_cancelled"), self.orders)
        self.assertIs(self.router.select_handler("refund_issued"), self.refunds)

    def test_select_handler_returns_none_without_match(self):
        self.assertIsNone(self.router.select_handler("unknown"))

    def test_select_handler_raises_on_two_claimants(self):
        router = MessageRouter([self.orders, CatchAllHandler()])

        with self.assertRaises(AmbiguousHandler) as ctx:
            router.select_handler("order_created")
        self.assertEqual(ctx.exception.message_type, "order_created")
        self.assertIn("OrdersHandler", str(ctx.exception))

    def test_overlapping_declarations_rejected_at_startup(self):
        class DuplicateOrdersHandler(OrdersHandler):
            pass

        with self.assertRaises(ConfigurationError):
            MessageRouter([OrdersHandler(), DuplicateOrdersHandler()])

    def test_route_returns_handler(self):
        self.assertIs(self.router.route(make_message(MessageType="refund_issued")), self.refunds)

    def test_route_without_type_raises_unroutable(self):
        with self.assertRaises(UnroutableMessage):
            self.router.route(make_message())

    def test_route_unknown_type_raises_handler_not_found(self):
        with self.assertRaises(HandlerNotFound) as ctx:
            self.router.route(make_message(MessageType="unknown"))
        self.assertEqual(ctx.exception.message_type, "unknown")
