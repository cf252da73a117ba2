"""Tests for the demo test_message handler."""

import json
from unittest import IsolatedAsyncioTestCase

from pydantic import ValidationError

from sqs_bus.handlers.demo import TEST_MESSAGE_TYPE, Handler
from sqs_bus.queue_model_dto import Message


def make_message(body: str) -> Message:
    return Message(message_id="m-1", body=body, receipt_handle="rh-1", attributes={"MessageType": TEST_MESSAGE_TYPE})


class TestDemoHandler(IsolatedAsyncioTestCase):
    def setUp(self):
        self.handler = Handler()

    def test_claims_only_test_message(self):
        self.assertTrue(self.handler.can_process("test_message"))
        self.assertFalse(self.handler.can_process("Test_Message"))
        self.assertFalse(self.handler.can_process("order_created"))

    async def test_valid_payload_is_logged(self):
        body = json.dumps(
            {"application": "billing", "action": "created", "lastUpdateDateTime": "2023-03-01T05:27:56Z"}
        )

        with self.assertLogs("sqs_bus.handlers.demo", level="INFO") as logs:
            await self.handler.process(make_message(body))

        self.assertIn("Processed", logs.output[0])
        self.assertIn('"lastUpdateDateTime":"2023-03-01T05:27:56Z"', logs.output[0])

    async def test_invalid_payload_raises(self):
        with self.assertRaises(ValidationError):
            await self.handler.process(make_message('{"application": "billing"}'))

    async def test_non_json_body_raises(self):
        with self.assertRaises(ValidationError):
            await self.handler.process(make_message("not json"))
