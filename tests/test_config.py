"""Tests for settings loading and validation."""

from unittest import TestCase
from unittest.mock import patch

from pydantic import ValidationError

from sqs_bus.config import Settings, SubscriptionConfig, TransportConfig
from sqs_bus.exceptions import ConfigurationError


class TestSubscriptionConfig(TestCase):
    def test_defaults_to_maximum_long_poll(self):
        config = SubscriptionConfig(queue_name="orders")
        self.assertEqual(config.queue_long_poll_time_seconds, 20)

    def test_long_poll_above_limit_is_rejected(self):
        with self.assertRaises(ValidationError):
            SubscriptionConfig(queue_name="orders", queue_long_poll_time_seconds=21)

    def test_empty_queue_name_is_rejected(self):
        with self.assertRaises(ValidationError):
            SubscriptionConfig(queue_name="")

    def test_is_frozen(self):
        config = SubscriptionConfig(queue_name="orders")
        with self.assertRaises(ValidationError):
            config.queue_name = "refunds"


class TestTransportConfig(TestCase):
    def test_defaults(self):
        config = TransportConfig()
        self.assertIsNone(config.region_name)
        self.assertIsNone(config.endpoint_url)
        self.assertEqual(config.max_retries, 3)

    def test_negative_retries_rejected(self):
        with self.assertRaises(ValidationError):
            TransportConfig(max_retries=-1)


class TestSettings(TestCase):
    def test_missing_subscription_is_a_configuration_error(self):
        settings = Settings(_env_file=None, subscription=None, transport=None)

        with self.assertRaises(ConfigurationError) as ctx:
            settings.require_subscription()
        self.assertIn("SubscriptionConfig must be defined", str(ctx.exception))

    def test_missing_transport_is_a_configuration_error(self):
        settings = Settings(_env_file=None, subscription=None, transport=None)

        with self.assertRaises(ConfigurationError) as ctx:
            settings.require_transport()
        self.assertIn("TransportConfig must be defined", str(ctx.exception))

    def test_nested_sections_read_from_environment(self):
        env = {
            "SQS_BUS_SUBSCRIPTION__QUEUE_NAME": "orders",
            "SQS_BUS_SUBSCRIPTION__QUEUE_LONG_POLL_TIME_SECONDS": "5",
            "SQS_BUS_TRANSPORT__MAX_RETRIES": "7",
            "SQS_BUS_ERROR_BACKOFF_SECONDS": "1.5",
        }
        with patch.dict("os.environ", env):
            settings = Settings(_env_file=None)

        self.assertEqual(settings.require_subscription().queue_name, "orders")
        self.assertEqual(settings.require_subscription().queue_long_poll_time_seconds, 5)
        self.assertEqual(settings.require_transport().max_retries, 7)
        self.assertEqual(settings.error_backoff_seconds, 1.5)

    def test_invalid_environment_value_is_rejected(self):
        env = {
            "SQS_BUS_SUBSCRIPTION__QUEUE_NAME": "orders",
            "SQS_BUS_SUBSCRIPTION__QUEUE_LONG_POLL_TIME_SECONDS": "60",
        }
        with patch.dict("os.environ", env):
            with self.assertRaises(ValidationError):
                Settings(_env_file=None)
