"""Tests for the status CLI."""

from datetime import datetime, timezone
from unittest import TestCase
from unittest.mock import AsyncMock, MagicMock, patch

from click.testing import CliRunner

from sqs_bus.cli.status import main
from sqs_bus.config import Settings, TransportConfig
from sqs_bus.exceptions import TransportError
from sqs_bus.queue_model_dto import QueueStatus


def make_settings(**kwargs) -> Settings:
    values = {"subscription": None, "transport": TransportConfig(region_name="us-east-1")}
    values.update(kwargs)
    return Settings(_env_file=None, **values)


def make_status(is_healthy: bool = True) -> QueueStatus:
    return QueueStatus(
        is_healthy=is_healthy,
        region="us-east-1",
        queue_name="my_queue",
        queue_url="https://sqs.us-east-1.amazonaws.com/xxxxxxxxxxxx/my_queue",
        approximate_number_of_messages=5,
        approximate_number_of_messages_not_visible=1,
        last_modified_timestamp=datetime(2023, 3, 1, 5, 27, 56, tzinfo=timezone.utc),
    )


@patch("sqs_bus.cli.status.load_settings", new=MagicMock(return_value=make_settings()))
class TestStatusCLI(TestCase):
    """Tests for the status CLI command."""

    def setUp(self):
        self.runner = CliRunner()

    def test_status_requires_queue_name(self):
        result = self.runner.invoke(main, [])
        self.assertNotEqual(result.exit_code, 0)
        self.assertIn("Missing option", result.output)

    @patch("sqs_bus.cli.status.ic")
    @patch("sqs_bus.cli.status.fetch_status", new_callable=AsyncMock)
    def test_status_prints_metrics(self, mock_fetch, mock_ic):
        mock_fetch.return_value = make_status()

        result = self.runner.invoke(main, ["--queue-name", "my_queue", "--region", "eu-west-1"])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Queue status", result.output)
        transport_config, queue_name = mock_fetch.await_args.args
        self.assertEqual(transport_config.region_name, "eu-west-1")
        self.assertEqual(queue_name, "my_queue")
        printed = mock_ic.call_args.args[0]
        self.assertEqual(printed["approximate_number_of_messages"], 5)
        self.assertTrue(printed["queue_url"].endswith("/xxxxxxxxxxxx/my_queue"))

    @patch("sqs_bus.cli.status.ic")
    @patch("sqs_bus.cli.status.fetch_status", new_callable=AsyncMock)
    def test_status_fails_when_queue_is_unhealthy(self, mock_fetch, mock_ic):
        mock_fetch.return_value = make_status(is_healthy=False)

        result = self.runner.invoke(main, ["--queue-name", "my_queue"])

        self.assertEqual(result.exit_code, 1)
        self.assertIn("Queue my_queue is not healthy", result.output)
        mock_ic.assert_called_once()

    @patch("sqs_bus.cli.status.fetch_status", new_callable=AsyncMock)
    def test_status_reports_transport_error(self, mock_fetch):
        mock_fetch.side_effect = TransportError("GetQueueUrl failed: queue does not exist", status_code=400)

        result = self.runner.invoke(main, ["--queue-name", "missing_queue"])

        self.assertEqual(result.exit_code, 1)
        self.assertIn("queue does not exist", result.output)

    def test_status_fails_without_transport(self):
        with patch("sqs_bus.cli.status.load_settings") as mock_settings:
            mock_settings.return_value = make_settings(transport=None)

            result = self.runner.invoke(main, ["--queue-name", "my_queue"])

        self.assertNotEqual(result.exit_code, 0)
        self.assertIn("TransportConfig must be defined", result.output)
