import io
import unittest
from concurrent.futures import Future
from unittest.mock import MagicMock, patch

from sim_worker.worker_lib.config import (LOGGER_NAME, ConnectionParameters, LocatorCredentials,
                                          ReceptionistAddress)
from sim_worker.worker_lib.connect import LocatorStrategy, ReceptionistStrategy, queue_callback
from sim_worker.worker_lib.errors import QueueingError, WorkerConnectionError
from sim_worker.worker_lib.locator import QueueStatus
from sim_worker.worker_lib.ops import LogLevel


def _resolved(result=None, error=None):
    future = Future()
    if error:
        future.set_exception(error)
    else:
        future.set_result(result)
    return future


class TestReceptionistStrategy(unittest.TestCase):

    def setUp(self):
        self.strategy = ReceptionistStrategy(ReceptionistAddress("h", 8080, "w1"))
        self.connection = MagicMock(name="connection")

    @patch('sim_worker.worker_lib.connect.Connection.connect_async')
    def test_forces_internal_ip(self, mock_connect):
        mock_connect.return_value = _resolved(self.connection)

        for caller_choice in (True, False):
            self.strategy.connect(ConnectionParameters("Managed", use_external_ip=caller_choice))
            params = mock_connect.call_args[0][3]
            self.assertFalse(params.use_external_ip)

    @patch('sim_worker.worker_lib.connect.Connection.connect_async')
    def test_logs_success_through_connection(self, mock_connect):
        mock_connect.return_value = _resolved(self.connection)

        connection = self.strategy.connect(ConnectionParameters("Managed"))

        self.assertIs(connection, self.connection)
        mock_connect.assert_called_once()
        self.assertEqual(mock_connect.call_args[0][:3], ("h", 8080, "w1"))
        self.connection.send_log_message.assert_called_once_with(
            LogLevel.INFO, LOGGER_NAME, "Successfully connected using the Receptionist")

    @patch('sim_worker.worker_lib.connect.Connection.connect_async')
    def test_failure_propagates(self, mock_connect):
        mock_connect.return_value = _resolved(error=WorkerConnectionError("refused"))

        with self.assertRaises(WorkerConnectionError):
            self.strategy.connect(ConnectionParameters("Managed"))


class TestLocatorStrategy(unittest.TestCase):

    def setUp(self):
        self.credentials = LocatorCredentials("proj", "dep1", "tok")
        self.connection = MagicMock(name="connection")

    @patch('sim_worker.worker_lib.connect.Locator')
    def test_forces_external_ip_and_passes_credentials(self, mock_locator_cls):
        locator = mock_locator_cls.return_value
        locator.connect.return_value = self.connection
        strategy = LocatorStrategy("locator.example", self.credentials, locator_port=9000)

        connection = strategy.connect(ConnectionParameters("External", use_external_ip=False))

        self.assertIs(connection, self.connection)
        args, kwargs = mock_locator_cls.call_args
        self.assertEqual(args[0], "locator.example")
        self.assertEqual(args[1].project_name, "proj")
        self.assertEqual(args[1].login_token, "tok")
        self.assertEqual(kwargs["default_port"], 9000)

        deployment_id, params, callback = locator.connect.call_args[0]
        self.assertEqual(deployment_id, "dep1")
        self.assertTrue(params.use_external_ip)
        self.assertTrue(callable(callback))
        self.connection.send_log_message.assert_called_once_with(
            LogLevel.INFO, LOGGER_NAME, "Successfully connected using the Locator")

    @patch('sim_worker.worker_lib.connect.Locator')
    def test_custom_queue_callback_is_used(self, mock_locator_cls):
        custom = MagicMock(return_value=True)
        mock_locator_cls.return_value.connect.return_value = self.connection
        strategy = LocatorStrategy("h", self.credentials, queue_callback=custom)

        strategy.connect(ConnectionParameters("External"))

        self.assertIs(mock_locator_cls.return_value.connect.call_args[0][2], custom)

    def test_credentials_repr_hides_token(self):
        credentials = LocatorCredentials("proj", "dep1", "s3cr3t")

        self.assertNotIn("s3cr3t", repr(credentials))
        self.assertIn("dep1", repr(credentials))


class TestQueueCallback(unittest.TestCase):

    @patch('sys.stdout', new_callable=io.StringIO)
    def test_queueing_notice_keeps_waiting(self, mock_stdout):
        self.assertTrue(queue_callback(QueueStatus(error=None, position=3), worker_type="External"))
        self.assertTrue(queue_callback(QueueStatus(error=""), worker_type="External"))

        self.assertEqual(
            mock_stdout.getvalue().count("Worker of type 'External' connecting through locator: queueing."), 2)

    @patch('sys.stderr', new_callable=io.StringIO)
    def test_queue_error_is_fatal(self, mock_stderr):
        with self.assertRaises(QueueingError) as ctx:
            queue_callback(QueueStatus(error="invalid token"), worker_type="External")

        self.assertEqual(ctx.exception.exit_status, 1)
        self.assertEqual(ctx.exception.queue_status.error, "invalid token")
        self.assertIn("Error while queueing: invalid token", mock_stderr.getvalue())
