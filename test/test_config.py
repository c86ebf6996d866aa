import json
import os
import tempfile
import unittest
from dataclasses import FrozenInstanceError
from unittest.mock import patch

from sim_worker.worker_lib.config import (DEFAULT_CONFIG, ConnectionParameters, NetworkConnectionType,
                                          load_config)


class TestLoadConfig(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, "config.json")

    def tearDown(self):
        self.tmp.cleanup()

    def test_package_config_matches_defaults(self):
        self.assertEqual(load_config(), DEFAULT_CONFIG)

    def test_file_overrides_defaults(self):
        with open(self.path, 'w') as f:
            json.dump({"timing": {"op_list_timeout_ms": 250}, "profiles": {"managed": {"worker_type": "Physics"}}}, f)

        config = load_config(self.path)

        self.assertEqual(config["timing"]["op_list_timeout_ms"], 250)
        self.assertEqual(config["timing"]["connect_timeout"], DEFAULT_CONFIG["timing"]["connect_timeout"])
        self.assertEqual(config["profiles"]["managed"]["worker_type"], "Physics")
        self.assertEqual(config["profiles"]["external"]["worker_type"], "External")

    def test_missing_file_uses_defaults(self):
        self.assertEqual(load_config(os.path.join(self.tmp.name, "nope.json")), DEFAULT_CONFIG)

    def test_invalid_json_raises(self):
        with open(self.path, 'w') as f:
            f.write("{ isto não é json")

        with self.assertRaises(json.JSONDecodeError):
            load_config(self.path)

    def test_env_var(self):
        with open(self.path, 'w') as f:
            json.dump({"logger_name": "custom"}, f)

        with patch.dict(os.environ, {"SIM_WORKER_CONFIG": self.path}):
            self.assertEqual(load_config()["logger_name"], "custom")


class TestConnectionParameters(unittest.TestCase):

    def test_immutable(self):
        params = ConnectionParameters("External")

        self.assertIs(params.connection_type, NetworkConnectionType.TCP)
        self.assertFalse(params.use_external_ip)
        with self.assertRaises(FrozenInstanceError):
            params.use_external_ip = True
