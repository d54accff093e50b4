"""
Configuration and entry point tests
"""

import os
import shutil
import tempfile
import unittest
from datetime import timedelta
from unittest.mock import patch

from chirpy.__main__ import main
from chirpy.core.config import ChirpyConfig
from chirpy.core.constants import (
    ACCESS_TOKEN_TTL_SECONDS,
    REFRESH_TOKEN_TTL_DAYS,
    MAX_CHIRP_LENGTH,
    get_default_config,
)


SECRET = "test-secret-key-at-least-32-characters-long!!!!"


class TestChirpyConfig(unittest.TestCase):
    """Test suite for ChirpyConfig"""

    def test_defaults(self):
        """Test default lifetimes and limits"""
        config = ChirpyConfig(jwt_secret=SECRET)

        self.assertEqual(config.access_token_ttl, timedelta(hours=1))
        self.assertEqual(config.refresh_token_ttl, timedelta(days=REFRESH_TOKEN_TTL_DAYS))
        self.assertEqual(config.max_chirp_length, 140)
        self.assertIsNone(config.polka_key)

    def test_short_secret_rejected(self):
        """Test short secret key rejected"""
        with self.assertRaises(ValueError):
            ChirpyConfig(jwt_secret="short")

    def test_refresh_must_outlive_access(self):
        """Test a refresh TTL not longer than access TTL is rejected"""
        with self.assertRaises(ValueError):
            ChirpyConfig(jwt_secret=SECRET, refresh_token_ttl=timedelta(minutes=30))

    def test_from_env(self):
        """Test environment mapping is read"""
        config = ChirpyConfig.from_env({
            "JWT_SECRET": SECRET,
            "CHIRPY_DB_PATH": "/tmp/chirpy.json",
            "POLKA_KEY": "key",
            "CHIRPY_REFRESH_TTL_DAYS": "30",
        })

        self.assertEqual(config.jwt_secret, SECRET)
        self.assertEqual(config.db_path, "/tmp/chirpy.json")
        self.assertEqual(config.polka_key, "key")
        self.assertEqual(config.refresh_token_ttl, timedelta(days=30))

    def test_from_env_missing_secret(self):
        """Test missing JWT_SECRET is an error"""
        with self.assertRaises(ValueError):
            ChirpyConfig.from_env({})

    def test_from_env_bad_ttl(self):
        """Test non-integer TTL is an error"""
        with self.assertRaises(ValueError):
            ChirpyConfig.from_env({"JWT_SECRET": SECRET, "CHIRPY_REFRESH_TTL_DAYS": "soon"})

    def test_default_config_dict(self):
        """Test default configuration structure"""
        config = get_default_config()
        self.assertEqual(config["tokens"]["access_ttl_seconds"], ACCESS_TOKEN_TTL_SECONDS)
        self.assertEqual(config["chirps"]["max_length"], MAX_CHIRP_LENGTH)
        self.assertIn("store", config)


class TestEntryPoint(unittest.TestCase):
    """Test suite for python -m chirpy"""

    def setUp(self):
        self.test_dir = tempfile.mkdtemp()
        self.db_path = os.path.join(self.test_dir, "database.json")

    def tearDown(self):
        if os.path.exists(self.test_dir):
            shutil.rmtree(self.test_dir)

    def test_main_initializes_store(self):
        """Test main creates the store from the environment"""
        env = {"JWT_SECRET": SECRET, "CHIRPY_DB_PATH": self.db_path}
        with patch.dict(os.environ, env, clear=True):
            self.assertEqual(main(), 0)
        self.assertTrue(os.path.exists(self.db_path))

    def test_main_without_secret_fails(self):
        """Test main exits non-zero without a secret"""
        with patch.dict(os.environ, {}, clear=True):
            self.assertEqual(main(), 2)


if __name__ == "__main__":
    unittest.main()
