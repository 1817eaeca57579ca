import os
import tempfile
import unittest
from pathlib import Path

from cloud_deployer.config import AppConfig, load_config

REPO_ROOT = Path(__file__).resolve().parents[1]


class ConfigTests(unittest.TestCase):
    def setUp(self) -> None:
        self._saved_env = {k: v for k, v in os.environ.items() if k.startswith("CLOUD_DEPLOYER_")}
        for key in self._saved_env:
            os.environ.pop(key)
        self._tmp = tempfile.TemporaryDirectory()

    def tearDown(self) -> None:
        for key in [k for k in os.environ if k.startswith("CLOUD_DEPLOYER_")]:
            os.environ.pop(key)
        os.environ.update(self._saved_env)
        self._tmp.cleanup()

    def _write(self, content: str) -> str:
        path = Path(self._tmp.name) / "config.json"
        path.write_text(content.strip(), encoding="utf-8")
        return str(path)

    def test_loads_shipped_default_config(self) -> None:
        config = load_config(str(REPO_ROOT / "config" / "default_config.json"))
        self.assertIsInstance(config, AppConfig)
        self.assertEqual(config.tasks.poll_interval, 1.0)
        self.assertIsNone(config.tasks.max_attempts)
        self.assertEqual(config.config_sync.config_set, "sync")

    def test_loads_custom_config(self) -> None:
        path = self._write(
            """
{
  "api": {"endpoint": "https://api.example.com/v1", "max_retries": 5},
  "tasks": {"max_attempts": 600, "_note": "ten minutes"}
}
"""
        )
        config = load_config(path)
        self.assertEqual(config.api.endpoint, "https://api.example.com/v1")
        self.assertEqual(config.api.max_retries, 5)
        self.assertEqual(config.tasks.max_attempts, 600)
        self.assertEqual(config.config_sync.transport, "local")

    def test_env_vars_override_file(self) -> None:
        path = self._write('{"api": {"username": "file-user"}}')
        os.environ["CLOUD_DEPLOYER_API_USER"] = "env-user"
        os.environ["CLOUD_DEPLOYER_API_KEY"] = "env-key"
        os.environ["CLOUD_DEPLOYER_TASK_MAX_ATTEMPTS"] = "30"
        os.environ["CLOUD_DEPLOYER_TIMEZONE"] = "Europe/London"

        config = load_config(path)

        self.assertEqual(config.api.username, "env-user")
        self.assertEqual(config.api.api_key, "env-key")
        self.assertEqual(config.tasks.max_attempts, 30)
        self.assertEqual(config.display.timezone, "Europe/London")

    def test_missing_file_raises(self) -> None:
        cwd = os.getcwd()
        os.chdir(self._tmp.name)
        try:
            with self.assertRaises(FileNotFoundError):
                load_config(str(Path(self._tmp.name) / "absent.json"))
        finally:
            os.chdir(cwd)

    def test_from_dict_defaults(self) -> None:
        config = AppConfig.from_dict({})
        self.assertEqual(config.display.timezone, "UTC")
        self.assertFalse(config.interaction.auto_confirm)


if __name__ == "__main__":
    unittest.main()
