import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from pr_automation.config.loader import ConfigError, Settings, load_config


class TestConfigLoader(unittest.TestCase):
    """Tests for the configuration loader."""

    def _load(self, config=None, raw=None, environ=None) -> Settings:
        with tempfile.TemporaryDirectory() as tmp:
            config_dir = Path(tmp)
            if config is not None:
                (config_dir / "config.json").write_text(json.dumps(config))
            if raw is not None:
                (config_dir / "config.json").write_text(raw)
            with patch("pr_automation.config.loader._get_config_directory", return_value=config_dir):
                return load_config(environ=environ or {})

    def test_defaults_without_file(self) -> None:
        self.assertEqual(self._load(), Settings())

    def test_load_config_success(self) -> None:
        settings = self._load({
            "github_token": "abc",
            "api_url": "https://ghe.example.com/api/v3",
            "app_base_url": "https://preview.example.com",
            "request_timeout": 10,
            "browser_timeout_ms": 5000,
            "browsers": ["firefox"],
        })
        self.assertEqual(settings.github_token, "abc")
        self.assertEqual(settings.api_url, "https://ghe.example.com/api/v3")
        self.assertEqual(settings.app_base_url, "https://preview.example.com")
        self.assertEqual(settings.request_timeout, 10.0)
        self.assertEqual(settings.browser_timeout_ms, 5000)
        self.assertEqual(settings.browsers, ("firefox",))

    def test_environment_overrides_file(self) -> None:
        settings = self._load(
            {"github_token": "from-file", "app_base_url": "http://file"},
            environ={"GITHUB_TOKEN": "from-env", "APP_BASE_URL": "http://env", "GITHUB_API_URL": ""},
        )
        self.assertEqual(settings.github_token, "from-env")
        self.assertEqual(settings.app_base_url, "http://env")
        self.assertEqual(settings.api_url, "https://api.github.com")

    def test_load_config_invalid_json(self) -> None:
        with self.assertRaises(ConfigError):
            self._load(raw="{invalid}")

    def test_load_config_not_an_object(self) -> None:
        with self.assertRaises(ConfigError):
            self._load(raw="[1, 2]")

    def test_wrong_types(self) -> None:
        for config in (
            {"github_token": 1},
            {"request_timeout": "soon"},
            {"request_timeout": True},
            {"browser_timeout_ms": 1.5},
            {"browsers": "chromium"},
            {"browsers": ["chromium", "edge"]},
        ):
            with self.subTest(config=config):
                with self.assertRaises(ConfigError):
                    self._load(config)

    def test_reads_process_environment_by_default(self) -> None:
        with patch.dict("os.environ", {"GITHUB_TOKEN": "env-token"}):
            self.assertEqual(load_config().github_token, "env-token")

    def _load_with_dotenv(self, contents: str) -> Settings:
        with tempfile.TemporaryDirectory() as tmp:
            dotenv_path = Path(tmp) / ".env"
            dotenv_path.write_text(contents)
            with patch("pr_automation.config.loader.find_dotenv", return_value=str(dotenv_path)):
                return load_config()

    def test_reads_dotenv_file(self) -> None:
        settings = self._load_with_dotenv("GITHUB_TOKEN=dotenv-token\nAPP_BASE_URL=http://localhost:3000\n")
        self.assertEqual(settings.github_token, "dotenv-token")
        self.assertEqual(settings.app_base_url, "http://localhost:3000")
        self.assertEqual(settings.api_url, Settings().api_url)

    def test_process_environment_wins_over_dotenv(self) -> None:
        with patch.dict("os.environ", {"GITHUB_TOKEN": "env-token"}):
            settings = self._load_with_dotenv("GITHUB_TOKEN=dotenv-token\nAPP_BASE_URL=http://dotenv\n")
        self.assertEqual(settings.github_token, "env-token")
        self.assertEqual(settings.app_base_url, "http://dotenv")

    def test_explicit_environ_skips_dotenv(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            dotenv_path = Path(tmp) / ".env"
            dotenv_path.write_text("GITHUB_TOKEN=dotenv-token\n")
            with patch("pr_automation.config.loader.find_dotenv", return_value=str(dotenv_path)):
                self.assertIsNone(load_config(environ={}).github_token)


if __name__ == "__main__":
    unittest.main()
