import os
import unittest
from unittest import mock

from wthr.cities import CITY_CONFIGS, city_keys
from wthr.config import Settings, resolve_run_config
from wthr.errors import ConfigurationError

BASE_ENV = {
    "WEATHER_API_URL": "http://weather.local/forecast",
    "OLLAMA_API_URL": "http://ollama.local:11434/v1/chat/completions",
}


class TestSettings(unittest.TestCase):
    def test_settings_defaults(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            s = Settings()
        self.assertEqual(s.weather_api_url, "")
        self.assertEqual(s.ollama_api_url, "")
        self.assertEqual(s.bsky_service_url, "https://bsky.social")
        self.assertIsNone(s.http_timeout_seconds)
        self.assertEqual(s.log_level, "INFO")

    def test_settings_env_override(self):
        env = dict(BASE_ENV, BSKY_SERVICE_URL="https://pds.example/", HTTP_TIMEOUT_SECONDS="12.5")
        with mock.patch.dict(os.environ, env, clear=True):
            s = Settings()
        self.assertEqual(s.weather_api_url, "http://weather.local/forecast")
        self.assertEqual(s.bsky_service_url, "https://pds.example")
        self.assertEqual(s.http_timeout_seconds, 12.5)


class TestResolveRunConfig(unittest.TestCase):
    def _settings(self, **env):
        with mock.patch.dict(os.environ, env, clear=True):
            return Settings()

    def test_publishing_run_resolves_everything(self):
        settings = self._settings(**BASE_ENV)
        cfg = resolve_run_config("msp", False, settings, environ={"MSP_WTHR_BSKY_PASS": "secret"})
        self.assertEqual(cfg.city.name, "Minneapolis St Paul")
        self.assertEqual(cfg.password, "secret")
        self.assertEqual(cfg.weather_api_url, BASE_ENV["WEATHER_API_URL"])
        self.assertEqual(cfg.completion_api_url, BASE_ENV["OLLAMA_API_URL"])
        self.assertFalse(cfg.dry_run)

    def test_dry_run_does_not_need_password(self):
        settings = self._settings(**BASE_ENV)
        cfg = resolve_run_config("chicago", True, settings, environ={})
        self.assertIsNone(cfg.password)
        self.assertTrue(cfg.dry_run)

    def test_missing_password_names_variable(self):
        settings = self._settings(**BASE_ENV)
        with self.assertRaises(ConfigurationError) as ctx:
            resolve_run_config("sfo", False, settings, environ={"SFO_WTHR_BSKY_PASS": ""})
        self.assertIn("SFO_WTHR_BSKY_PASS", str(ctx.exception))

    def test_missing_weather_url_names_variable(self):
        settings = self._settings(OLLAMA_API_URL="http://o")
        with self.assertRaises(ConfigurationError) as ctx:
            resolve_run_config("msp", True, settings)
        self.assertIn("WEATHER_API_URL", str(ctx.exception))

    def test_blank_completion_url_names_variable(self):
        settings = self._settings(WEATHER_API_URL="http://w", OLLAMA_API_URL="   ")
        with self.assertRaises(ConfigurationError) as ctx:
            resolve_run_config("msp", True, settings)
        self.assertIn("OLLAMA_API_URL", str(ctx.exception))

    def test_unknown_city_lists_choices(self):
        settings = self._settings(**BASE_ENV)
        with self.assertRaises(ConfigurationError) as ctx:
            resolve_run_config("paris", True, settings)
        self.assertIn("chicago, msp, nyc, sfo", str(ctx.exception))

    def test_missing_city(self):
        settings = self._settings(**BASE_ENV)
        with self.assertRaises(ConfigurationError):
            resolve_run_config("", True, settings)


class TestCityTable(unittest.TestCase):
    def test_keys(self):
        self.assertEqual(city_keys(), ["chicago", "msp", "nyc", "sfo"])

    def test_credential_env_names_unique(self):
        names = [c.password_env for c in CITY_CONFIGS.values()]
        self.assertEqual(len(names), len(set(names)))

    def test_coordinates_are_fixed(self):
        expected = {
            "msp": (44.88194, -93.22167),
            "chicago": (41.975844, -87.6633969),
            "sfo": (37.7897, -122.3972),
            "nyc": (40.7128, -74.0060),
        }
        settings = Settings(weather_api_url="http://w", ollama_api_url="http://o")
        for key, coords in expected.items():
            cfg = resolve_run_config(key, True, settings)
            self.assertEqual((cfg.city.latitude, cfg.city.longitude), coords)
            self.assertEqual(cfg.city.key, key)

    def test_table_is_read_only(self):
        with self.assertRaises(TypeError):
            CITY_CONFIGS["paris"] = CITY_CONFIGS["msp"]


if __name__ == "__main__":
    unittest.main()
