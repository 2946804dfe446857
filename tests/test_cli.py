import contextlib
import io
import logging
import os
import unittest
from unittest import mock

from utils import logging_utils
from wthr.cli import main

from test_poster import FakeHttpSession, FakeResponse, make_routes

ENV = {
    "WEATHER_API_URL": "http://weather.local/forecast",
    "OLLAMA_API_URL": "http://ollama.local/v1/chat/completions",
    "BSKY_SERVICE_URL": "https://pds.example",
}


class ContextSession(FakeHttpSession):
    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class TestCli(unittest.TestCase):
    def setUp(self):
        root = logging.getLogger()
        self._orig_handlers = root.handlers[:]
        self._orig_level = root.level

    def tearDown(self):
        root = logging.getLogger()
        root.handlers = self._orig_handlers
        root.setLevel(self._orig_level)
        logging_utils._CONFIGURED = False

    def _run(self, argv, env, session=None):
        session = session or ContextSession(make_routes())
        stdout = io.StringIO()
        with mock.patch.dict(os.environ, env, clear=True), \
                mock.patch("wthr.cli.requests.Session", return_value=session) as factory, \
                contextlib.redirect_stdout(stdout):
            code = main(argv)
        return code, stdout.getvalue(), session, factory

    def test_missing_weather_url_exits_before_any_request(self):
        env = {"OLLAMA_API_URL": ENV["OLLAMA_API_URL"], "MSP_WTHR_BSKY_PASS": "p"}
        code, _, session, factory = self._run(["--city", "msp"], env)
        self.assertNotEqual(code, 0)
        self.assertEqual(session.calls, [])
        factory.assert_not_called()

    def test_missing_password_exits_before_any_request(self):
        code, _, session, _ = self._run(["--city", "chicago"], ENV)
        self.assertEqual(code, 1)
        self.assertEqual(session.calls, [])

    def test_missing_city_is_usage_error(self):
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr), self.assertRaises(SystemExit) as ctx:
            main([])
        self.assertEqual(ctx.exception.code, 2)
        self.assertIn("--city", stderr.getvalue())

    def test_unknown_city_lists_choices(self):
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr), self.assertRaises(SystemExit) as ctx:
            main(["--city", "paris"])
        self.assertEqual(ctx.exception.code, 2)
        usage = stderr.getvalue()
        self.assertIn("invalid choice", usage)
        for key in ("chicago", "msp", "nyc", "sfo"):
            self.assertIn(key, usage)

    def test_dry_run_prints_post_and_skips_bluesky(self):
        code, out, session, _ = self._run(["--city", "msp", "--dry-run"], ENV)
        self.assertEqual(code, 0)
        text = "☀️ Now: 75°F sunny..."
        self.assertIn(text, out)
        self.assertIn(f"Character count: {len(text)}/240", out)
        self.assertFalse(any("xrpc" in url for _, url, _ in session.calls))

    def test_publishing_run_succeeds(self):
        env = dict(ENV, MSP_WTHR_BSKY_PASS="app-pass")
        code, out, session, _ = self._run(["--city", "msp"], env)
        self.assertEqual(code, 0)
        self.assertEqual(out, "")
        self.assertEqual(len(session.calls), 4)
        self.assertEqual(session.calls[2][2], {"identifier": "msp.wthr.cloud", "password": "app-pass"})

    def test_malformed_record_body_exits_non_zero(self):
        routes = make_routes()
        routes["https://pds.example/xrpc/com.atproto.repo.createRecord"] = FakeResponse({"uri": None, "cid": None})
        env = dict(ENV, MSP_WTHR_BSKY_PASS="app-pass")
        code, _, session, _ = self._run(["--city", "msp"], env, session=ContextSession(routes))
        self.assertEqual(code, 1)
        self.assertEqual(len(session.calls), 4)

    def test_step_failure_exits_non_zero(self):
        routes = make_routes()
        routes["http://ollama.local/v1/chat/completions"] = FakeResponse({"choices": []})
        env = dict(ENV, MSP_WTHR_BSKY_PASS="app-pass")
        code, _, session, _ = self._run(["--city", "msp"], env, session=ContextSession(routes))
        self.assertEqual(code, 1)
        self.assertEqual(len(session.calls), 2)


if __name__ == "__main__":
    unittest.main()
