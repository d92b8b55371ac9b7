"""
Integration tests: the example script run as a real process.

Standard output carries only the script's own data (JSON); every diagnostic,
help screen and trace line goes to standard error.
"""
from __future__ import annotations

import json
import os
import os.path
import subprocess
import sys
import unittest
from unittest import TestCase

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
MAIN = os.path.join(ROOT, "main.py")
CLEANUP = "cleaning up. done"


def _run(*argv, **environ):
    env = {key: value for key, value in os.environ.items() if key not in ("LOG_LEVEL", "NO_COLOR", "DEBUG")}
    env["PYTHONPATH"] = os.pathsep.join(filter(None, (ROOT, env.get("PYTHONPATH"))))
    env.update(environ)
    return subprocess.run(
        [sys.executable, MAIN, *argv],
        capture_output=True,
        text=True,
        env=env,
        timeout=60,
    )


class TestScenarios(TestCase):

    def testCounter(self):
        result = _run("-x", "-x", "-x", "-f", "a.txt")
        self.assertEqual(result.returncode, 0, result.stderr)
        self.assertEqual(json.loads(result.stdout), {"file": "a.txt", "x": 3})
        self.assertIn("[   notice] report ready file=a.txt", result.stderr)
        self.assertEqual(result.stderr.count(CLEANUP), 1)

    def testRepeatedInputs(self):
        result = _run("-i", "one.csv", "-i", "two.csv", "-f", "out.txt")
        self.assertEqual(result.returncode, 0, result.stderr)
        self.assertEqual(json.loads(result.stdout), {"file": "out.txt", "i": ["one.csv", "two.csv"]})
        self.assertLess(result.stderr.index("queued one.csv"), result.stderr.index("queued two.csv"))

    def testQuietLogLevel(self):
        result = _run("-f", "a.txt", LOG_LEVEL="3")
        self.assertEqual(result.returncode, 0, result.stderr)
        self.assertEqual(json.loads(result.stdout), {"file": "a.txt"})
        self.assertEqual(result.stderr, "")


class TestUsage(TestCase):

    def testHelp(self):
        result = _run("--help")
        self.assertEqual(result.returncode, 64)
        self.assertEqual(result.stdout, "")
        self.assertIn("usage: main.py [options]", result.stderr)
        self.assertIn("Collect input files", result.stderr)

    def testMissingRequired(self):
        result = _run("-i", "one.csv")
        self.assertEqual(result.returncode, 64)
        self.assertEqual(result.stdout, "")
        self.assertIn("option -f (--file) is required", result.stderr)
        self.assertNotIn("queued", result.stderr)
        self.assertNotIn("report ready", result.stderr)

    def testBadEnvironment(self):
        result = _run("-f", "a.txt", LOG_LEVEL="loud")
        self.assertEqual(result.returncode, 1)
        self.assertEqual(result.stdout, "")
        self.assertIn("[emergency] LOG_LEVEL must be an integer", result.stderr)


class TestDebug(TestCase):

    def testFailureReport(self):
        result = _run("-d", "-e", "-f", "a.txt")
        self.assertEqual(result.returncode, 1)
        self.assertEqual(result.stdout, "")
        self.assertIn("error in main on line", result.stderr)
        self.assertIn("RuntimeError: explosion requested", result.stderr)
        self.assertIn("+ main.py:", result.stderr)
        self.assertEqual(result.stderr.count(CLEANUP), 1)

    def testFailureWithoutDebug(self):
        result = _run("-e", "-f", "a.txt")
        self.assertEqual(result.returncode, 1)
        self.assertNotIn("error in main", result.stderr)
        self.assertNotIn("+ main.py:", result.stderr)
        self.assertEqual(result.stderr.count(CLEANUP), 1)

    def testVerboseCallTrace(self):
        result = _run("-v", "-f", "a.txt")
        self.assertEqual(result.returncode, 0, result.stderr)
        self.assertIn("main()", result.stderr)
        self.assertIn("+ main.py:", result.stderr)


if __name__ == "__main__":
    unittest.main()
