import io
import json
import os
import shutil
import tempfile
import unittest
from contextlib import redirect_stdout
from unittest.mock import patch

from fakes import FakeRunner, result

from quickfix import cli
from quickfix.checks.system import SOCKETFILTERFW
from quickfix.config import Settings
from quickfix.errors import FatalConfigurationError


def eof(prompt):
    raise EOFError


class TestCli(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.mkdtemp()
        self.log_file = os.path.join(self.tmp, "quickfix.log")
        self.settings = Settings(cache_dirs=[], printer_paths=[], log_file=self.log_file)

    def tearDown(self):
        shutil.rmtree(self.tmp, ignore_errors=True)

    def run_cli(self, argv, runner=None, input_fn=eof, settings=None):
        out = io.StringIO()
        with patch("quickfix.cli.load_settings", return_value=settings or self.settings), \
             patch("quickfix.cli.CommandRunner", return_value=runner or FakeRunner()), \
             redirect_stdout(out):
            code = cli.run(argv, input_fn=input_fn)
        return code, out.getvalue()

    def test_help(self):
        out = io.StringIO()
        with redirect_stdout(out):
            code = cli.run(["help"])
        self.assertEqual(code, 0)
        self.assertIn("Usage: quickfix <command>", out.getvalue())
        self.assertIn("network", out.getvalue())

    def test_clean_batch_exits_zero(self):
        runner = FakeRunner()
        code, out = self.run_cli(["clean"], runner, input_fn=lambda p: "y")
        self.assertEqual(code, 0)
        self.assertEqual(runner.commands(), ["killall Dock", "killall Finder"])
        self.assertIn("Completed: 2/2", out)

    def test_all_batch_runs_every_step_and_fails(self):
        runner = FakeRunner({
            "networksetup -listallhardwareports": result("Hardware Port: Wi-Fi\nDevice: en0\n"),
            "purge": result(rc=1, stderr="Unable to purge disk buffers"),
            SOCKETFILTERFW + " --getglobalstate": result("Firewall is enabled. (State = 1)\n"),
        })
        code, out = self.run_cli(["all"], runner, input_fn=lambda p: "y")

        self.assertEqual(code, 1)
        commands = runner.commands()
        self.assertIn("purge", commands)
        # The step after the failure still ran
        self.assertEqual(commands[-1], SOCKETFILTERFW + " --getglobalstate")
        self.assertIn("purge_memory", out)

    def test_batch_config_error_aborts(self):
        runner = FakeRunner()
        with patch("quickfix.cli.load_settings", side_effect=FatalConfigurationError("bad yaml")), \
             patch("quickfix.cli.CommandRunner", return_value=runner), \
             redirect_stdout(io.StringIO()) as out:
            code = cli.run(["network"])
        self.assertEqual(code, 1)
        self.assertEqual(runner.calls, [])
        self.assertIn("bad yaml", out.getvalue())

    def test_interactive_config_error_falls_back(self):
        with patch("quickfix.cli.load_settings", side_effect=FatalConfigurationError("bad yaml")), \
             patch("quickfix.cli.CommandRunner", return_value=FakeRunner()), \
             patch.dict(os.environ, {"QUICKFIX_LOGFILE": self.log_file}), \
             redirect_stdout(io.StringIO()) as out:
            code = cli.run([], input_fn=eof)
        self.assertEqual(code, 0)
        self.assertIn("Falling back to default settings", out.getvalue())

    def test_interactive_eof_quits(self):
        code, out = self.run_cli([])
        self.assertEqual(code, 0)
        self.assertIn("IT QuickFix CLI (macOS)", out)
        self.assertIn("Exiting", out)

    def test_batch_writes_transcript(self):
        self.run_cli(["network"], FakeRunner({
            "networksetup -listallhardwareports": result("Hardware Port: Ethernet\nDevice: en5\n"),
        }))
        with open(self.log_file) as f:
            entries = [json.loads(line) for line in f]
        self.assertTrue(entries)
        self.assertEqual(len({e["run_id"] for e in entries}), 1)
        self.assertTrue(any("DNS cache flushed" in e["message"] for e in entries))

    def test_ctrl_c_exits_130(self):
        with patch("quickfix.cli.init"), patch("quickfix.cli.run", side_effect=KeyboardInterrupt), \
             redirect_stdout(io.StringIO()):
            with self.assertRaises(SystemExit) as cm:
                cli.main()
        self.assertEqual(cm.exception.code, 130)

    def test_main_propagates_exit_code(self):
        with patch("quickfix.cli.init"), patch("quickfix.cli.run", return_value=1):
            with self.assertRaises(SystemExit) as cm:
                cli.main()
        self.assertEqual(cm.exception.code, 1)


if __name__ == '__main__':
    unittest.main()
