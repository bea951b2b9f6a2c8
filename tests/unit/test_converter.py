import logging
import unittest
from unittest import mock
import sys
import os

sys.path.append(os.path.join(os.path.dirname(__file__), "../../src"))
from decimal_ieee754 import converter
from decimal_ieee754.encoder import MalformedInputError, binary32
from decimal_ieee754.log_config import setup_logging


class TestFormatReport(unittest.TestCase):
    def test_report_lists_both_formats(self):
        report = converter.format_report("1.5")
        self.assertIn("Decimal: 1.5", report)
        self.assertIn("binary32:", report)
        self.assertIn("binary64:", report)
        self.assertIn("Hex:    0x3fc00000", report)
        self.assertIn("Hex:    0x3ff8000000000000", report)
        self.assertIn("Legacy: 0111111110000000000000000000000", report)

    def test_legacy_note_for_zero_integer_part(self):
        report = converter.format_report("0.25")
        self.assertIn("Hex:    0x3e800000", report)
        self.assertIn("Note:", report)

    def test_per_format_range_errors(self):
        report = converter.format_report("0." + "0" * 39 + "1")
        self.assertIn("Error:", report)
        self.assertIn("Legacy error:", report)
        # binary64 still encodes the value
        self.assertEqual(report.count("Hex:"), 1)

    def test_malformed_input(self):
        with self.assertRaises(MalformedInputError):
            converter.format_report("12")


class TestMain(unittest.TestCase):
    def run_main(self, inputs):
        printed = []
        with mock.patch("builtins.input", side_effect=inputs), mock.patch(
            "builtins.print", side_effect=lambda *args: printed.append(" ".join(map(str, args)))
        ), mock.patch.object(converter, "setup_logging"):
            converter.main()
        return "\n".join(printed)

    def test_values_then_quit(self):
        output = self.run_main(["1.5, -2.0", "q"])
        self.assertIn("Decimal: 1.5", output)
        self.assertIn("Decimal: -2.0", output)
        self.assertIn("Goodbye", output)

    def test_errors_are_reported_and_loop_continues(self):
        output = self.run_main(["abc", "4.0", "exit"])
        self.assertIn("Error with input 'abc'", output)
        self.assertIn("Decimal: 4.0", output)

    def test_end_of_input(self):
        output = self.run_main(EOFError())
        self.assertIn("Decimal to IEEE-754 Converter", output)


class TestLogging(unittest.TestCase):
    def test_setup_logging_sets_package_level(self):
        setup_logging("DEBUG")
        self.assertEqual(logging.getLogger("decimal_ieee754").level, logging.DEBUG)
        setup_logging()
        self.assertEqual(logging.getLogger("decimal_ieee754").level, logging.WARNING)

    def test_encoder_logs_derived_fields(self):
        with self.assertLogs("decimal_ieee754.encoder", level="DEBUG") as logs:
            binary32().encode("1.5")
        self.assertTrue(any("exponent 0" in line for line in logs.output))

    def test_log_level_from_env(self):
        test_cases = [
            # (environment value, expected level)
            ("debug", "DEBUG"),
            (" info ", "INFO"),
            ("verbose", "WARNING"),
            ("", "WARNING"),
        ]
        for value, expected in test_cases:
            with self.subTest(value=value):
                with mock.patch.dict(os.environ, {converter.LOG_LEVEL_ENV: value}):
                    self.assertEqual(converter.log_level_from_env(), expected)

        with mock.patch.dict(os.environ, clear=True):
            self.assertEqual(converter.log_level_from_env(), "WARNING")

    def test_unknown_env_level_does_not_stop_cli(self):
        printed = []
        with mock.patch.dict(os.environ, {converter.LOG_LEVEL_ENV: "chatty"}), mock.patch(
            "builtins.input", side_effect=["q"]
        ), mock.patch("builtins.print", side_effect=printed.append):
            converter.main()
        self.assertIn("Exiting converter. Goodbye!", printed)
        setup_logging()


if __name__ == "__main__":
    unittest.main(verbosity=2)
