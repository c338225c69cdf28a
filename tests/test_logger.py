import logging
import unittest

from lightup.utils.logger import LOG_LEVELS, parse_log_level


class ParseLogLevelTests(unittest.TestCase):
    def test_names_are_case_insensitive(self) -> None:
        self.assertEqual(parse_log_level("debug"), logging.DEBUG)
        self.assertEqual(parse_log_level(" Info "), logging.INFO)
        self.assertEqual(parse_log_level("ERROR"), logging.ERROR)

    def test_warn_alias(self) -> None:
        self.assertEqual(parse_log_level("warn"), logging.WARNING)

    def test_unknown_level_is_rejected(self) -> None:
        for name in ("verbose", "", "10"):
            with self.subTest(name=name):
                with self.assertRaises(ValueError):
                    parse_log_level(name)

    def test_every_listed_level_resolves(self) -> None:
        for name in LOG_LEVELS:
            self.assertEqual(logging.getLevelName(parse_log_level(name)), name)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
