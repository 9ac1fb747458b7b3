from __future__ import annotations

import logging
import sys
import tempfile
import unittest
from pathlib import Path

TESTS_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = TESTS_DIR.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from diagramlayout.logging_config import setup_logging


class SetupLoggingTests(unittest.TestCase):
    def tearDown(self) -> None:
        logger = logging.getLogger("diagramlayout")
        for handler in list(logger.handlers):
            handler.close()
        logger.handlers.clear()
        logger.setLevel(logging.NOTSET)

    def test_repeated_setup_does_not_duplicate_handlers(self) -> None:
        setup_logging(logging.WARNING)
        logger = setup_logging(logging.DEBUG)
        self.assertEqual(len(logger.handlers), 1)
        self.assertEqual(logger.level, logging.DEBUG)

    def test_file_handler(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            log_path = Path(td) / "layout.log"
            logger = setup_logging(logging.DEBUG, log_file=str(log_path))
            logging.getLogger("diagramlayout.layout").debug("normalizing")
            for handler in logger.handlers:
                handler.flush()
            self.assertEqual(len(logger.handlers), 2)
            self.assertIn("normalizing", log_path.read_text(encoding="utf-8"))
            for handler in list(logger.handlers):
                handler.close()
            logger.handlers.clear()


if __name__ == "__main__":
    unittest.main()
