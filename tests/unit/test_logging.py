import logging
import shutil
import tempfile
import unittest

from pathlib import Path

from layoutsmith.layout.room import FurnitureItem, LayoutState, Room
from layoutsmith.utils.logging import ConsoleLogger, FileLoggingContext


class TestConsoleLogger(unittest.TestCase):
    """Test ConsoleLogger functionality."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = Path(tempfile.mkdtemp())
        self.state = LayoutState(
            room=Room(width=10.0, height=10.0),
            objects=[FurnitureItem(id="chair_0", p=[2.0, 3.0], width=1.0, height=1.0)],
        )

    def tearDown(self):
        """Clean up test fixtures."""
        if self.temp_dir.exists():
            shutil.rmtree(self.temp_dir)

    def test_creates_output_dir(self):
        output_dir = self.temp_dir / "nested" / "run"
        ConsoleLogger(output_dir=output_dir)
        self.assertTrue(output_dir.is_dir())

    def test_log_increments_step(self):
        logger = ConsoleLogger(output_dir=self.temp_dir)
        with self.assertLogs("layoutsmith.utils.logging", level="INFO") as captured:
            logger.log({"best_energy": 1.5})
            logger.log({"best_energy": 1.0})

        self.assertIn("Step 0", captured.output[0])
        self.assertIn("Step 1", captured.output[1])

    def test_log_hyperparams(self):
        logger = ConsoleLogger(output_dir=self.temp_dir)
        with self.assertLogs("layoutsmith.utils.logging", level="INFO") as captured:
            logger.log_hyperparams({"initial_temperature": 100.0})
        self.assertIn("initial_temperature", captured.output[0])

    def test_log_layout(self):
        logger = ConsoleLogger(output_dir=self.temp_dir)
        with self.assertLogs("layoutsmith.utils.logging", level="INFO") as captured:
            logger.log_layout(self.state)
            logger.log_layout(self.state, name="best")

        self.assertIn("frame 0", captured.output[0])
        self.assertIn("chair_0", captured.output[0])
        self.assertIn("Layout best", captured.output[1])


class TestFileLoggingContext(unittest.TestCase):
    """Test redirection of log records to a file."""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        if self.temp_dir.exists():
            shutil.rmtree(self.temp_dir)

    def test_records_written_and_handler_removed(self):
        log_path = self.temp_dir / "optimize.log"
        test_logger = logging.getLogger("layoutsmith.test_file_context")
        test_logger.setLevel(logging.INFO)
        root_handlers_before = list(logging.getLogger().handlers)

        with FileLoggingContext(log_file_path=log_path):
            test_logger.info("annealing started")

        test_logger.info("after context")

        content = log_path.read_text()
        self.assertIn("annealing started", content)
        self.assertNotIn("after context", content)
        self.assertEqual(logging.getLogger().handlers, root_handlers_before)

    def test_suppress_stdout_restores_handlers(self):
        root_logger = logging.getLogger()
        extra_handler = logging.StreamHandler()
        root_logger.addHandler(extra_handler)
        try:
            with FileLoggingContext(
                log_file_path=self.temp_dir / "quiet.log", suppress_stdout=True
            ):
                self.assertNotIn(extra_handler, root_logger.handlers)
            self.assertIn(extra_handler, root_logger.handlers)
        finally:
            root_logger.removeHandler(extra_handler)

    def test_debug_records_reach_nested_run_log(self):
        log_path = self.temp_dir / "outputs" / "run_0" / "optimize.log"
        root_logger = logging.getLogger()
        original_level = root_logger.level
        root_logger.setLevel(logging.WARNING)
        test_logger = logging.getLogger("layoutsmith.test_debug_run_log")
        try:
            with FileLoggingContext(log_file_path=log_path, level=logging.DEBUG):
                self.assertEqual(root_logger.level, logging.DEBUG)
                test_logger.debug("rejected 2 moves")
            self.assertEqual(root_logger.level, logging.WARNING)
        finally:
            root_logger.setLevel(original_level)

        content = log_path.read_text()
        self.assertIn("rejected 2 moves", content)
        self.assertIn("MainThread", content)


if __name__ == "__main__":
    unittest.main()
