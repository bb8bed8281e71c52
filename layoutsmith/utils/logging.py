import logging

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from layoutsmith.layout.room import LayoutState

console_logger = logging.getLogger(__name__)


class BaseLogger(ABC):
    """Abstract base class defining the logger API for optimization runs."""

    def __init__(self, output_dir: Path | str):
        self.output_dir = Path(output_dir)

    @abstractmethod
    def log(self, data: dict[str, Any]) -> None:
        """Log metrics and data."""

    @abstractmethod
    def log_hyperparams(self, data: dict[str, Any]) -> None:
        """Log hyperparameters."""

    @abstractmethod
    def log_layout(self, state: LayoutState, name: str | None = None) -> None:
        """
        Log a layout snapshot.

        Args:
            state: The layout to log.
            name: Optional label for the snapshot (e.g. 'best').
        """


class ConsoleLogger(BaseLogger):
    """Logger implementation that logs to console."""

    def __init__(self, output_dir: Path | str):
        super().__init__(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

        self._step_counter = 0
        """Counter for the number of steps logged."""

        self._layout_counter = 0
        """Counter for the number of layout snapshots logged."""

    def log(self, data: dict[str, Any]) -> None:
        """Log metrics to console."""
        console_logger.info(f"Step {self._step_counter}: {data}")
        self._step_counter += 1

    def log_hyperparams(self, data: dict[str, Any]) -> None:
        """Log hyperparameters to console."""
        console_logger.info(f"Hyperparameters: {data}")

    def log_layout(self, state: LayoutState, name: str | None = None) -> None:
        """Log item positions and wall fields of a layout to console."""
        label = name if name is not None else f"frame {self._layout_counter}"
        lines = [
            f"  {item.id}: p=({item.p[0]:.2f}, {item.p[1]:.2f}) "
            f"d={item.d:.2f} theta_wall={item.theta_wall:.3f}"
            for item in state.objects
        ]
        console_logger.info(
            f"Layout {label} ({state.room.width}x{state.room.height}):\n"
            + "\n".join(lines)
        )
        self._layout_counter += 1


class FileLoggingContext:
    """Context manager that mirrors every log record of an optimization run into
    the run's log file (``optimize.log`` in the Hydra output directory).

    The handler sits on the root logger, so records from the annealing loop,
    the cost model and the playback thread all end up in the same file. The
    root level is lowered to ``level`` while the context is active and
    restored on exit.
    """

    def __init__(
        self,
        log_file_path: Path,
        suppress_stdout: bool = False,
        level: int = logging.INFO,
    ):
        """
        Args:
            log_file_path: Run log file. Missing parent directories are created.
            suppress_stdout: If True, console handlers are detached for the run.
            level: Minimum level written to the run log.
        """
        self.log_file_path = Path(log_file_path)
        self.suppress_stdout = suppress_stdout
        self.level = level
        self.file_handler: logging.FileHandler | None = None
        self.detached_handlers: list[logging.Handler] = []
        self._original_level: int | None = None

    def __enter__(self) -> "FileLoggingContext":
        self.log_file_path.parent.mkdir(parents=True, exist_ok=True)
        self.file_handler = logging.FileHandler(self.log_file_path)
        self.file_handler.setLevel(self.level)
        self.file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(threadName)s - %(name)s - %(levelname)s - "
                "%(message)s"
            )
        )

        root_logger = logging.getLogger()
        self._original_level = root_logger.level
        if root_logger.level > self.level:
            root_logger.setLevel(self.level)

        if self.suppress_stdout:
            self.detached_handlers = root_logger.handlers[:]
            for handler in self.detached_handlers:
                root_logger.removeHandler(handler)

        root_logger.addHandler(self.file_handler)
        console_logger.debug(f"Writing run log to {self.log_file_path}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        root_logger = logging.getLogger()

        if self.file_handler in root_logger.handlers:
            root_logger.removeHandler(self.file_handler)
        for handler in self.detached_handlers:
            if handler not in root_logger.handlers:
                root_logger.addHandler(handler)
        self.detached_handlers = []
        if self._original_level is not None:
            root_logger.setLevel(self._original_level)

        if self.file_handler:
            self.file_handler.close()
