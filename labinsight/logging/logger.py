import logging
import sys


class Log:
    """Centralized logging with structured key=value context."""

    _logger: logging.Logger = logging.getLogger("labinsight")

    @classmethod
    def configure(cls, log_level: str) -> None:
        """Configure the logger with the specified level and stdout handler."""
        cls._logger.setLevel(log_level.upper())
        if not cls._logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(
                logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
            )
            cls._logger.addHandler(handler)

    @classmethod
    def info(cls, message: str, **context: object) -> None:
        cls._logger.info(cls._render(message, context))

    @classmethod
    def error(cls, message: str, **context: object) -> None:
        cls._logger.error(cls._render(message, context))

    @classmethod
    def warning(cls, message: str, **context: object) -> None:
        cls._logger.warning(cls._render(message, context))

    @classmethod
    def debug(cls, message: str, **context: object) -> None:
        cls._logger.debug(cls._render(message, context))

    @classmethod
    def stage(cls, job_id: str, stage: str, **context: object) -> None:
        """Log a job lifecycle event, e.g. ``stage="completed"``."""
        cls.info(f"Job {job_id} {stage}", **context)

    @staticmethod
    def _render(message: str, context: dict[str, object]) -> str:
        pairs = [f"{key}={value}" for key, value in context.items() if value is not None]
        if not pairs:
            return message
        return f"{message} | {' '.join(pairs)}"
