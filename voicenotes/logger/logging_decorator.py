"""
Centralized Logging Utilities and Decorators

Provides logging setup and a function decorator for consistent logging across
the voicenotes package.

Usage:
    from voicenotes.logger import setup_logging, log_function

    # Setup logging for a module
    logger = setup_logging(
        logger_name="pipeline",
        log_file="logs/pipeline.log",
        verbose=True
    )

    # Decorate functions (sync or async) for automatic logging
    @log_function(logger_name="pipeline", log_args=True)
    async def run_unit(unit):
        ...
"""

import functools
import inspect
import logging
import time
from pathlib import Path
from typing import Optional, Callable, Any


def setup_logging(
    logger_name: str,
    log_file: Optional[str] = None,
    verbose: bool = False,
    level: int = logging.INFO,
) -> logging.Logger:
    """
    Set up logging with optional file and console handlers.

    Args:
        logger_name: Name for the logger (e.g., "pipeline")
        log_file: Path to log file. No file handler is added when None.
        verbose: If True, add console handler with DEBUG level (default: False)
        level: Base logging level (default: logging.INFO)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(logger_name)

    # Avoid adding multiple handlers if already configured
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG if verbose else level)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        logger.addHandler(file_handler)

    if verbose:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.DEBUG)
        console_handler.setFormatter(logging.Formatter("DEBUG: %(message)s"))
        logger.addHandler(console_handler)

    return logger


def _format_call(func_name: str, args: tuple, kwargs: dict, log_args: bool) -> str:
    log_msg = f"Calling {func_name}"
    if log_args and (args or kwargs):
        args_repr = [repr(a) for a in args]
        kwargs_repr = [f"{k}={v!r}" for k, v in kwargs.items()]
        log_msg += f" with args: {', '.join(args_repr + kwargs_repr)}"
    return log_msg


def log_function(
    logger_name: Optional[str] = None,
    level: int = logging.INFO,
    log_args: bool = False,
    log_result: bool = False,
    log_execution_time: bool = True,
) -> Callable:
    """
    Decorator to log function entry, exit, execution time, and exceptions.

    Works for both plain and coroutine functions. Exceptions are logged and
    re-raised unchanged.

    Args:
        logger_name: Custom logger name (if None, uses the decorated function's module name)
        level: Log level for entry/exit messages (default: logging.INFO)
        log_args: If True, log function arguments (default: False)
        log_result: If True, log return value (default: False)
        log_execution_time: If True, log execution duration (default: True)

    Example:
        @log_function(logger_name="assembler", log_execution_time=True)
        def process(session, raw_text):
            ...
    """

    def decorator(func: Callable) -> Callable:
        name = logger_name or func.__module__
        func_name = func.__qualname__

        def _completed(logger: logging.Logger, start_time: float, result: Any) -> None:
            completion_msg = f"Completed {func_name}"
            if log_execution_time:
                completion_msg += f" in {time.time() - start_time:.2f}s"
            if log_result:
                completion_msg += f" with result: {result!r}"
            logger.log(level, completion_msg)

        def _failed(logger: logging.Logger, start_time: float, e: Exception) -> None:
            logger.error(
                f"Exception in {func_name} after {time.time() - start_time:.2f}s: "
                f"{type(e).__name__}: {e}",
                exc_info=True,
            )

        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs) -> Any:
                logger = logging.getLogger(name)
                logger.log(level, _format_call(func_name, args, kwargs, log_args))
                start_time = time.time()
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    _failed(logger, start_time, e)
                    raise
                _completed(logger, start_time, result)
                return result

            return async_wrapper

        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            logger = logging.getLogger(name)
            logger.log(level, _format_call(func_name, args, kwargs, log_args))
            start_time = time.time()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                _failed(logger, start_time, e)
                raise
            _completed(logger, start_time, result)
            return result

        return wrapper

    return decorator
