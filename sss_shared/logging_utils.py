"""
Logging utilities for token operations.

This module provides structured logging helpers for tracking ledger
operations, RPC call metrics and FFI entry points.
"""

import functools
import logging
import time
from contextlib import contextmanager
from enum import Enum
from typing import Any, Callable, Dict, Optional

import structlog

logger = structlog.get_logger(__name__)


class OperationType(Enum):
    """Types of ledger operations for logging."""
    TOKEN_CREATION = "token_creation"
    TOKEN_MINTING = "token_minting"
    ASSET_QUERY = "asset_query"


class LogLevel(Enum):
    """Log levels for ledger operations."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


def configure_logging(level: str = "INFO", json_output: bool = False) -> None:
    """
    Configure structlog on top of the standard library logging module.

    Args:
        level: Minimum log level name
        json_output: Render JSON lines instead of the console format
    """
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper(), logging.INFO))

    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def log_blockchain_operation(
    operation_type: OperationType,
    operation_name: str,
    level: LogLevel = LogLevel.INFO,
    include_performance: bool = True
):
    """
    Decorator for logging ledger operations with performance metrics.

    Only argument counts and keyword names are logged, never values, so the
    decorator is safe on functions that receive key material.

    Args:
        operation_type: Type of ledger operation
        operation_name: Name of the operation
        level: Log level for the operation
        include_performance: Whether to include performance metrics
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            start_time = time.time()
            operation_id = f"{operation_name}_{int(start_time)}"

            getattr(logger, level.value)(
                "Ledger operation started",
                operation_id=operation_id,
                operation_type=operation_type.value,
                operation_name=operation_name,
                status="started",
                args_count=len(args),
                kwargs_keys=list(kwargs.keys())
            )

            try:
                result = func(*args, **kwargs)
            except Exception as e:
                error_data = {
                    "operation_id": operation_id,
                    "operation_type": operation_type.value,
                    "operation_name": operation_name,
                    "status": "failed",
                    "success": False,
                    "error_type": type(e).__name__,
                    "error_message": str(e)
                }
                if include_performance:
                    error_data.update(_performance_data(time.time() - start_time))

                logger.error("Ledger operation failed", **error_data)
                raise

            success_data = {
                "operation_id": operation_id,
                "operation_type": operation_type.value,
                "operation_name": operation_name,
                "status": "completed",
                "success": True
            }
            if include_performance:
                success_data.update(_performance_data(time.time() - start_time))

            getattr(logger, level.value)("Ledger operation completed", **success_data)
            return result

        return wrapper

    return decorator


@contextmanager
def log_operation_context(
    operation_type: OperationType,
    operation_name: str,
    context_data: Optional[Dict[str, Any]] = None,
    level: LogLevel = LogLevel.INFO
):
    """
    Context manager for logging ledger operations.

    Args:
        operation_type: Type of ledger operation
        operation_name: Name of the operation
        context_data: Additional context data to log
        level: Log level for the operation

    Yields:
        The generated operation id
    """
    start_time = time.time()
    operation_id = f"{operation_name}_{int(start_time)}"
    base_data = {
        "operation_id": operation_id,
        "operation_type": operation_type.value,
        "operation_name": operation_name,
    }
    if context_data:
        base_data.update(context_data)

    getattr(logger, level.value)("Ledger operation context started", status="started", **base_data)

    try:
        yield operation_id
    except Exception as e:
        logger.error(
            "Ledger operation context failed",
            status="failed",
            success=False,
            error_type=type(e).__name__,
            error_message=str(e),
            **_performance_data(time.time() - start_time),
            **base_data
        )
        raise

    getattr(logger, level.value)(
        "Ledger operation context completed",
        status="completed",
        success=True,
        **_performance_data(time.time() - start_time),
        **base_data
    )


def log_mint_event(
    event_type: str,
    mint_address: str,
    signature: Optional[str] = None,
    additional_data: Optional[Dict[str, Any]] = None,
    level: LogLevel = LogLevel.INFO
):
    """
    Log token creation and minting events.

    Args:
        event_type: Type of event (created, minted, ...)
        mint_address: Address of the token mint
        signature: Transaction signature, when one exists
        additional_data: Additional event data
        level: Log level
    """
    log_data = {
        "event_type": "mint_event",
        "mint_event_type": event_type,
        "mint_address": mint_address,
        "timestamp": time.time()
    }

    if signature:
        log_data["signature"] = signature

    if additional_data:
        log_data.update(additional_data)

    getattr(logger, level.value)("Token mint event", **log_data)


def log_rpc_metrics(
    endpoint_name: str,
    method: str,
    response_time: float,
    success: bool,
    error_message: Optional[str] = None
):
    """
    Log RPC call metrics.

    Args:
        endpoint_name: Name or URL of the RPC endpoint
        method: RPC method called
        response_time: Response time in seconds
        success: Whether the call was successful
        error_message: Error message if failed
    """
    log_data = {
        "event_type": "rpc_metrics",
        "endpoint_name": endpoint_name,
        "rpc_method": method,
        "response_time_seconds": response_time,
        "success": success,
        "performance_category": _categorize_performance(response_time),
        "timestamp": time.time()
    }

    if error_message:
        log_data["error_message"] = error_message

    if success:
        logger.info("RPC call metrics", **log_data)
    else:
        logger.warning("RPC call failed", **log_data)


def _performance_data(execution_time: float) -> Dict[str, Any]:
    return {
        "execution_time_seconds": execution_time,
        "performance_category": _categorize_performance(execution_time)
    }


def _categorize_performance(execution_time: float) -> str:
    """
    Categorize performance based on execution time.

    Args:
        execution_time: Execution time in seconds

    Returns:
        Performance category string
    """
    if execution_time < 0.1:
        return "excellent"
    elif execution_time < 0.5:
        return "good"
    elif execution_time < 2.0:
        return "acceptable"
    elif execution_time < 10.0:
        return "slow"
    else:
        return "very_slow"


def create_operation_logger(component_name: str) -> structlog.BoundLogger:
    """
    Create a specialized logger for a specific component.

    The logger is lazy, so module-level loggers pick up a later
    :func:`configure_logging` call.

    Args:
        component_name: Name of the component

    Returns:
        Bound logger with component context
    """
    return structlog.get_logger(component_name, component=component_name)
