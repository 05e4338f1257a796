"""
Logging Configuration for the Brotocol deploy tooling

Provides structured logging with:
- Timestamps
- Console and daily-rotated file handlers
- Separate error log
- A per-network deploy audit log (one line per instantiated contract)
"""

import logging
import os
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler
from typing import Optional
from datetime import datetime


# Log directory
LOG_DIR = Path(os.getenv("BRODEPLOY_LOG_DIR") or Path.cwd() / "logs")

# Log formats
DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
SIMPLE_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logger(
    name: str,
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    console: bool = True,
    detailed: bool = False,
    log_dir: Optional[Path] = None,
) -> logging.Logger:
    """
    Setup a logger with console and file handlers.

    Args:
        name: Logger name (the package name configures every module logger)
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file name (defaults to name.log)
        console: Whether to log to console
        detailed: Whether to use detailed format (includes file/line)
        log_dir: Directory for log files (defaults to LOG_DIR)

    Returns:
        Configured logger instance

    Example:
        >>> logger = setup_logger("brodeploy", level=logging.DEBUG)
        >>> logger.info("Deploying airdrop")
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Prevent duplicate handlers
    if logger.handlers:
        return logger

    directory = Path(log_dir) if log_dir else LOG_DIR
    directory.mkdir(parents=True, exist_ok=True)

    log_format = DETAILED_FORMAT if detailed else SIMPLE_FORMAT
    formatter = logging.Formatter(log_format, datefmt=DATE_FORMAT)

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_file is None:
        log_file = f"{name}.log"

    file_handler = TimedRotatingFileHandler(
        directory / log_file,
        when="midnight",
        interval=1,
        backupCount=30,  # Keep 30 days of logs
        encoding="utf-8",
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    # Separate error log
    error_handler = RotatingFileHandler(
        directory / f"{name}_errors.log",
        maxBytes=10 * 1024 * 1024,  # 10 MB
        backupCount=5,
        encoding="utf-8",
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(logging.Formatter(DETAILED_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(error_handler)

    return logger


def setup_deploy_logger(network_id: str, log_dir: Optional[Path] = None) -> logging.Logger:
    """
    Setup the audit logger for one network.

    Every instantiated contract is appended to a monthly file that is never
    rotated, so the history of a network survives artifact rewrites.

    Args:
        network_id: Chain id the run targets (e.g. "localterra", "columbus-5")
        log_dir: Directory for the audit file (defaults to LOG_DIR)
    """
    logger = logging.getLogger(f"deploy_{network_id}")
    logger.setLevel(logging.INFO)
    logger.propagate = False

    if logger.handlers:
        return logger

    directory = Path(log_dir) if log_dir else LOG_DIR
    directory.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(SIMPLE_FORMAT, datefmt=DATE_FORMAT)
    audit_path = directory / f"deploy_{network_id}_{datetime.now().strftime('%Y%m')}.log"
    audit_handler = logging.FileHandler(audit_path, encoding="utf-8")
    audit_handler.setLevel(logging.INFO)
    audit_handler.setFormatter(formatter)
    logger.addHandler(audit_handler)

    return logger


def log_deployment(
    logger: logging.Logger,
    contract: str,
    address: str,
    code_id: Optional[int] = None,
    admin: Optional[str] = None,
    success: bool = True,
):
    """
    Log one contract deployment in structured format.

    Args:
        logger: Audit logger instance
        contract: Artifact field of the contract (e.g. "rewards_pool")
        address: Resulting contract address
        code_id: Code id the contract was instantiated from
        admin: Migration admin of the contract
        success: Whether the deployment succeeded
    """
    status = "SUCCESS" if success else "FAILED"
    msg = f"{status} | {contract} | address: {address}"
    if code_id is not None:
        msg += f" | code_id: {code_id}"
    if admin:
        msg += f" | admin: {admin}"

    if success:
        logger.info(msg)
    else:
        logger.error(msg)


def get_cli_logger(debug: bool = False, log_dir: Optional[Path] = None) -> logging.Logger:
    """Configure the package logger used by every brodeploy module."""
    level = logging.DEBUG if debug else logging.INFO
    return setup_logger("brodeploy", level=level, detailed=debug, log_dir=log_dir)
