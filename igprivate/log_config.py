"""
Logging Configuration + DebugLogger
====================================
Centralized logging setup for igprivate.
Configures console + file handlers with custom formatting.

SecretFilter: loggers from LogConfig.get_logger and every handler installed
by LogConfig redact registered secrets (account passwords).

DebugLogger: structured, emoji-coded debug output for developers.
Activated with debug=True in InstagramClient() constructor.
"""

import logging
import sys
import threading
from collections import Counter
from logging.handlers import RotatingFileHandler
from typing import Optional


# Default log format
DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Debug format: compact, emoji-friendly
DEBUG_FORMAT = "%(asctime)s %(message)s"
DEBUG_DATE_FORMAT = "%H:%M:%S"

# Root logger name: all child loggers inherit
ROOT_LOGGER = "igprivate"

REDACTED = "***"

# Secrets shorter than this are not registered
MIN_SECRET_LENGTH = 4

_traceback_formatter = logging.Formatter()


class SecretFilter(logging.Filter):
    """
    Replaces every registered secret in a log record with '***'.

    Secrets are registered process-wide while a client is open
    (InstagramClient registers its password on construction and
    unregisters it on close). Registration is counted, so two clients
    sharing a password keep it redacted until both are closed.

    The filter is attached to every handler LogConfig installs and to
    every logger handed out by LogConfig.get_logger, so records are
    already redacted when they propagate to handlers igprivate does not
    own. Formatted tracebacks (exc_text) and stack_info are redacted too.
    """

    _secrets: Counter = Counter()
    _lock = threading.Lock()

    @classmethod
    def register(cls, secret: Optional[str]) -> bool:
        """Register a secret. Returns False when it is too short to redact."""
        if not secret or len(secret) < MIN_SECRET_LENGTH:
            return False
        with cls._lock:
            cls._secrets[secret] += 1
        return True

    @classmethod
    def unregister(cls, secret: Optional[str]) -> None:
        if not secret:
            return
        with cls._lock:
            if cls._secrets[secret] <= 1:
                cls._secrets.pop(secret, None)
            else:
                cls._secrets[secret] -= 1

    @classmethod
    def registered(cls) -> int:
        with cls._lock:
            return len(cls._secrets)

    @classmethod
    def redact(cls, text: str) -> str:
        with cls._lock:
            secrets = sorted(cls._secrets, key=len, reverse=True)
        for secret in secrets:
            if secret in text:
                text = text.replace(secret, REDACTED)
        return text

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = self.redact(message)
        if redacted != message:
            record.msg = redacted
            record.args = None

        if record.exc_info and not record.exc_text:
            record.exc_text = _traceback_formatter.formatException(record.exc_info)
        if record.exc_text:
            record.exc_text = self.redact(record.exc_text)
        if record.stack_info:
            record.stack_info = self.redact(record.stack_info)
        return True


def register_secret(secret: Optional[str]) -> bool:
    """Register a value that must never appear in log output."""
    return SecretFilter.register(secret)


def unregister_secret(secret: Optional[str]) -> None:
    """Drop one registration of a secret."""
    SecretFilter.unregister(secret)


def install_secret_filter(logger: logging.Logger) -> logging.Logger:
    """Attach a SecretFilter to a logger unless it already has one."""
    if not any(isinstance(f, SecretFilter) for f in logger.filters):
        logger.addFilter(SecretFilter())
    return logger


class LogConfig:
    """
    Centralized logging configuration for igprivate.

    Supports console and file (rotating) handlers. Every handler carries
    a SecretFilter.

    Usage:
        LogConfig.configure(level="DEBUG", filename="igprivate.log")
        LogConfig.configure(level="WARNING", console=False)
    """

    _configured: bool = False

    @classmethod
    def configure(
        cls,
        level: str = "INFO",
        format: Optional[str] = None,
        date_format: Optional[str] = None,
        filename: Optional[str] = None,
        console: bool = True,
        max_bytes: int = 10 * 1024 * 1024,  # 10MB
        backup_count: int = 3,
    ) -> logging.Logger:
        """
        Configure logging for all igprivate modules.

        Args:
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            format: Custom log format string (default: timestamp + level + name + message)
            date_format: Custom date format (default: YYYY-MM-DD HH:MM:SS)
            filename: Log file path (None = no file logging)
            console: Enable console output (default: True)
            max_bytes: Max log file size before rotation (default: 10MB)
            backup_count: Number of backup log files (default: 3)

        Returns:
            Root igprivate logger instance
        """
        root = logging.getLogger(ROOT_LOGGER)
        root.setLevel(getattr(logging, level.upper(), logging.INFO))

        for handler in root.handlers[:]:
            handler.close()
        root.handlers.clear()

        fmt = format or DEFAULT_FORMAT
        dtfmt = date_format or DEFAULT_DATE_FORMAT
        formatter = logging.Formatter(fmt, datefmt=dtfmt)
        secret_filter = SecretFilter()

        if console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setFormatter(formatter)
            console_handler.addFilter(secret_filter)
            root.addHandler(console_handler)

        if filename:
            file_handler = RotatingFileHandler(
                filename,
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
            file_handler.setFormatter(formatter)
            file_handler.addFilter(secret_filter)
            root.addHandler(file_handler)

        # Prevent double output
        root.propagate = False

        cls._configured = True
        return root

    @classmethod
    def configure_debug(cls, filename: Optional[str] = None) -> logging.Logger:
        """Configure logging in debug mode: compact format with timestamps."""
        return cls.configure(
            level="DEBUG",
            format=DEBUG_FORMAT,
            date_format=DEBUG_DATE_FORMAT,
            filename=filename,
            console=True,
        )

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """
        Get a child logger under 'igprivate' namespace, with a SecretFilter attached.

        Args:
            name: Logger name (e.g., 'client' → 'igprivate.client')
        """
        if not name.startswith(ROOT_LOGGER):
            name = f"{ROOT_LOGGER}.{name}"
        return install_secret_filter(logging.getLogger(name))

    @classmethod
    def set_level(cls, level: str) -> None:
        """Change log level at runtime."""
        root = logging.getLogger(ROOT_LOGGER)
        root.setLevel(getattr(logging, level.upper(), logging.INFO))

    @classmethod
    def silence(cls) -> None:
        """Disable all logging output."""
        logging.getLogger(ROOT_LOGGER).setLevel(logging.CRITICAL + 1)

    @classmethod
    def is_configured(cls) -> bool:
        return cls._configured


class DebugLogger:
    """
    Structured debug logger for igprivate.

    Categories:
        🔵 REQUEST  : outgoing HTTP request details
        🟢 RESPONSE : response info
        🔑 AUTH     : authorization token rotation
        🟣 LOGIN    : login state transitions
        🔴 ERROR    : error details + diagnostics

    Tokens are always masked; passwords are never passed in.
    """

    def __init__(self, enabled: bool = False, log_file: Optional[str] = None):
        self.enabled = enabled
        self._logger = LogConfig.get_logger("debug")
        if enabled:
            LogConfig.configure_debug(filename=log_file)

    @staticmethod
    def _mask(value: Optional[str], show: int = 6) -> str:
        """Mask sensitive values, showing only first N chars."""
        if not value:
            return "<empty>"
        if len(value) <= show:
            return REDACTED
        return value[:show] + REDACTED

    @staticmethod
    def _short_url(url: str) -> str:
        return url.replace("https://i.instagram.com", "")

    # ─── REQUEST ─────────────────────────────────────────────

    def request(self, method: str, url: str, authorization: Optional[str] = None, has_data: bool = False) -> None:
        """Log outgoing HTTP request."""
        if not self.enabled:
            return

        parts = [f"🔵 REQUEST {method} {self._short_url(url)}"]
        parts.append(f"auth={self._mask(authorization, 12)}")
        if has_data:
            parts.append("body=POST_DATA")

        self._logger.debug(" | ".join(parts))

    # ─── RESPONSE ────────────────────────────────────────────

    def response(self, status_code: int, url: str = "", size_bytes: int = 0) -> None:
        """Log HTTP response."""
        if not self.enabled:
            return

        status_emoji = "🟢" if 200 <= status_code < 300 else "🟡"
        parts = [f"{status_emoji} RESPONSE {status_code}"]
        if url:
            parts.append(self._short_url(url))
        if size_bytes:
            parts.append(f"{size_bytes}B")

        self._logger.debug(" | ".join(parts))

    # ─── AUTHORIZATION ───────────────────────────────────────

    def authorization_rotated(self, old: Optional[str], new: str) -> None:
        """Log authorization token rotation."""
        if not self.enabled:
            return

        self._logger.debug(
            f"🔑 AUTH ROTATED | {self._mask(old, 12)} → {self._mask(new, 12)}"
        )

    # ─── LOGIN ───────────────────────────────────────────────

    def login_state(self, username: str, state: str) -> None:
        """Log login state machine transition."""
        if not self.enabled:
            return

        self._logger.debug(f"🟣 LOGIN {state} | user={username}")

    # ─── ERROR ───────────────────────────────────────────────

    def error(
        self,
        error_type: str,
        status_code: int = 0,
        endpoint: str = "",
        message: str = "",
        response_preview: str = "",
    ) -> None:
        """Log error with diagnostics."""
        if not self.enabled:
            return

        parts = [f"🔴 ERROR {error_type}"]
        if status_code:
            parts.append(f"HTTP {status_code}")
        if endpoint:
            parts.append(self._short_url(endpoint))
        if message:
            parts.append(f"msg={message[:120]}")
        if response_preview:
            parts.append(f"body={response_preview[:200]}")

        self._logger.debug(" | ".join(parts))


# ─── Global debug logger singleton ────────────────────────────
# Shared across all modules. Set by InstagramClient(debug=True).
_debug_logger: Optional[DebugLogger] = None


def get_debug_logger() -> DebugLogger:
    """Get the global DebugLogger instance."""
    global _debug_logger
    if _debug_logger is None:
        _debug_logger = DebugLogger(enabled=False)
    return _debug_logger


def set_debug_logger(logger: DebugLogger) -> None:
    """Set the global DebugLogger instance."""
    global _debug_logger
    _debug_logger = logger
