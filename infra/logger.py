#!/usr/bin/env python3
"""
Unified pipeline logging system

Provides structured JSON logging with:
- Real-time progress tracking
- Context preservation (doc_id, stage, page numbers)
- Machine-parseable logs for monitoring
- Human-readable console output

LOG FILE LOCATIONS:
  {log_dir}/{stage}.jsonl  (one append-only file per stage)

JSON SCHEMA:
  Required fields: timestamp, level, message, doc_id, stage
  Optional fields: page, progress, tokens, duration_seconds, error, plus any context

USAGE:
  with create_logger('annual-report', 'verify_boundaries', log_dir=path) as logger:
      logger.info('Verifying...', page=42)
      logger.progress('Nodes', current=10, total=100)

LAZY INIT:
  Nothing touches the filesystem until the first message is logged.
"""

import json
import logging
import sys
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional
from contextlib import contextmanager


# LogRecord attributes that are not user context
_RESERVED = set(vars(logging.LogRecord('', 0, '', 0, '', (), None))) | {'message', 'asctime'}


class JSONFormatter(logging.Formatter):
    """Format log records as JSON for machine parsing."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now().astimezone().isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key in _RESERVED or key.startswith('_'):
                continue
            log_data[key] = value

        return json.dumps(log_data, default=str)


class HumanFormatter(logging.Formatter):
    """Format log records for human-readable console output."""

    ICONS = {
        'DEBUG': '🔍',
        'INFO': 'ℹ️',
        'WARNING': '⚠️',
        'ERROR': '❌',
        'CRITICAL': '🚨'
    }

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now().strftime('%H:%M:%S')
        icon = self.ICONS.get(record.levelname, 'ℹ️')

        parts = [f"[{timestamp}]", icon]

        if hasattr(record, 'stage'):
            parts.append(f"[{record.stage}]")
        if hasattr(record, 'page'):
            parts.append(f"[page {record.page}]")

        parts.append(record.getMessage())

        if hasattr(record, 'progress'):
            prog = record.progress
            pct = prog['percent']
            bar_width = 30
            filled = int(bar_width * pct / 100)
            bar = '█' * filled + '░' * (bar_width - filled)
            parts.append(f"\n    [{bar}] {pct:.1f}% ({prog['current']}/{prog['total']})")

        if hasattr(record, 'error'):
            parts.append(f"({record.error})")

        return ' '.join(parts)


class PipelineLogger:
    """
    Unified logger for pipeline operations.

    Writes both JSON (for machines) and human-readable (for console) logs.
    Maintains context across operations (doc_id, stage, etc.)
    """

    def __init__(
        self,
        doc_id: str,
        stage: str,
        log_dir: Optional[Path] = None,
        console_output: bool = True,
        json_output: bool = True,
        level: str = "INFO"
    ):
        """
        Args:
            doc_id: Document identifier (e.g., "annual-report-2024")
            stage: Pipeline stage (e.g., "toc_detection", "repair_boundaries")
            log_dir: Directory for the JSON log file (None disables the file)
            console_output: Whether to output to console
            json_output: Whether to write the JSON log file
            level: Logging level (DEBUG, INFO, WARNING, ERROR)
        """
        self.doc_id = doc_id
        self.stage = stage
        self.context = {}
        self._context_lock = threading.Lock()

        self.log_dir = Path(log_dir) if log_dir is not None else None
        self.json_output = json_output and self.log_dir is not None
        self.log_file: Optional[Path] = None
        self._json_handler: Optional[logging.Handler] = None

        # Instance id keeps handlers from accumulating across loggers
        logger_name = f"outline.{doc_id}.{stage}.{id(self)}"
        self.logger = logging.getLogger(logger_name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.logger.propagate = False

        if console_output:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(HumanFormatter())
            self.logger.addHandler(console_handler)

    def _ensure_json_handler(self):
        if not self.json_output or self._json_handler is not None:
            return

        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.log_file = self.log_dir / f"{self.stage}.jsonl"
        handler = logging.FileHandler(self.log_file, mode='a')
        handler.setFormatter(JSONFormatter())
        self.logger.addHandler(handler)
        self._json_handler = handler

    def _log(self, level: str, message: str, **kwargs):
        with self._context_lock:
            extra = {
                'doc_id': self.doc_id,
                'stage': self.stage,
                **self.context.copy(),
                **kwargs
            }

        self._ensure_json_handler()
        self.logger.log(
            getattr(logging, level.upper()),
            message,
            extra=extra
        )

    def debug(self, message: str, **kwargs):
        self._log('DEBUG', message, **kwargs)

    def info(self, message: str, **kwargs):
        self._log('INFO', message, **kwargs)

    def warning(self, message: str, **kwargs):
        self._log('WARNING', message, **kwargs)

    def error(self, message: str, **kwargs):
        self._log('ERROR', message, **kwargs)

    def progress(
        self,
        message: str,
        current: int,
        total: int,
        **kwargs
    ):
        """
        Log progress update.

        Args:
            message: Progress description
            current: Current item number
            total: Total items
            **kwargs: Additional context (tokens, node titles, etc.)
        """
        percent = min(100.0, (current / total * 100) if total > 0 else 0)
        progress_data = {
            'current': current,
            'total': total,
            'percent': percent
        }

        self._log('INFO', message, progress=progress_data, **kwargs)

    def page_event(self, message: str, page: int, **kwargs):
        self._log('INFO', message, page=page, **kwargs)

    def page_error(self, message: str, page: int, error: str, **kwargs):
        self._log('ERROR', message, page=page, error=error, **kwargs)

    def start_stage(self, **kwargs):
        self.info(f"Starting {self.stage} stage", **kwargs)

    def complete_stage(self, duration_seconds: float, **kwargs):
        self.info(
            f"Completed {self.stage} stage",
            duration_seconds=duration_seconds,
            **kwargs
        )

    def child(self, stage: str) -> "PipelineLogger":
        """Logger for a sub-stage sharing this logger's doc, directory and context."""
        child = PipelineLogger(
            self.doc_id,
            stage,
            log_dir=self.log_dir,
            console_output=any(
                isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
                for h in self.logger.handlers
            ),
            json_output=self.json_output,
            level=logging.getLevelName(self.logger.level),
        )
        with self._context_lock:
            child.context = self.context.copy()
        return child

    @contextmanager
    def context_scope(self, **context):
        """
        Temporarily add context to all logs within scope.

        Example:
            with logger.context_scope(node_id="abc"):
                logger.info("Splitting...")  # Includes node_id="abc"
        """
        with self._context_lock:
            old_context = self.context.copy()
            self.context.update(context)
        try:
            yield
        finally:
            with self._context_lock:
                self.context = old_context

    def set_context(self, **context):
        with self._context_lock:
            self.context.update(context)

    def close(self):
        """Close all handlers and flush logs."""
        for handler in self.logger.handlers[:]:
            handler.close()
            self.logger.removeHandler(handler)
        self._json_handler = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def create_logger(
    doc_id: str,
    stage: str,
    **kwargs
) -> PipelineLogger:
    """
    Convenience function to create a pipeline logger.

    Args:
        doc_id: Document identifier
        stage: Pipeline stage name
        **kwargs: Additional arguments for PipelineLogger

    Returns:
        Configured PipelineLogger instance
    """
    return PipelineLogger(doc_id, stage, **kwargs)
