import json
import logging
from typing import Dict, Optional
from pathlib import Path


def save_run_log(log: Dict, log_dir: Optional[Path], run_timestamp: str, logger: logging.Logger, log_filename: Optional[str] = None) -> Optional[Path]:
    if not log_dir:
        return None

    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"Failed to create log directory {log_dir}: {e}")
        return None

    if log_filename:
        run_log_path = log_dir / log_filename
    else:
        run_log_path = log_dir / f"run-{run_timestamp}.json"

    try:
        with open(run_log_path, 'w') as f:
            json.dump(log, f, indent=2, default=str)
        logger.debug(f"Saved run log to {run_log_path}")
        return run_log_path
    except (OSError, TypeError, ValueError) as e:
        logger.error(f"Failed to write run log file {run_log_path}: {type(e).__name__}: {e}")
        return None
