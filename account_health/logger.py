"""
Logging for the account health engine.

- get_logger: stdlib logger with a JSON formatter, configured once per name
- RunLogger: writes one JSON record per portfolio evaluation run (pass or fail)
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

import pandas as pd
from pythonjsonlogger import jsonlogger

if TYPE_CHECKING:
    from .runner import RunResult


def get_logger(name: str) -> logging.Logger:
    """
    Configure a JSON logger once and reuse it.

    Engine modules log at DEBUG; the level is left to the application
    unless the logger has not been configured yet.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    formatter = jsonlogger.JsonFormatter(
        "%(levelname)s %(name)s %(message)s %(asctime)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    if logger.level == logging.NOTSET:
        logger.setLevel(logging.WARNING)
    logger.propagate = False
    return logger


class RunLogger:
    """Structured JSON logging for portfolio evaluation runs."""

    def __init__(self, logs_dir: Path):
        """
        Initialize logger.

        Args:
            logs_dir: Directory to write log files
        """
        self.logs_dir = Path(logs_dir)
        self.logs_dir.mkdir(parents=True, exist_ok=True)

    def log_run(self, result: "RunResult") -> Path:
        """
        Log run result to JSON file.

        Args:
            result: RunResult from runner

        Returns:
            Path to log file
        """
        summary = result.summary
        log_entry = {
            "run_id": result.run_id,
            "timestamp": result.timestamp.isoformat(),
            "evaluated_at": result.now.isoformat(),
            "duration_seconds": result.duration_seconds,
            "source": str(result.source),
            "config_version": result.config_version,
            "results": {
                "total_customers": summary.total_customers,
                "average_risk_score": summary.average_risk_score,
                "average_health_score": summary.average_health_score,
                "risk_levels": summary.risk_level_counts,
                "behavior_categories": summary.behavior_counts,
                "alerts": summary.alert_counts,
            },
            "status": "OK",
        }

        log_path = self.logs_dir / f"{result.run_id}.json"
        with open(log_path, "w") as f:
            json.dump(log_entry, f, indent=2, default=str)

        return log_path

    def log_failure(self, run_id: str, source: Path | str, error: str) -> Path:
        """
        Log failed run.

        Args:
            run_id: Unique run ID
            source: Profiles file that was being evaluated
            error: Error message

        Returns:
            Path to log file
        """
        log_entry = {
            "run_id": run_id,
            "timestamp": datetime.now().isoformat(),
            "source": str(source),
            "status": "ERROR",
            "error": error,
        }

        log_path = self.logs_dir / f"{run_id}.json"
        with open(log_path, "w") as f:
            json.dump(log_entry, f, indent=2)

        return log_path

    def get_all_logs(self) -> list[dict]:
        """
        Load all run logs.

        Returns:
            List of log dictionaries, sorted by file name (run_YYYYMMDD_...)
        """
        logs = []
        for log_file in sorted(self.logs_dir.glob("run_*.json")):
            with open(log_file) as f:
                logs.append(json.load(f))
        return logs

    def get_summary_dataframe(self) -> pd.DataFrame:
        """
        Get summary of all runs as DataFrame.

        Returns:
            DataFrame with run summaries, newest first
        """
        logs = self.get_all_logs()
        if not logs:
            return pd.DataFrame()

        summary = []
        for log in logs:
            entry = {
                "run_id": log["run_id"],
                "source": log.get("source"),
                "timestamp": log["timestamp"],
                "status": log["status"],
            }

            if "results" in log:
                results = log["results"]
                entry["customers"] = results.get("total_customers")
                entry["avg_risk"] = results.get("average_risk_score")
                entry["avg_health"] = results.get("average_health_score")

            summary.append(entry)

        df = pd.DataFrame(summary)
        return df.sort_values("timestamp", ascending=False)
