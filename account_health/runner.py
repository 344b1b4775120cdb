"""
Evaluation runner for customer portfolios.

Single entry point for batch evaluation: load stored customer documents,
summarize the portfolio and record a JSON run log.
"""

import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import pandas as pd
import yaml

from .alerts import Alert
from .config import DEFAULT_CONFIG, EngineConfig
from .logger import RunLogger, get_logger
from .portfolio import PortfolioSummary, summarize_portfolio
from .profile import CustomerProfile

logger = get_logger(__name__)


@dataclass
class RunResult:
    """Container for one portfolio evaluation run."""

    run_id: str
    timestamp: datetime
    now: datetime
    duration_seconds: float
    source: Path
    config_version: str
    summary: PortfolioSummary
    alerts: List[Alert] = field(default_factory=list)

    def report(self) -> str:
        """Human-readable summary."""
        s = self.summary
        lines = [
            f"[{self.run_id}] {self.source} - {s.total_customers} customers",
            f"  Avg health: {s.average_health_score:.1f}/10",
            f"  Avg risk:   {s.average_risk_score:.1f}/100",
            "  Risk levels: " + ", ".join(f"{k} {v}" for k, v in s.risk_level_counts.items()),
            "  Behavior:    " + ", ".join(f"{k} {v}" for k, v in s.behavior_counts.items()),
            "  Alerts:      " + ", ".join(f"{k} {v}" for k, v in s.alert_counts.items()),
        ]
        return "\n".join(lines)


class EvaluationRunner:
    """
    Single entry point for portfolio evaluation runs.

    Usage:
        runner = EvaluationRunner(logs_dir="logs")

        # From a JSON or YAML list of customer documents
        result = runner.run("customers.json")
        print(result.report())

        # Past runs
        runner.list_runs()
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        logs_dir: Path | str = "logs",
    ):
        """
        Initialize runner.

        Args:
            config: EngineConfig instance. Uses DEFAULT_CONFIG if None.
            logs_dir: Directory for JSON run logs
        """
        self.config = config or DEFAULT_CONFIG
        self.logs_dir = Path(logs_dir)
        self.run_logger = RunLogger(self.logs_dir)

    def generate_run_id(self) -> str:
        """Generate unique run ID: run_YYYYMMDD_XXXX"""
        date_str = datetime.now().strftime("%Y%m%d")
        short_uuid = uuid.uuid4().hex[:4]
        return f"run_{date_str}_{short_uuid}"

    @staticmethod
    def load_profiles(path: Path | str) -> List[CustomerProfile]:
        """
        Load customer documents from JSON or YAML.

        The file holds a list of documents, or a mapping with a
        "customers" list.

        Raises:
            ValueError: If the file does not contain a list of documents
            ProfileValidationError: If a document is malformed
        """
        path = Path(path)
        with open(path) as f:
            if path.suffix.lower() in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)

        if isinstance(data, dict):
            data = data.get("customers")
        if not isinstance(data, list):
            raise ValueError(f"{path}: expected a list of customer documents")
        return [CustomerProfile.from_dict(doc) for doc in data]

    def run(self, source: Path | str, now: Optional[datetime] = None) -> RunResult:
        """
        Evaluate every customer in a profiles file.

        Args:
            source: JSON or YAML file of customer documents
            now: Reference time (default: current UTC time)

        Returns:
            RunResult with portfolio summary and ranked alerts
        """
        run_id = self.generate_run_id()
        start_time = datetime.now()
        source = Path(source)

        try:
            profiles = self.load_profiles(source)
            now = now or datetime.now(timezone.utc)
            summary = summarize_portfolio(profiles, now, self.config)

            duration = (datetime.now() - start_time).total_seconds()
            result = RunResult(
                run_id=run_id,
                timestamp=start_time,
                now=now,
                duration_seconds=duration,
                source=source,
                config_version=self.config.version,
                summary=summary,
                alerts=summary.alerts,
            )

            # Always log
            self.run_logger.log_run(result)
            logger.info(
                "portfolio evaluated",
                extra={
                    "run_id": run_id,
                    "customers": summary.total_customers,
                    "duration_seconds": duration,
                },
            )
            return result

        except Exception as e:
            # Log failure
            self.run_logger.log_failure(run_id, source, str(e))
            logger.error("portfolio evaluation failed", extra={"run_id": run_id, "error": str(e)})
            raise

    def list_runs(self) -> pd.DataFrame:
        """
        Get summary of all past runs.

        Returns:
            DataFrame with run history
        """
        return self.run_logger.get_summary_dataframe()
