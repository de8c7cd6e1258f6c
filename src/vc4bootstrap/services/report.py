"""JSON report describing one installation run."""

import json
import os
import tempfile
from datetime import datetime, timezone
from typing import Any, Dict, Optional


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class ReportService:
    """Records each stage outcome and rewrites the report file after every change."""

    def __init__(self, report_file: str, logger):
        self.report_file = report_file
        self.logger = logger
        self.report: Dict[str, Any] = {
            "run_id": None,
            "status": "running",
            "started_at": None,
            "finished_at": None,
            "metadata": {},
            "stages": [],
            "license_state": None,
            "endpoint": None,
            "warnings": [],
            "error": None,
        }

    def start_run(self, run_id: str, metadata: Dict[str, Any]):
        self.report.update(run_id=run_id, started_at=_timestamp(), metadata=metadata)
        self.write()

    def stage_started(self, stage_name: str):
        self.report["stages"].append(
            {"name": stage_name, "status": "running", "started_at": _timestamp(), "finished_at": None, "error": None}
        )
        self.write()

    def stage_finished(self, stage_name: str, status: str, error: Optional[str] = None):
        running = [
            stage for stage in self.report["stages"]
            if stage["name"] == stage_name and stage["status"] == "running"
        ]
        if running:
            running[-1].update(status=status, finished_at=_timestamp(), error=error)
        self.write()

    def set_result(self, key: str, value: Any):
        self.report[key] = value
        self.write()

    def finalize(self, status: str, error: Optional[str] = None):
        self.report.update(status=status, finished_at=_timestamp(), error=error)
        self.write()

    def write(self):
        """Replaces the report file atomically; failures only produce a warning."""
        directory = os.path.dirname(self.report_file) or "."
        temp_path = None
        try:
            os.makedirs(directory, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=directory, prefix="vc4-report-", suffix=".json", delete=False
            ) as file_obj:
                temp_path = file_obj.name
                json.dump(self.report, file_obj, indent=2, sort_keys=True)
                file_obj.write("\n")
            os.replace(temp_path, self.report_file)
        except OSError as exc:
            self.logger.warning("Could not write report file '%s': %s", self.report_file, exc)
            if temp_path and os.path.exists(temp_path):
                os.remove(temp_path)
