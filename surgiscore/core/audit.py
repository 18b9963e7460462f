"""
Scoring audit logging for SurgiScore.

Every calculator run from the CLI can be recorded with its inputs and outputs
in a timestamped audit file, so a score shown to a clinician can be traced
back to exactly what was entered.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

ENTRY_SEPARATOR = "---\n"


def _jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    return value


class ScoringAuditLogger:
    """
    Audit logger for calculator invocations.

    Writes to both:
    1. The ``surgiscore.audit`` logger, one summary line per calculation
    2. A dedicated file with the full inputs and outputs of each calculation
    """

    def __init__(self, log_dir: Optional[Path] = None):
        """
        Initialize the audit logger.

        Args:
            log_dir: Directory for audit files. Defaults to 'logs/scoring'.
        """
        self.logger = logging.getLogger("surgiscore.audit")

        self.log_dir = Path(log_dir) if log_dir is not None else Path("logs/scoring")
        self.log_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        self.log_file = self.log_dir / f"{timestamp}_scoring.log"

        self.calculation_count = 0

        self.logger.info(f"Scoring audit initialized. Log file: {self.log_file}")

    def log_calculation(
        self,
        calculator: str,
        inputs: Any,
        outputs: Any,
        success: bool = True,
        error: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Record one calculator invocation.

        Args:
            calculator: Calculator name (e.g. 'who_discharge')
            inputs: Input record(s) or plain values
            outputs: Result record(s) or plain values
            success: Whether the calculation completed
            error: Error message if it failed
            metadata: Additional context (user, source file...)

        Returns:
            The entry as written
        """
        self.calculation_count += 1

        entry = {
            "timestamp": datetime.now().isoformat(),
            "calculation_id": self.calculation_count,
            "calculator": calculator,
            "success": success,
            "input": _jsonable(inputs),
            "output": _jsonable(outputs),
            "error": error,
        }
        if metadata:
            entry["metadata"] = metadata

        status = "SUCCESS" if success else f"FAILED: {error}"
        self.logger.info(f"Calculation #{self.calculation_count} | {calculator} | Status: {status}")

        try:
            with open(self.log_file, "a", encoding="utf-8") as f:
                f.write(f"{json.dumps(entry, indent=2, default=str)}\n")
                f.write(ENTRY_SEPARATOR)
        except OSError as e:
            self.logger.error(f"Failed to write to scoring audit file: {e}")

        return entry

    def read_entries(self) -> List[Dict[str, Any]]:
        """Read back the entries written to this session's audit file."""
        if not self.log_file.exists():
            return []
        text = self.log_file.read_text(encoding="utf-8")
        return [json.loads(chunk) for chunk in text.split(ENTRY_SEPARATOR) if chunk.strip()]
