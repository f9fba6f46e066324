"""Persistence collaborators for forecasts and daily plans.

The engine never talks to a database directly; it is handed a store that
implements this small interface. ``InMemoryStore`` backs tests and
simulations, ``JsonFileStore`` backs the command line runner.
"""

import json
import logging
from abc import ABC, abstractmethod
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..models.plan import DailyPlan, PlanRevision
from ..utils.datetime_utils import format_day_key

logger = logging.getLogger(__name__)


class PlanPersistenceError(RuntimeError):
    """A store refused or failed to persist data."""

    def __init__(self, message: str, permission_denied: bool = False):
        super().__init__(message)
        self.permission_denied = permission_denied


class Store(ABC):
    """Abstract persistence interface."""

    @abstractmethod
    def update_task_fields(self, task_id: str, fields: Dict[str, Any]) -> None:
        """Merge derived fields into a task record."""
        pass

    @abstractmethod
    def load_plan(self, user_id: str, day: date) -> Optional[DailyPlan]:
        """Stored plan for a user and day, or None."""
        pass

    @abstractmethod
    def save_plan(self, user_id: str, plan: DailyPlan) -> None:
        """Create or overwrite the plan for its day."""
        pass

    @abstractmethod
    def append_revision(self, user_id: str, day: date, revision: PlanRevision) -> None:
        """Append an audit record for a plan change."""
        pass


class InMemoryStore(Store):
    """Dictionary-backed store."""

    def __init__(self):
        self.task_fields: Dict[str, Dict[str, Any]] = {}
        self.task_writes: List[Tuple[str, Dict[str, Any]]] = []
        self.plans: Dict[Tuple[str, date], Dict[str, Any]] = {}
        self.revisions: Dict[Tuple[str, date], List[PlanRevision]] = {}

    def update_task_fields(self, task_id: str, fields: Dict[str, Any]) -> None:
        self.task_fields.setdefault(task_id, {}).update(fields)
        self.task_writes.append((task_id, dict(fields)))

    def load_plan(self, user_id: str, day: date) -> Optional[DailyPlan]:
        record = self.plans.get((user_id, day))
        return DailyPlan.from_record(record) if record else None

    def save_plan(self, user_id: str, plan: DailyPlan) -> None:
        self.plans[(user_id, plan.day)] = plan.to_record()

    def append_revision(self, user_id: str, day: date, revision: PlanRevision) -> None:
        self.revisions.setdefault((user_id, day), []).append(revision)


class JsonFileStore(Store):
    """Stores plans, revisions and task field updates as JSON files under a directory."""

    def __init__(self, root: str = "results"):
        self.root = Path(root)

    def _write(self, path: Path, data: Any) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, default=str)
        except PermissionError as exc:
            raise PlanPersistenceError(f"Permission denied writing {path}", permission_denied=True) from exc
        except OSError as exc:
            raise PlanPersistenceError(f"Failed to write {path}: {exc}") from exc

    def _read(self, path: Path) -> Optional[Any]:
        if not path.exists():
            return None
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except PermissionError as exc:
            raise PlanPersistenceError(f"Permission denied reading {path}", permission_denied=True) from exc
        except (OSError, ValueError) as exc:
            raise PlanPersistenceError(f"Failed to read {path}: {exc}") from exc

    def _plan_path(self, user_id: str, day: date) -> Path:
        return self.root / "plans" / user_id / f"{format_day_key(day)}.json"

    def update_task_fields(self, task_id: str, fields: Dict[str, Any]) -> None:
        path = self.root / "forecasts" / f"{task_id}.json"
        current = self._read(path) or {}
        current.update(fields)
        self._write(path, current)

    def load_plan(self, user_id: str, day: date) -> Optional[DailyPlan]:
        record = self._read(self._plan_path(user_id, day))
        return DailyPlan.from_record(record) if record else None

    def save_plan(self, user_id: str, plan: DailyPlan) -> None:
        self._write(self._plan_path(user_id, plan.day), plan.to_record())
        logger.info("saved plan for %s on %s", user_id, plan.day)

    def append_revision(self, user_id: str, day: date, revision: PlanRevision) -> None:
        path = self.root / "plans" / user_id / f"{format_day_key(day)}.history.json"
        history = self._read(path) or []
        history.append(revision.to_record())
        self._write(path, history)
