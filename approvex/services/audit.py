from typing import Any, Optional

from approvex.services.base import BaseService
from approvex.models.activity import ActivityLog


def _sanitize(obj: Any) -> Any:
    if hasattr(obj, "model_dump"):
        return obj.model_dump(mode="json")
    if isinstance(obj, dict):
        return {k: _sanitize(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_sanitize(i) for i in obj]
    if isinstance(obj, (str, int, float, bool)) or obj is None:
        return obj
    return str(obj)


class ActivityService(BaseService):
    def log_action(
        self,
        action: str,
        request_type: str,
        request_id: int,
        actor_id: Optional[int],
        requester_id: Optional[int] = None,
        decision_summary: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> ActivityLog:
        """
        Append an activity log entry. Strictly append-only.

        The entry is flushed, not committed: callers either commit it with the
        action it describes or commit it on its own as a post-transition step.
        """
        entry = ActivityLog(
            action=action,
            request_type=request_type,
            request_id=request_id,
            actor_id=actor_id,
            requester_id=requester_id,
            decision_summary=decision_summary,
            details=_sanitize(details) if details else None,
        )
        self.db.add(entry)
        self.db.flush()
        return entry

    def recent(self, limit: int = 10, requester_id: Optional[int] = None):
        query = self.db.query(ActivityLog)
        if requester_id is not None:
            query = query.filter(ActivityLog.requester_id == requester_id)
        return query.order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc()).limit(limit).all()

    # Static wrapper for call sites that only hold a session
    @staticmethod
    def log(db, *args, **kwargs):
        service = ActivityService(db)
        return service.log_action(*args, **kwargs)
