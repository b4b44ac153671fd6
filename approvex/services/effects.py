"""
Side effects of an approve/reject decision.

They run after the status write has committed. Each step has its own error
boundary: a failure is logged and reported in the outcome list but never
undoes the decision or stops the remaining steps.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from approvex.models.user import User
from approvex.services.audit import ActivityService
from approvex.services.decision_summary import generate_decision_summary
from approvex.services.email_client import send_approval_email
from approvex.services.notification import NotificationService

logger = logging.getLogger(__name__)


@dataclass
class EffectOutcome:
    name: str
    succeeded: bool
    error: Optional[str] = None


@dataclass
class DecisionContext:
    request_type: str
    request_id: int
    status: str
    actor: User
    requester: Optional[User]
    manager_comment: Optional[str]
    snapshot: Dict[str, Any] = field(default_factory=dict)
    email_details: Dict[str, Any] = field(default_factory=dict)
    notification_details: str = ""


class TransitionEffects:
    def __init__(
        self,
        db: Session,
        summarizer: Callable[..., str] = generate_decision_summary,
        mailer: Callable[..., str] = send_approval_email,
    ):
        self.db = db
        self.summarizer = summarizer
        self.mailer = mailer

    def dispatch(self, ctx: DecisionContext) -> List[EffectOutcome]:
        outcomes: List[EffectOutcome] = []

        summary_holder: Dict[str, Optional[str]] = {"summary": None}

        def summarize():
            summary_holder["summary"] = self.summarizer(
                request_type=ctx.request_type,
                status=ctx.status,
                manager_comment=ctx.manager_comment,
                request=ctx.snapshot,
            )

        outcomes.append(self._run("decision_summary", summarize))
        outcomes.append(self._run("activity_log", lambda: self._log_activity(ctx, summary_holder["summary"]), uses_db=True))
        outcomes.append(self._run("notification", lambda: self._notify(ctx), uses_db=True))
        outcomes.append(self._run("email", lambda: self._email(ctx)))
        return outcomes

    def _run(self, name: str, step: Callable[[], Any], uses_db: bool = False) -> EffectOutcome:
        try:
            step()
            return EffectOutcome(name=name, succeeded=True)
        except Exception as e:
            # Don't fail the decision if a side effect fails
            logger.warning(f"Post-transition effect '{name}' failed: {e}", exc_info=True)
            if uses_db:
                self.db.rollback()
            return EffectOutcome(name=name, succeeded=False, error=str(e))

    def _log_activity(self, ctx: DecisionContext, summary: Optional[str]):
        ActivityService.log(
            self.db,
            action=ctx.status,
            request_type=ctx.request_type,
            request_id=ctx.request_id,
            actor_id=ctx.actor.id,
            requester_id=ctx.requester.id if ctx.requester else None,
            decision_summary=summary,
            details={"manager_comment": ctx.manager_comment},
        )
        self.db.commit()

    def _notify(self, ctx: DecisionContext):
        if ctx.requester is None:
            raise ValueError(f"Requester of {ctx.request_type} #{ctx.request_id} not found")
        NotificationService.notify_decision(
            self.db,
            user_id=ctx.requester.id,
            request_type=ctx.request_type,
            status=ctx.status,
            details=ctx.notification_details,
        )

    def _email(self, ctx: DecisionContext):
        if ctx.requester is None or not ctx.requester.email:
            raise ValueError(f"No email address for requester of {ctx.request_type} #{ctx.request_id}")
        self.mailer(
            recipient_email=ctx.requester.email,
            recipient_name=ctx.requester.display_name,
            request_type=ctx.request_type,
            request_id=ctx.request_id,
            status=ctx.status,
            manager_email=ctx.actor.email or "Manager",
            manager_comment=ctx.manager_comment,
            details=ctx.email_details,
        )
