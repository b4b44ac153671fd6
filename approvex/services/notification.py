from datetime import datetime, time, timezone
from typing import Optional

from sqlalchemy.orm import Session

from approvex.models.notification import Notification


class NotificationService:
    @staticmethod
    def create_notification(
        db: Session,
        user_id: int,
        title: str,
        message: str,
        type: str = "info",
        link: Optional[str] = None,
        commit: bool = True,
    ) -> Notification:
        """
        Internal utility for creating notifications.
        """
        notification = Notification(
            user_id=user_id,
            title=title,
            message=message,
            type=type,
            link=link
        )
        db.add(notification)
        if commit:
            db.commit()
            db.refresh(notification)
        else:
            db.flush()
        return notification

    @staticmethod
    def notify_decision(
        db: Session,
        user_id: int,
        request_type: str,
        status: str,
        details: str,
    ) -> Notification:
        label = request_type.capitalize()
        title = f"{label} request {status}"
        message = f"Your {request_type} request ({details}) has been {status.upper()}."
        kind = "success" if status == "approved" else "error"
        return NotificationService.create_notification(db, user_id, title, message, kind)

    @staticmethod
    def already_sent_today(db: Session, user_id: int, type: str, title_fragment: str, today=None) -> bool:
        today = today or datetime.now(timezone.utc).date()
        start_of_day = datetime.combine(today, time.min, tzinfo=timezone.utc)
        return db.query(Notification.id).filter(
            Notification.user_id == user_id,
            Notification.type == type,
            Notification.title.contains(title_fragment),
            Notification.created_at >= start_of_day,
        ).first() is not None

    @staticmethod
    def list_for_user(db: Session, user_id: int, unread_only: bool = False, limit: int = 50):
        query = db.query(Notification).filter(Notification.user_id == user_id)
        if unread_only:
            query = query.filter(Notification.is_read == False)  # noqa: E712
        return query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit).all()
