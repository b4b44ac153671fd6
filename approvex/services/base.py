import logging
from sqlalchemy.orm import Session


class BaseService:
    """Shared plumbing for session-bound services."""

    def __init__(self, db: Session):
        self.db = db
        self._logger = logging.getLogger(self.__class__.__module__)

    def commit(self):
        try:
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            self._logger.error(f"Commit failed, transaction rolled back: {e}")
            raise
