import logging
from approvex.core.config import settings
from approvex.database import SessionLocal
from approvex.models.user import User, UserRole

logger = logging.getLogger(__name__)

def init_system_data():
    """
    Creates the bootstrap manager account when the users table is empty and
    DEFAULT_MANAGER_EMAIL is set.
    """
    if not settings.default_manager_email:
        return
    db = SessionLocal()
    try:
        user_count = db.query(User).count()
        if user_count == 0:
            logger.info("Running startup initialization...")
            db.add(User(
                email=settings.default_manager_email,
                full_name="Manager",
                role=UserRole.MANAGER,
                is_active=True,
            ))
            db.commit()
            logger.info(f"✓ Created default manager: {settings.default_manager_email}")
        else:
            logger.info(f"System initialization check: {user_count} user(s) found.")
    except Exception as e:
        db.rollback()
        logger.error(f"Error during system initialization check: {str(e)}", exc_info=True)
    finally:
        db.close()
