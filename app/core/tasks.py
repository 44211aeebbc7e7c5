"""
Plánované úlohy na pozadí.
"""
from apscheduler.schedulers.background import BackgroundScheduler
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from datetime import datetime, timezone
from core.database import SessionLocal
from models.password_reset import PasswordResetToken
import logging

logger = logging.getLogger(__name__)

scheduler = BackgroundScheduler()


def purge_password_reset_tokens(db: Session) -> int:
    """
    Smazat tokeny pro obnovení hesla, které vypršely nebo už byly použity.

    Returns:
        Počet smazaných tokenů
    """
    now = datetime.now(timezone.utc)
    deleted = db.query(PasswordResetToken).filter(
        or_(
            PasswordResetToken.is_used == True,
            PasswordResetToken.expires_at < now
        )
    ).delete(synchronize_session=False)
    db.commit()
    return deleted


def cleanup_password_reset_tokens():
    """Úloha scheduleru: úklid tokenů každou hodinu."""
    db = SessionLocal()
    try:
        deleted = purge_password_reset_tokens(db)
        if deleted:
            logger.info("Úklid: smazáno %d tokenů pro obnovení hesla", deleted)
        else:
            logger.debug("Úklid: žádné tokeny ke smazání")
    except SQLAlchemyError as e:
        logger.error("Chyba při úklidu tokenů: %s", e)
        db.rollback()
    finally:
        db.close()


def start_scheduler():
    """
    Spustit scheduler (při startu aplikace).
    """
    if not scheduler.running:
        scheduler.add_job(
            cleanup_password_reset_tokens,
            'interval',
            hours=1,
            id='cleanup_password_reset_tokens',
            name='Úklid tokenů pro obnovení hesla',
            replace_existing=True
        )

        scheduler.start()
        logger.info("Scheduler úloh spuštěn")


def stop_scheduler():
    """
    Zastavit scheduler (při vypnutí aplikace).
    """
    if scheduler.running:
        scheduler.shutdown()
        logger.info("Scheduler úloh zastaven")
