import logging
from apscheduler.schedulers.background import BackgroundScheduler

from closerdesk.core.config import settings
from closerdesk.core.database import SessionLocal
from closerdesk.services.assignment_service import AssignmentService

logger = logging.getLogger(__name__)
scheduler = BackgroundScheduler()


# ---------------------------------------------------------
# WRAPPER: Auto-assign batch
# ---------------------------------------------------------
def run_auto_assign_batch():
    """
    Opens its own DB session and runs the round-robin batch.
    The scheduler calls jobs without arguments, so the session lives here.
    """
    db = SessionLocal()
    try:
        logger.info("Scheduler: starting auto-assign batch...")
        result = AssignmentService(db).auto_assign_all({"user_agent": "scheduler"})
        logger.info(f"Scheduler: auto-assigned {result['assigned_count']} appointments.")
        return result
    except Exception as e:
        logger.error(f"Scheduler Error (Auto-assign): {str(e)}")
    finally:
        db.close()


# ---------------------------------------------------------
# SCHEDULER SETUP
# ---------------------------------------------------------
def start_scheduler():
    if scheduler.running:
        return

    interval = settings.AUTO_ASSIGN_INTERVAL_MINUTES
    if interval <= 0:
        logger.info("Scheduler: auto-assign job disabled (AUTO_ASSIGN_INTERVAL_MINUTES=0).")
        return

    scheduler.add_job(run_auto_assign_batch, "interval", minutes=interval, id="auto_assign", replace_existing=True)
    scheduler.start()
    logger.info(f"Background Scheduler Started (auto-assign every {interval} min).")


def stop_scheduler():
    if scheduler.running:
        scheduler.shutdown()
