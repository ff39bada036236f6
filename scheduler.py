import logging

from apscheduler.schedulers.background import BackgroundScheduler

logger = logging.getLogger(__name__)


def clear_movies(store, retention_ms):
    """Nettoyage périodique : ne doit jamais faire tomber le planificateur."""
    try:
        return store.sweep_completed(retention_ms)
    except Exception as e:
        logger.error(f"Erreur lors du nettoyage des films: {e}")
        return None


def reset_ai_quota(quota):
    quota.reset()


def build_scheduler(store, quota, settings, scheduler=None):
    scheduler = scheduler or BackgroundScheduler(daemon=True)

    scheduler.add_job(
        clear_movies,
        'interval',
        minutes=settings.cleanup_interval_minutes,
        args=[store, settings.retention_ms],
        id='clear_movies',
        replace_existing=True,
    )
    # Minuit heure locale
    scheduler.add_job(
        reset_ai_quota,
        'cron',
        hour=0,
        minute=0,
        args=[quota],
        id='reset_ai_quota',
        replace_existing=True,
    )
    return scheduler
