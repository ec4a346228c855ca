"""
CORE App - Celery Tasks for Account Maintenance

Scheduled daily at 08:00 (see CELERY_BEAT_SCHEDULE).
"""

import logging
from datetime import date

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3, default_retry_delay=300)
def suspend_accounts_with_expired_documents(self, hoy: str = None):
    """
    Suspend approved drivers whose licence, insurance, technical review
    or circulation permit has expired.

    Args:
        hoy: ISO date to evaluate against (default: today, local time)
    """
    from core.services import AccountService

    fecha = date.fromisoformat(hoy) if hoy else None
    logger.info(f"[CELERY] Checking expired driver documents ({hoy or 'today'})")

    suspendidos = AccountService.suspender_por_documentos_vencidos(hoy=fecha)

    return {
        'suspended': len(suspendidos),
        'gruero_ids': [str(g.pk) for g in suspendidos],
    }
