# storefront/services/notification_service.py
from storefront.celery_worker import celery_app
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Hands order events to the notification worker.
    Delivery (toast, sound, desktop, e-mail) happens outside the engine.
    """

    @staticmethod
    def send_order_notification(session_id: str, order_id: str, total: str):
        try:
            send_order_notification_task.delay(session_id, order_id, total)
        except Exception as e:
            #zamowienie juz zlozone, zgubione powiadomienie to nie blad checkoutu
            logger.warning(f"Could not queue notification for order {order_id}: {e}")


@celery_app.task(name="storefront.services.notification_service.send_order_notification_task")
def send_order_notification_task(session_id: str, order_id: str, total: str):
    logger.info(f"[NOTIFICATION] Session {session_id}: order {order_id} completed, total {total}")
    return {"session_id": session_id, "order_id": order_id, "status": "sent"}
