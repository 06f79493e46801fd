# marketplace/services/notification_service.py
from marketplace.celery_worker import celery_app
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Powiadomienia o zamowieniach, wysylane asynchronicznie przez Celery.
    """

    @staticmethod
    def send_order_notification(buyer_id: int, order_id: int, stall_id: int):
        send_order_notification_task.delay(buyer_id, order_id, stall_id)


@celery_app.task(name="marketplace.services.notification_service.send_order_notification_task")
def send_order_notification_task(buyer_id: int, order_id: int, stall_id: int):
    """
    Celery task - powiadamia kupujacego i stoisko o nowym zamowieniu.
    Na razie tylko loguje.
    """
    logger.info(f"[NOTIFICATION] Buyer {buyer_id}: order {order_id} placed at stall {stall_id}")

    return {"buyer_id": buyer_id, "order_id": order_id, "stall_id": stall_id, "status": "sent"}
