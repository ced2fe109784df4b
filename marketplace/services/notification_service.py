# marketplace/services/notification_service.py
from typing import Iterable

from marketplace.celery_worker import celery_app
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Sends order notifications through Celery.
    Called only after the checkout transaction committed.
    """

    def order_placed(self, buyer_id: int, order_id: int, seller_ids: Iterable[int]):
        send_order_notification_task.delay(buyer_id, order_id)

        for seller_id in sorted(set(seller_ids)):
            send_seller_notification_task.delay(seller_id, order_id)


@celery_app.task(name="marketplace.services.notification_service.send_order_notification_task")
def send_order_notification_task(buyer_id: int, order_id: int):
    """
    In a real deployment this hands off to email/push delivery, for now it only logs.
    """
    logger.info(f"[NOTIFICATION] Buyer {buyer_id}: order {order_id} was placed")
    return {"user_id": buyer_id, "order_id": order_id, "status": "sent"}


@celery_app.task(name="marketplace.services.notification_service.send_seller_notification_task")
def send_seller_notification_task(seller_id: int, order_id: int):
    logger.info(f"[NOTIFICATION] Seller {seller_id}: new sale in order {order_id}")
    return {"user_id": seller_id, "order_id": order_id, "status": "sent"}
