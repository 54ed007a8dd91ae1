from typing import List

from fastapi import APIRouter, Depends

from linkstats_app.dependencies import get_notifier
from linkstats_app.notifications import Notification, NotificationCenter

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=List[Notification])
def list_notifications(notifier: NotificationCenter = Depends(get_notifier)):
    """Notifications that have not expired yet, oldest first"""
    return notifier.active()
