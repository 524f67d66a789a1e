"""
Notifications API Endpoints.
"""

from typing import List

from fastapi import APIRouter, Depends

from api.dependencies import get_platform
from api.models import NotificationResponse
from services.platform import Platform

router = APIRouter()


@router.get("/notifications", response_model=List[NotificationResponse], summary="List Notifications")
def list_notifications(platform: Platform = Depends(get_platform)):
    return [NotificationResponse.from_domain(n) for n in platform.notifications.list_notifications()]


@router.post("/notifications/{notification_id}/read", status_code=204, summary="Mark Notification Read")
def mark_notification_read(notification_id: str, platform: Platform = Depends(get_platform)):
    platform.notifications.mark_read(notification_id)


@router.post("/notifications/read-all", status_code=204, summary="Mark All Notifications Read")
def mark_all_notifications_read(platform: Platform = Depends(get_platform)):
    platform.notifications.mark_all_read()
