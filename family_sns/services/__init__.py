"""Service layer modules."""

# Import service modules (not individual functions) for cleaner access
from family_sns.services import (  # noqa: F401
    auth_service,
    media_service,
    message_service,
    notification_service,
    post_service,
    realtime_events,
    user_service,
)
