# SPDX-License-Identifier: MIT
"""Feature detection for optional mediagate capabilities.

Optional features are switched on by configuration: each is enabled only when
all of its settings are present.
"""

import logging

from .config import Settings
from .notify import any_channel_configured

logger = logging.getLogger("mediagate")


def check_video_available(settings: Settings) -> bool:
    """Check if video generation can run.

    Requires SILICONFLOW_API_KEY and at least one notification channel, since
    results are only ever delivered through notifications.
    """
    return bool(settings.siliconflow_api_key) and any_channel_configured(settings)


def get_enabled_features(settings: Settings) -> dict[str, bool]:
    """Get a dictionary of optional features and whether they are enabled.

    Returns:
        Dict mapping feature name to enabled status
    """
    return {
        "image_bed_mirror": settings.mirror_configured,
        "webdav_upload": settings.webdav_configured,
        "onebot_notifications": settings.onebot_configured,
        "telegram_notifications": settings.telegram_configured,
        "video": check_video_available(settings),
    }


def log_features(settings: Settings) -> None:
    for name, enabled in get_enabled_features(settings).items():
        logger.info("%s: %s", name, "enabled" if enabled else "disabled (configuration missing)")
