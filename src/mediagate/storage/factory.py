# SPDX-License-Identifier: MIT
"""Storage factories.

Local storage is always available. The image bed mirror and the WebDAV mirror
are enabled only when all of their settings are present.
"""

from __future__ import annotations

import logging

from ..config import Settings
from .imgbed import ImgBedMirror
from .local import LocalStorageBackend
from .protocol import RemoteMirror, StorageBackend
from .webdav import WebDAVMirror

logger = logging.getLogger("mediagate")


def get_storage(settings: Settings) -> StorageBackend:
    """Return the local artifact store rooted at ``settings.output_dir``."""
    return LocalStorageBackend(settings)


def get_mirror(settings: Settings) -> RemoteMirror | None:
    """Return the remote artifact mirror, or ``None`` when not configured.

    Configuration
    -------------
    ``CF_IMGBED_UPLOAD_URL`` and ``CF_IMGBED_API_KEY`` must both be set.
    """
    url, key = settings.cf_imgbed_upload_url, settings.cf_imgbed_api_key
    if not (url and key):
        return None
    return ImgBedMirror(url, key)


def get_webdav(settings: Settings) -> WebDAVMirror | None:
    """Return the WebDAV mirror, or ``None`` when not configured."""
    url, username, password = settings.webdav_url, settings.webdav_username, settings.webdav_password
    if not (url and username and password):
        logger.debug("WebDAV configuration missing, uploads disabled")
        return None
    return WebDAVMirror(url, username, password)
