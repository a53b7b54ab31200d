"""Platform gate: Things 3 only exists on macOS."""

import logging
import sys

logger = logging.getLogger(__name__)


def is_platform_supported(force: bool = False) -> bool:
    """Return True when the Things database can exist on this machine."""
    if force:
        return True
    supported = sys.platform == "darwin"
    if not supported:
        logger.info("Things Logbook sync disabled: platform %s not supported", sys.platform)
    return supported
