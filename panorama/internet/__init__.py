"""Internet domain — HTTP reachability checks."""

from panorama.internet.monitor import ALERT_GROUP_INTERNET, OnlineMode, OnlineMonitor
from panorama.internet.probe import HttpProbe

__all__ = [
    "ALERT_GROUP_INTERNET",
    "HttpProbe",
    "OnlineMode",
    "OnlineMonitor",
]
