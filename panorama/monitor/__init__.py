"""Monitoring engine — state machines, probes, notifier and supervision."""

from panorama.monitor.base import BaseMonitor
from panorama.monitor.factory import create_notifier, create_sink
from panorama.monitor.notifier import Notifier, build_request
from panorama.monitor.phases import PhaseClassifier, validate_phases
from panorama.monitor.probe import ProbeEvaluator
from panorama.monitor.sinks import DiscordWebhookSink, NotificationSink, NotifySendSink
from panorama.monitor.state import DomainStateMachine, PhaseTransition
from panorama.monitor.supervisor import Supervisor
from panorama.monitor.types import NotificationRequest

__all__ = [
    "BaseMonitor",
    "DiscordWebhookSink",
    "DomainStateMachine",
    "NotificationRequest",
    "NotificationSink",
    "Notifier",
    "NotifySendSink",
    "PhaseClassifier",
    "PhaseTransition",
    "ProbeEvaluator",
    "Supervisor",
    "build_request",
    "create_notifier",
    "create_sink",
    "validate_phases",
]
