"""
Notification sinks for alertfeed.

This module contains NotificationSink implementations for
Home Assistant, a local MQTT broker and plain logging.
"""

from .ha_sink import HANotificationSink
from .mqtt_sink import MqttNotificationSink
from .log_sink import LogNotificationSink

__all__ = ["HANotificationSink", "MqttNotificationSink", "LogNotificationSink"]
