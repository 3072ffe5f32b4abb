"""Editor support: settings, notifications, palette and status summary."""

from pipeline_editor.core.settings import EditorSettings, SettingsError, load_settings, configure_logging
from pipeline_editor.core.notifications import Notification, NotificationSink, RecordingSink, Variant
from pipeline_editor.core.palette import PALETTE, PaletteEntry, parse_drop_payload
from pipeline_editor.core.status import PipelineStatus, summarize
__all__ = [
    "EditorSettings",
    "SettingsError",
    "load_settings",
    "configure_logging",
    "Notification",
    "NotificationSink",
    "RecordingSink",
    "Variant",
    "PALETTE",
    "PaletteEntry",
    "parse_drop_payload",
    "PipelineStatus",
    "summarize",
]
