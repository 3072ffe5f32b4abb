"""Tests for editor settings, palette and notifications."""

import unittest
import tempfile
import shutil
import sys
import os
from pathlib import Path
from unittest.mock import patch

# Add the src directory to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

from pipeline_editor.core.notifications import NotificationSink, RecordingSink, Variant
from pipeline_editor.core.palette import PALETTE, get_entry, parse_drop_payload
from pipeline_editor.core.settings import (
    SETTINGS_ENV_VAR,
    EditorSettings,
    SettingsError,
    load_settings,
)
from pipeline_editor.core.status import summarize
from pipeline_editor.graph.schema import Graph, Node, NodeKind, ValidationError


class TestSettings(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def write(self, text):
        path = Path(self.temp_dir) / "editor.yaml"
        path.write_text(text, encoding="utf-8")
        return path

    def test_defaults(self):
        """Test that settings fall back to defaults without a file or environment variable."""
        with patch.dict(os.environ, {}, clear=True):
            settings = load_settings()
        self.assertEqual(settings.export_file_name, "pipeline-workflow.json")
        self.assertEqual(settings.export_indent, 2)
        self.assertEqual(settings.log_level, "INFO")

    def test_missing_file_gives_defaults(self):
        """Test that a missing settings file yields the defaults."""
        self.assertEqual(load_settings(Path(self.temp_dir) / "nope.yaml"), EditorSettings())

    def test_load_yaml(self):
        """Test that values are read from a YAML settings file."""
        path = self.write("storage_dir: /tmp/pipes\nexport_indent: 4\nlog_level: debug\n")
        settings = load_settings(path)
        self.assertEqual(settings.storage_dir, Path("/tmp/pipes"))
        self.assertEqual(settings.export_indent, 4)
        self.assertEqual(settings.log_level, "DEBUG")

    def test_environment_variable(self):
        """Test that the environment variable points at the settings file."""
        path = self.write("export_file_name: nightly.json\n")
        with patch.dict(os.environ, {SETTINGS_ENV_VAR: str(path)}):
            self.assertEqual(load_settings().export_file_name, "nightly.json")

    def test_invalid_yaml(self):
        """Test that malformed YAML raises SettingsError."""
        path = self.write("storage_dir: [unclosed\n")
        with self.assertRaises(SettingsError):
            load_settings(path)

    def test_invalid_values(self):
        """Test that out-of-range or unknown settings raise SettingsError."""
        for text in ("log_level: chatty\n", "export_indent: -1\n", "unknown_key: 1\n", "- a list\n"):
            with self.subTest(text=text):
                with self.assertRaises(SettingsError):
                    load_settings(self.write(text))


class TestPalette(unittest.TestCase):

    def test_one_entry_per_kind(self):
        """Test that the palette lists every node kind once, in order."""
        self.assertEqual([entry.kind for entry in PALETTE], list(NodeKind))
        self.assertEqual(get_entry(NodeKind.DATA_SOURCE).label, "Data Source")

    def test_parse_drop_payload(self):
        """Test that only exact node kind names are accepted as drop payloads."""
        self.assertEqual(parse_drop_payload("aggregate"), NodeKind.AGGREGATE)
        for payload in ("", "Aggregate", "sink", None, 3):
            with self.subTest(payload=payload):
                self.assertIsNone(parse_drop_payload(payload))


class TestStatus(unittest.TestCase):

    def test_texts(self):
        """Test that the status text reflects emptiness and the error count."""
        self.assertEqual(summarize(Graph(), []).text, "Empty Pipeline")
        graph = Graph(nodes=(Node(id="a", type="filter"),))
        self.assertEqual(summarize(graph, []).text, "Valid Pipeline")
        error = ValidationError(field="x", message="bad")
        self.assertEqual(summarize(graph, [error]).text, "1 Error")
        self.assertEqual(summarize(graph, [error, error]).text, "2 Errors")


class TestNotifications(unittest.TestCase):

    def test_base_sink_logs(self):
        """Test that the base sink logs destructive notifications as warnings."""
        with self.assertLogs("pipeline_editor.core.notifications", level="INFO") as logs:
            NotificationSink().notify("Workflow Exported", "done")
            NotificationSink().notify("Import Error", "bad file", Variant.DESTRUCTIVE)
        self.assertEqual(len(logs.records), 2)
        self.assertEqual(logs.records[1].levelname, "WARNING")

    def test_recording_sink(self):
        """Test that the recording sink keeps the last notification."""
        sink = RecordingSink()
        self.assertIsNone(sink.last)
        sink.notify("Saved", "ok")
        self.assertEqual(sink.last.title, "Saved")
        self.assertEqual(sink.last.variant, Variant.DEFAULT)


if __name__ == "__main__":
    unittest.main()
