#!/usr/bin/env python
"""Example building, validating and exporting a small pipeline.

This example drives the editing facade the way a canvas would: nodes are
dropped from the palette, connected, configured and finally exported.
"""

import sys
import os
import argparse

# Add the src directory to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

from pipeline_editor import PipelineEditor, load_settings, configure_logging


def main():
    """Build the example pipeline."""
    parser = argparse.ArgumentParser(description="Build an example pipeline")
    parser.add_argument("--settings", help="Path to a YAML settings file")
    parser.add_argument("--output", help="Where to write the exported document")
    parser.add_argument("--cycle", action="store_true", help="Close the pipeline into a cycle")
    args = parser.parse_args()

    settings = load_settings(args.settings)
    configure_logging(settings)
    editor = PipelineEditor(settings=settings)

    print("=== Building Pipeline ===\n")
    source = editor.drop_payload("data-source", {"x": 0, "y": 100})
    cleanup = editor.drop_payload("filter", {"x": 250, "y": 100})
    summary = editor.drop_payload("aggregate", {"x": 500, "y": 100})
    sink = editor.drop_payload("output", {"x": 750, "y": 100})

    editor.connect(source.id, cleanup.id)
    editor.connect(cleanup.id, summary.id)
    editor.connect(summary.id, sink.id)
    if args.cycle:
        editor.connect(sink.id, source.id)

    print(f"Status before configuration: {editor.status().text}")
    for error in editor.current_validation():
        print(f"  - {error}")

    editor.configure(source.id, {"connectionString": "postgresql://localhost/shop", "tableName": "orders"})
    editor.configure(cleanup.id, {"conditions": [{"field": "amount", "operator": "greater", "value": "0"}]})
    editor.configure(summary.id, {
        "groupBy": ["region"],
        "aggregations": [{"field": "amount", "function": "sum", "outputName": "total_amount"}],
    })
    editor.configure(sink.id, {"destination": "analytics.daily_totals"})

    print(f"\nStatus after configuration: {editor.status().text}")
    for error in editor.current_validation():
        print(f"  - {error}")

    path = editor.export_to_file(args.output)
    print(f"\nExported to {path}")


if __name__ == "__main__":
    main()
