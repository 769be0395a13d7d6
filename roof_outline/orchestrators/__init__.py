"""Orchestration of the automated outline workflow.

- segmentation: Detector chain with confidence gating and fallback
- outline_pipeline: End-to-end coordinator
  1. Resolve site → bounding box
  2. Fetch and store the aerial image
  3. Segment → validate → drift-check
  4. Persist accepted structures + roof summary
"""
