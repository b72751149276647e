"""Data input/output helpers (captures and CSV tables).

Utility modules here keep disk-level concerns isolated from the pipeline:
- :mod:`capture_loader` reads/writes JSON-lines headset captures.
- :mod:`csv_writer` emits band-power tables produced by a replay.
"""
