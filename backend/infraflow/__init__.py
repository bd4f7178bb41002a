"""
InfraFlow diagram mutation and calibration engine.

Validates LLM operation payloads, applies them to infrastructure specs,
diffs spec snapshots and calibrates anti-pattern severities from feedback.
"""

__version__ = "0.5.0"
