"""
Event sourcing core for formation aggregates.

This package provides:
- The event record (storage shape) and the closed set of event kinds
- Typed domain events with lossless record conversion
- The append-only event store interface and its in-memory implementation
- The Formation aggregate and the repository that folds events into it
"""
