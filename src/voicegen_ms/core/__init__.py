"""
Core Infrastructure for voicegen-ms.

This package provides foundational components:
    - config.py: Startup configuration loading and validation
    - logging/: Structured logging with numeric levels
    - metrics.py: Prometheus metrics collection
"""
