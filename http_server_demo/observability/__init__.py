"""Observability helpers: structlog JSON logging, Prometheus metrics, and the
request middleware that ties them together.

Metrics are held per application (see ``ServerMetrics``) rather than in module
globals, so each test can build a fresh registry.
"""
