"""Demo HTTP service: hello world, Redis-backed set/get, probes and Prometheus metrics."""

__version__ = "0.1.0"
