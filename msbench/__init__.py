"""
msbench package initialization.

Measures the startup latency of the MethodScript jar and reports the mean to
a telemetry backend. The run pipeline is exposed through CLI, HTTP and
scheduled entry points.
"""

__all__ = [
    "api",
    "cli",
    "fetch",
    "logs",
    "runner",
    "telemetry",
]
