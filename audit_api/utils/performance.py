"""
Process snapshot for the ``/health`` endpoint.
"""

from __future__ import annotations

import threading

import psutil

BYTES_PER_MB = 1024 * 1024


def collect_process_snapshot(last_request_ms: float) -> dict:
    """
    Build the ``process`` block of the health response.

    Memory is the resident set size of this worker, as reported by psutil.

    Returns
    -------
    dict
        ``{"last_request_time": "...", "memory": "...", "threads": int}``
    """
    rss_mb = psutil.Process().memory_info().rss / BYTES_PER_MB
    return {
        "last_request_time": f"{last_request_ms:.4f} ms",
        "memory": f"{rss_mb:.2f} MB",
        "threads": threading.active_count(),
    }
