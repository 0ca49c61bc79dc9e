"""
Gunicorn configuration for Zento.
All settings are driven from environment variables for container deployment.
"""

from __future__ import annotations

import logging
import multiprocessing
import os

# ===== Server Binding =====
bind = os.environ.get("GUNICORN_BIND", "0.0.0.0:8000")
wsgi_app = "zento.wsgi:app"

# ===== Worker Settings =====
# Threaded workers: concurrent requests share one process, one engine pool and
# one last-seen touch executor per worker.
worker_class = os.environ.get("GUNICORN_WORKER_CLASS", "gthread")
workers = int(os.environ.get("GUNICORN_WORKERS", str(multiprocessing.cpu_count() * 2 + 1)))
threads = int(os.environ.get("GUNICORN_THREADS", "4"))
max_requests = int(os.environ.get("GUNICORN_MAX_REQUESTS", "10000"))
max_requests_jitter = int(os.environ.get("GUNICORN_MAX_REQUESTS_JITTER", "1000"))

# ===== Timeout Settings =====
# A killed worker rolls back any in-flight guest merge with its connection.
timeout = int(os.environ.get("GUNICORN_TIMEOUT", "60"))
graceful_timeout = int(os.environ.get("GUNICORN_GRACEFUL_TIMEOUT", "30"))
keepalive = int(os.environ.get("GUNICORN_KEEPALIVE", "5"))

# ===== Logging =====
accesslog = os.environ.get("GUNICORN_ACCESSLOG", "-")
errorlog = os.environ.get("GUNICORN_ERRORLOG", "-")
loglevel = os.environ.get("GUNICORN_LOGLEVEL", "info")
capture_output = True

# Connection pools must not be shared across forked workers.
preload_app = False

forwarded_allow_ips = os.environ.get("GUNICORN_FORWARDED_ALLOW_IPS", "*")
proc_name = os.environ.get("GUNICORN_PROC_NAME", "zento")


def on_starting(server):
    logger = logging.getLogger(__name__)
    logger.info(
        "Gunicorn starting: workers=%s, threads=%s, worker_class=%s, timeout=%ss",
        workers,
        threads,
        worker_class,
        timeout,
    )


def worker_abort(worker):
    logger = logging.getLogger(__name__)
    logger.warning("Worker %s timed out (>%ss), aborting", worker.pid, timeout)
