"""
Gunicorn configuration for the marketplace API
Run with: gunicorn gigmarket.main:app -c gunicorn.conf.py
"""
import os

# Server socket
bind = os.getenv("GUNICORN_BIND", "0.0.0.0:8000")
backlog = 2048

# Worker processes
# Every worker runs its own background scheduler; jobs claim work in the
# database, so several workers are safe.
workers = int(os.getenv("GUNICORN_WORKERS", 2))
worker_class = "uvicorn.workers.UvicornWorker"

# Worker lifecycle
max_requests = 1000
max_requests_jitter = 100

# Timeouts (remote profile inspection runs in the scheduler, not in requests)
timeout = int(os.getenv("GUNICORN_TIMEOUT", 30))
keepalive = 5
graceful_timeout = 30  # scheduler shutdown happens in the app lifespan

proc_name = "gigmarket_api"
daemon = False  # Docker handles this

# Logging
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()
access_log_format = '%(h)s "%(r)s" %(s)s %(b)s %(D)sus'


def when_ready(server):
    server.log.info(f"🚀 Marketplace API ready with {workers} workers on {bind}")


def worker_exit(server, worker):
    server.log.info(f"🛑 Worker {worker.pid} exited")
