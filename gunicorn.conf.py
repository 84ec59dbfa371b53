"""
Gunicorn configuration for Church Directory production deployment.

Usage:
    gunicorn church_directory.main:app -c gunicorn.conf.py

The settings cache defaults to KV_BACKEND=database, shared by all workers.
KV_BACKEND=memory is per-process and only safe with workers = 1.
"""

import multiprocessing

# Bind to all interfaces on port 8000
bind = "0.0.0.0:8000"

# Worker processes: CPU cores * 2 + 1 (Gunicorn recommendation)
workers = multiprocessing.cpu_count() * 2 + 1

# Use Uvicorn's ASGI worker for FastAPI
worker_class = "uvicorn.workers.UvicornWorker"

# Request timeout (seconds)
timeout = 30

# Keep-alive connections (seconds)
keepalive = 5

# Logging
accesslog = "-"  # stdout
errorlog = "-"   # stderr
loglevel = "info"
