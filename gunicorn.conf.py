"""
Gunicorn configuration for the Auth Test App
"""
import os

# Server socket
bind = os.getenv("AUTHLAB_BIND", "127.0.0.1:3000")
backlog = 2048

# Worker processes
# Workers share nothing but the database; keep one when running on in-memory SQLite
workers = int(os.getenv("AUTHLAB_WORKERS", "1"))
worker_class = "uvicorn.workers.UvicornWorker"
timeout = 60
keepalive = 5

# The app is built by a factory so settings are read at worker start
wsgi_app = "authlab.main:create_app()"

# Logging
accesslog = "-"
errorlog = "-"
loglevel = "info"
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'

# Process naming
proc_name = "authlab"

# Server mechanics
daemon = False
capture_output = True
enable_stdio_inheritance = True

# Graceful timeout
graceful_timeout = 30


def on_starting(server):
    """Install the app's console and rotating-file logging in the master; workers inherit it."""
    from authlab.core.config import get_settings
    from authlab.main import configure_logging

    configure_logging(get_settings())
