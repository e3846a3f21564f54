# Gunicorn configuration file for PawCare Hub
import os

# Server socket
bind = f"0.0.0.0:{os.getenv('PORT', '3001')}"
backlog = 2048

# Worker processes. The reminder scheduler lives inside each worker, so keep
# one worker unless SCHEDULER_ENABLED is turned off here and the scan runs
# from its own process.
workers = int(os.getenv('GUNICORN_WORKERS', '1'))
worker_class = "sync"
worker_connections = 1000
timeout = 30
keepalive = 2
max_requests = 1000
max_requests_jitter = 50

preload_app = True

# Logging
accesslog = "-"
errorlog = "-"
loglevel = "info"
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'

# Process naming
proc_name = "pawcare_hub"

# Server mechanics
daemon = False
tmp_upload_dir = None
