"""
Gunicorn configuration for production deployment.

Usage:
    gunicorn -c gunicorn.conf.py wsgi:app

Each worker process opens its own pymongo client when wsgi.py builds the app.
"""

import multiprocessing
import os

bind = os.environ.get('GUNICORN_BIND', '0.0.0.0:8000')

# 2 * cores + 1, capped; bcrypt is the only CPU-heavy step.
workers = int(os.environ.get('GUNICORN_WORKERS', min(multiprocessing.cpu_count() * 2 + 1, 8)))
worker_class = 'sync'

# Comfortably above MONGO_TIMEOUT_MS so store timeouts surface as 500s first.
timeout = 30
graceful_timeout = 10
keepalive = 2

max_requests = 1000
max_requests_jitter = 50

limit_request_line = 8190
limit_request_fields = 50
limit_request_field_size = 8190

server_software = ''

# Access log excludes cookies, so the session token never reaches it.
accesslog = '-'
errorlog = '-'
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" %(L)s'
loglevel = os.environ.get('LOG_LEVEL', 'info')

proc_name = 'blog-users'

forwarded_allow_ips = os.environ.get('FORWARDED_ALLOW_IPS', '127.0.0.1')
