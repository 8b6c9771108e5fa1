import multiprocessing
import os

bind = os.getenv("GUNICORN_BIND", "unix:/var/www/ccsa/registry-backend/gunicorn.sock")
workers = int(os.getenv("GUNICORN_WORKERS", multiprocessing.cpu_count() * 2 + 1))
worker_class = "sync"
worker_tmp_dir = "/dev/shm"
max_requests = 1000
max_requests_jitter = 100
# Certificate PDFs and the full farm map can take a while on large registries
timeout = int(os.getenv("GUNICORN_TIMEOUT", 180))
keepalive = 5

# Logging
accesslog = os.getenv("GUNICORN_ACCESS_LOG", "/var/log/registry-backend/access.log")
errorlog = os.getenv("GUNICORN_ERROR_LOG", "/var/log/registry-backend/error.log")
loglevel = os.getenv("GUNICORN_LOG_LEVEL", "info")
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'

proc_name = "registry-backend"

daemon = False
pidfile = "/var/run/registry-backend/gunicorn.pid"
user = "deploy"
group = "deploy"
umask = 0o007

raw_env = ["DJANGO_SETTINGS_MODULE=core.settings"]


def when_ready(server):
    server.log.info("Registry API ready, spawning %s workers", workers)


def post_fork(server, worker):
    server.log.info("Worker spawned (pid: %s)", worker.pid)


def worker_abort(worker):
    worker.log.warning("Worker %s aborted, likely a request exceeded %ss", worker.pid, timeout)
