# Gunicorn config: build the index once in the master, then fork workers.
# Run with: gunicorn -c gunicorn_conf.py "app:create_app()"
import os

bind = f"0.0.0.0:{os.environ.get('PORT', '8080')}"
workers = int(os.environ.get('WEB_CONCURRENCY', '4'))
worker_class = "gthread"
threads = int(os.environ.get('GUNICORN_THREADS', '8'))
preload_app = True


def post_fork(server, worker):
    try:
        # import here so module state is the same as gunicorn-loaded app
        import app
        app.init_worker()
        server.log.info(f"post_fork: initialized worker pid={worker.pid}")
    except Exception as e:
        server.log.error(f"post_fork: failed to init worker: {e}")
