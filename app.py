# app.py

import os
import sys
import logging
from flask import Flask, Response, jsonify, request

from line_index import IndexConfig, LineIndex, LineIndexError

server_logger = logging.getLogger('server')
access_logger = logging.getLogger('access')


def setup_loggers(log_dir="logs"):
    """Configure server and access loggers (file + console)."""
    os.makedirs(log_dir, exist_ok=True)
    formatter = logging.Formatter("%(asctime)s [%(levelname)s] [PID:%(process)d] %(message)s")

    # clear handlers to avoid duplicate output
    for logger in (server_logger, access_logger):
        for handler in list(logger.handlers):
            handler.close()
        logger.handlers.clear()

    # server logger -> file + console
    server_logger.setLevel(logging.INFO)
    server_logger.propagate = False

    server_file_handler = logging.FileHandler(os.path.join(log_dir, "server.log"))
    server_file_handler.setFormatter(formatter)
    server_logger.addHandler(server_file_handler)

    server_console_handler = logging.StreamHandler()
    server_console_handler.setFormatter(formatter)
    server_logger.addHandler(server_console_handler)

    # access logger -> file only
    access_logger.setLevel(logging.INFO)
    access_logger.propagate = False

    access_file_handler = logging.FileHandler(os.path.join(log_dir, "access.log"))
    access_file_handler.setFormatter(formatter)
    access_logger.addHandler(access_file_handler)


def load_line_index():
    """
    Build the engine from the environment. Exits if DATA_FILE_PATH is not set,
    points outside the working directory, or cannot be indexed.
    """
    filepath_to_serve = os.environ.get('DATA_FILE_PATH')
    if not filepath_to_serve:
        print("CRITICAL ERROR: DATA_FILE_PATH environment variable not set. Aborting.", file=sys.stderr, flush=True)
        sys.exit(1)

    setup_loggers()
    server_logger.info(f"Master process (PID: {os.getpid()}) starting app configuration...")

    # prevent serving files outside current working dir
    requested_path = os.path.realpath(filepath_to_serve)
    base_dir = os.path.realpath(os.getcwd())
    if os.path.commonpath([requested_path, base_dir]) != base_dir:
        server_logger.critical(f"SECURITY ALERT: Path Traversal Attempt: Cannot serve files outside of '{base_dir}'.")
        sys.exit(1)

    try:
        config = IndexConfig.from_env()
        line_index = LineIndex(requested_path, config)
    except LineIndexError as e:
        server_logger.critical(f"Cannot start: {e}. Shutting down.")
        sys.exit(1)

    server_logger.info(f"Master configuration complete. {line_index.line_count} lines indexed.")
    return line_index


def create_app(line_index=None):
    """
    Factory used by Gunicorn (`app:create_app()`). The index is built once,
    before workers fork, and every route closes over it.
    """
    if line_index is None:
        line_index = load_line_index()

    app = Flask(__name__)

    @app.route("/", methods=["GET"])
    def status():
        summary = line_index.describe()
        summary["status"] = "ok"
        return jsonify(summary)

    @app.route("/lines/<line_number>", methods=["GET"])
    def get_line(line_number):
        # plain ASCII digits only: int() would also take "+1", "1_0", " 1" and other scripts
        if not (line_number.isascii() and line_number.isdigit()) or int(line_number) < 1:
            access_logger.warning(f"{request.remote_addr} INVALID_LINE_NUMBER '{line_number}'")
            return Response("Invalid line index. Must be a positive integer.\n", status=400)

        n = int(line_number)

        data = line_index.get_line(n)
        if data is None:
            access_logger.warning(f"{request.remote_addr} LINE_OUT_OF_RANGE {n} (total: {line_index.line_count})")
            return Response("Requested line is beyond the end of the file.\n", status=413)

        access_logger.info(f"{request.remote_addr} GET /lines/{n} -> 200 (len={len(data)})")
        return Response(data.decode("ascii", errors="replace"), status=200, mimetype="text/plain")

    @app.errorhandler(404)
    def not_found_error(error):
        access_logger.warning(f"Request to non-existent route from {request.remote_addr}")
        return Response("Not Found. Use GET /lines/<line_number>\n", status=404)

    return app


def init_worker():
    """Worker post-fork init: reconfigure loggers. The index needs no per-worker state."""
    setup_loggers()
    server_logger.info(f"Worker PID {os.getpid()} initializing...")
