# enrollment_service/middleware.py
import time
import logging
import threading
from datetime import datetime, timezone
from fastapi import Request
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("enrollment_service")

_log_lock = threading.Lock()


def append_request_line(log_file: str, method: str, url: str):
    """Append one ``timestamp - METHOD url`` line to the request log"""
    timestamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    with _log_lock:
        with open(log_file, "a", encoding="utf-8") as f:
            f.write(f"{timestamp} - {method} {url}\n")


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to record every request in the request log and time responses"""

    def __init__(self, app, log_file: str):
        super().__init__(app)
        self.log_file = log_file

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        url = request.url.path
        if request.url.query:
            url = f"{url}?{request.url.query}"
        try:
            await run_in_threadpool(append_request_line, self.log_file, request.method, url)
        except OSError as e:
            logger.error(f"Could not write request log {self.log_file}: {e}")

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            logger.error(
                f"Exception: {request.method} {url} | "
                f"Error: {str(e)} | "
                f"Process time: {process_time:.3f}s"
            )
            raise

        process_time = time.time() - start_time
        logger.info(
            f"Response: {request.method} {url} | "
            f"Status: {response.status_code} | "
            f"Process time: {process_time:.3f}s"
        )

        return response
