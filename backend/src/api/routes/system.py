"""System routes for logs and diagnostics."""

import logging
from collections import deque
from typing import List, Dict, Any
from datetime import datetime

from fastapi import APIRouter
from pydantic import BaseModel

from ...services.config import get_config

router = APIRouter()

# Global in-memory log buffer
LOG_BUFFER: deque = deque(maxlen=100)

RESERVED_RECORD_KEYS = {
    'args', 'asctime', 'created', 'exc_info', 'exc_text', 'filename',
    'funcName', 'levelname', 'levelno', 'lineno', 'module',
    'msecs', 'message', 'msg', 'name', 'pathname', 'process',
    'processName', 'relativeCreated', 'stack_info', 'taskName', 'thread', 'threadName',
}


class LogEntry(BaseModel):
    timestamp: str
    level: str
    logger: str
    message: str
    extra: Dict[str, Any]


class StatusResponse(BaseModel):
    sheets_configured: bool
    sheet_name: str
    profile_cache_seconds: float


class MemoryLogHandler(logging.Handler):
    """Custom handler to capture logs into memory."""
    def emit(self, record):
        try:
            msg = self.format(record)
            extra = {k: repr(v) for k, v in record.__dict__.items()
                     if k not in RESERVED_RECORD_KEYS}

            entry = {
                "timestamp": datetime.fromtimestamp(record.created).isoformat(),
                "level": record.levelname,
                "logger": record.name,
                "message": msg,
                "extra": extra
            }
            LOG_BUFFER.append(entry)
        except Exception:
            self.handleError(record)


memory_handler = MemoryLogHandler()
memory_handler.setFormatter(logging.Formatter('%(message)s'))


def install_log_capture() -> None:
    """Attach the memory handler to the root logger once and allow INFO."""
    root = logging.getLogger()
    if memory_handler not in root.handlers:
        root.addHandler(memory_handler)
    if root.level > logging.INFO or root.level == logging.NOTSET:
        root.setLevel(logging.INFO)


@router.get("/api/system/logs", response_model=List[LogEntry])
async def get_logs():
    """Retrieve recent system logs."""
    return list(LOG_BUFFER)


@router.get("/api/system/status", response_model=StatusResponse)
async def get_status():
    """Report whether the profile sheet is configured (never the credentials)."""
    config = get_config()
    return StatusResponse(
        sheets_configured=config.sheets_configured,
        sheet_name=config.sheet_name,
        profile_cache_seconds=config.profile_cache_seconds,
    )
