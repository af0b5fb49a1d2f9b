"""
Structured logging for GreenWalk.
Console output for the operator, rotating JSON-annotated files for later
analysis of walked tracks and greens.
"""
import logging
import logging.handlers
import time
import json
import traceback
from pathlib import Path
from typing import Optional, Dict, Any, Union
from enum import Enum, auto
from contextlib import contextmanager
from datetime import datetime
import uuid
class LogLevel(Enum):
    """Log levels, including a TRACE level below DEBUG for per-sample output."""
    TRACE = 5
    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50
class LogCategory(Enum):
    """Categories attached to every structured record."""
    SYSTEM = auto()
    GPS = auto()
    TRACK = auto()
    MAPPING = auto()
    METRICS = auto()
    USER_ACTION = auto()
    FIELD_EVENT = auto()
    EXPORT = auto()
    CONFIG = auto()
logging.addLevelName(LogLevel.TRACE.value, "TRACE")
class StructuredFormatter(logging.Formatter):
    """Formatter that appends the record's structured fields as JSON."""
    def __init__(self, include_json=True):
        super().__init__()
        self.include_json = include_json
    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).isoformat()
        basic_line = f"[{timestamp}] {record.levelname:8} {record.name}: {record.getMessage()}"
        if not self.include_json:
            return basic_line
        structured_data = {
            key: value
            for key, value in record.__dict__.items()
            if key.startswith('field_') or key in ('category', 'session_id')
        }
        if record.exc_info:
            structured_data['exception'] = {
                'type': record.exc_info[0].__name__,
                'message': str(record.exc_info[1]),
                'traceback': traceback.format_exception(*record.exc_info)
            }
        structured_data['location'] = {
            'filename': record.filename,
            'line': record.lineno,
            'function': record.funcName
        }
        json_data = json.dumps(structured_data, default=str, ensure_ascii=False)
        return f"{basic_line} | {json_data}"
def _category_name(category: Union[LogCategory, str, None]) -> str:
    if category is None:
        return 'GENERAL'
    if isinstance(category, LogCategory):
        return category.name
    return str(category).upper()
class GreenWalkLogger:
    """Application logger with a per-run session id and field-event stream."""
    def __init__(self, name: str = "greenwalk", log_dir: Optional[Path] = None,
                 console_level: int = logging.INFO):
        self.name = name
        self.session_id = str(uuid.uuid4())[:8]
        if log_dir is None:
            log_dir = Path.home() / "GreenWalk" / "logs"
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self._setup_loggers(console_level)
        self.info("GreenWalk logging initialized",
                  category=LogCategory.SYSTEM,
                  log_dir=str(self.log_dir))
    def _setup_loggers(self, console_level: int):
        """Attach console, main file, field-event and error handlers."""
        self.logger = logging.getLogger(self.name)
        self.logger.setLevel(LogLevel.TRACE.value)
        self.logger.propagate = False
        for handler in list(self.logger.handlers):
            handler.close()
        self.logger.handlers.clear()
        self.console_handler = logging.StreamHandler()
        self.console_handler.setLevel(console_level)
        self.console_handler.setFormatter(StructuredFormatter(include_json=False))
        self.logger.addHandler(self.console_handler)
        file_handler = logging.handlers.RotatingFileHandler(
            self.log_dir / f"{self.name}.log", maxBytes=10*1024*1024, backupCount=5,
            encoding="utf-8"
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(StructuredFormatter(include_json=True))
        self.logger.addHandler(file_handler)
        # Field events (starts, pivots, closures) go to their own file and are
        # written explicitly by field_event() rather than via the logger.
        self.field_handler = logging.handlers.RotatingFileHandler(
            self.log_dir / f"{self.name}_field.log", maxBytes=5*1024*1024, backupCount=3,
            encoding="utf-8"
        )
        self.field_handler.setLevel(logging.INFO)
        self.field_handler.setFormatter(StructuredFormatter(include_json=True))
        error_handler = logging.handlers.RotatingFileHandler(
            self.log_dir / f"{self.name}_errors.log", maxBytes=5*1024*1024, backupCount=5,
            encoding="utf-8"
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(StructuredFormatter(include_json=True))
        self.logger.addHandler(error_handler)
    def _extra(self, category: Union[LogCategory, str, None], fields: Dict[str, Any]) -> Dict[str, Any]:
        extra = {'session_id': self.session_id, 'category': _category_name(category)}
        for key, value in fields.items():
            if not key.startswith('_'):
                extra[f'field_{key}'] = value
        return extra
    def _log(self, level: int, message: str, category: Union[LogCategory, str, None] = None,
             exception: Optional[BaseException] = None, **kwargs):
        extra = self._extra(category, kwargs)
        if exception is not None:
            self.logger.log(level, message,
                            exc_info=(type(exception), exception, exception.__traceback__),
                            extra=extra)
        else:
            self.logger.log(level, message, extra=extra)
    def trace(self, message: str, category: Union[LogCategory, str, None] = None, **kwargs):
        """Log per-sample detail."""
        self._log(LogLevel.TRACE.value, message, category, **kwargs)
    def debug(self, message: str, category: Union[LogCategory, str, None] = None, **kwargs):
        self._log(LogLevel.DEBUG.value, message, category, **kwargs)
    def info(self, message: str, category: Union[LogCategory, str, None] = None, **kwargs):
        self._log(LogLevel.INFO.value, message, category, **kwargs)
    def warning(self, message: str, category: Union[LogCategory, str, None] = None, **kwargs):
        self._log(LogLevel.WARNING.value, message, category, **kwargs)
    def error(self, message: str, exception: Optional[BaseException] = None,
              category: Union[LogCategory, str, None] = None, **kwargs):
        self._log(LogLevel.ERROR.value, message, category, exception, **kwargs)
    def field_event(self, message: str, **kwargs):
        """Record an on-course event in the main log and the field-event file."""
        text = f"FIELD EVENT: {message}"
        self._log(LogLevel.INFO.value, text, LogCategory.FIELD_EVENT, **kwargs)
        record = self.logger.makeRecord(
            self.name, LogLevel.INFO.value, __file__, 0, text, (), None,
            extra=self._extra(LogCategory.FIELD_EVENT, kwargs)
        )
        self.field_handler.handle(record)
    def log_user_action(self, action: str, details: Optional[Dict[str, Any]] = None):
        """Log a command issued by the player."""
        log_data = {'action': action, 'timestamp': time.time()}
        if details:
            log_data.update(details)
        self._log(LogLevel.INFO.value, f"USER ACTION: {action}",
                  LogCategory.USER_ACTION, **log_data)
    def log_gps_event(self, event_type: str, latitude: Optional[float] = None,
                      longitude: Optional[float] = None, accuracy: Optional[float] = None,
                      level: int = logging.DEBUG, **kwargs):
        """Log a location-source event; per-fix updates stay at DEBUG by default."""
        gps_data = {'event_type': event_type}
        if latitude is not None:
            gps_data['latitude'] = latitude
        if longitude is not None:
            gps_data['longitude'] = longitude
        if accuracy is not None:
            gps_data['accuracy'] = accuracy
        gps_data.update(kwargs)
        self._log(level, f"GPS: {event_type}", LogCategory.GPS, **gps_data)
    def log_metrics(self, kind: str, metrics: Dict[str, Any]):
        """Log a snapshot of derived track or green metrics."""
        self._log(LogLevel.DEBUG.value, f"METRICS: {kind}", LogCategory.METRICS, **metrics)
    @contextmanager
    def timer(self, operation: str, log_result: bool = True):
        """Context manager for timing operations."""
        start_time = time.perf_counter()
        operation_id = str(uuid.uuid4())[:8]
        self.debug(f"Starting operation: {operation}",
                   category=LogCategory.SYSTEM, operation_id=operation_id)
        try:
            yield operation_id
        finally:
            duration = time.perf_counter() - start_time
            if log_result:
                self.info(f"Completed operation: {operation} in {duration:.3f}s",
                          category=LogCategory.SYSTEM, operation_id=operation_id,
                          duration=duration)
    def close(self):
        """Flush and close every handler."""
        for handler in list(self.logger.handlers) + [self.field_handler]:
            handler.flush()
            handler.close()
        self.logger.handlers.clear()
_global_logger: Optional[GreenWalkLogger] = None
def get_logger() -> GreenWalkLogger:
    """Get the global logger instance."""
    global _global_logger
    if _global_logger is None:
        _global_logger = GreenWalkLogger()
    return _global_logger
def setup_logger(name: str = "greenwalk", log_dir: Optional[Path] = None,
                 debug: bool = False) -> GreenWalkLogger:
    """Set up and return the global logger."""
    global _global_logger
    if _global_logger is not None:
        _global_logger.close()
    _global_logger = GreenWalkLogger(
        name, log_dir, console_level=logging.DEBUG if debug else logging.INFO
    )
    return _global_logger
class LoggableMixin:
    """Mixin giving a class module-prefixed access to the global logger."""
    @property
    def _module_name(self) -> str:
        return self.__class__.__name__
    @property
    def _logger(self) -> GreenWalkLogger:
        return get_logger()
    def log_trace(self, message: str, **kwargs):
        self._logger.trace(f"[{self._module_name}] {message}", **kwargs)
    def log_debug(self, message: str, **kwargs):
        self._logger.debug(f"[{self._module_name}] {message}", **kwargs)
    def log_info(self, message: str, **kwargs):
        self._logger.info(f"[{self._module_name}] {message}", **kwargs)
    def log_warning(self, message: str, **kwargs):
        self._logger.warning(f"[{self._module_name}] {message}", **kwargs)
    def log_field_event(self, message: str, **kwargs):
        self._logger.field_event(f"[{self._module_name}] {message}", **kwargs)
    def log_user_action(self, action: str, details: Optional[Dict[str, Any]] = None):
        action_details = {'module': self._module_name}
        if details:
            action_details.update(details)
        self._logger.log_user_action(action, action_details)
    def log_gps_event(self, event_type: str, latitude: Optional[float] = None,
                      longitude: Optional[float] = None, accuracy: Optional[float] = None,
                      **kwargs):
        self._logger.log_gps_event(event_type, latitude, longitude, accuracy, **kwargs)
    def log_metrics(self, kind: str, metrics: Dict[str, Any]):
        self._logger.log_metrics(f"[{self._module_name}] {kind}", metrics)
