"""
Application logger with a host message queue and an error callback
"""
import queue
import logging
from datetime import datetime

from app_config import APP_NAME


class AppLogger:
    """Logger that mirrors messages into a queue for host applications"""

    def __init__(self, name=APP_NAME):
        self.message_queue = queue.Queue()
        self.error_callback = None  # Host hook for error messages (e.g. a message box)

        # Dedicated named logger; handlers come from logging_config.setup_logging()
        self.file_logger = logging.getLogger(name)
        self.file_logger.setLevel(logging.DEBUG)

    def set_error_callback(self, callback):
        """Set callback for error messages"""
        self.error_callback = callback

    def log(self, message, level="INFO"):
        """Add a log message to the queue AND the logging system"""
        timestamp = datetime.now().strftime('%H:%M:%S')
        formatted_message = f"[{timestamp}] {level}: {message}"

        # Queue for host
        self.message_queue.put(formatted_message)

        log_level = logging.WARNING if level == "WARN" else getattr(logging, level, logging.INFO)
        self.file_logger.log(log_level, message)

        if level == "ERROR" and self.error_callback:
            try:
                self.error_callback(message)
            except Exception as e:
                self.file_logger.warning(f"Error in error callback: {e}")

    def info(self, message):
        """Log info message"""
        self.log(message, "INFO")

    def error(self, message):
        """Log error message"""
        self.log(message, "ERROR")

    def warning(self, message):
        """Log warning message"""
        self.log(message, "WARN")

    def debug(self, message):
        """Log debug message"""
        self.log(message, "DEBUG")

    def get_messages(self):
        """Get all queued messages (non-blocking)"""
        messages = []
        while not self.message_queue.empty():
            try:
                messages.append(self.message_queue.get_nowait())
            except queue.Empty:
                break
        return messages


# Singleton pattern to ensure only one logger instance
_logger_instance = None

def get_app_logger():
    """Get or create the singleton logger instance"""
    global _logger_instance
    if _logger_instance is None:
        _logger_instance = AppLogger()
    return _logger_instance

# Global logger instance (singleton)
app_logger = get_app_logger()
