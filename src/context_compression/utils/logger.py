import logging
import os
from logging.handlers import TimedRotatingFileHandler
from typing import Optional

LOG_DIR_ENV = 'CONTEXT_COMPRESSION_LOG_DIR'


class Logger:
    """封装压缩模块日志配置，允许区分文件与控制台级别

    未指定日志目录（参数或 CONTEXT_COMPRESSION_LOG_DIR）时只输出到控制台。
    """

    def __init__(
        self,
        name: str = 'context-compression',
        level: int = logging.DEBUG,
        console_level: Optional[int] = logging.INFO,
        log_dir: Optional[str] = None,
    ) -> None:
        self.log_dir = log_dir or os.getenv(LOG_DIR_ENV)
        self.file_level = level
        self.console_level = console_level if console_level is not None else level

        self.logger = logging.getLogger(name)
        self.logger.setLevel(min(self.file_level, self.console_level))
        self.logger.propagate = False

        if not self.logger.handlers:
            self._setup_handlers()

    def _setup_handlers(self) -> None:
        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S',
        )

        if self.log_dir:
            os.makedirs(self.log_dir, exist_ok=True)
            file_handler = TimedRotatingFileHandler(
                filename=os.path.join(self.log_dir, 'context-compression.log'),
                when='midnight',
                interval=1,
                backupCount=30,
                encoding='utf-8',
            )
            file_handler.setLevel(self.file_level)
            file_handler.setFormatter(formatter)
            file_handler.suffix = '%Y-%m-%d'
            self.logger.addHandler(file_handler)

        console_handler = logging.StreamHandler()
        console_handler.setLevel(self.console_level)
        console_handler.setFormatter(formatter)
        self.logger.addHandler(console_handler)

    def debug(self, message: str) -> None:
        self.logger.debug(message, stacklevel=2)

    def info(self, message: str) -> None:
        self.logger.info(message, stacklevel=2)

    def warning(self, message: str) -> None:
        self.logger.warning(message, stacklevel=2)

    def error(self, message: str, exc_info: bool = False) -> None:
        self.logger.error(message, exc_info=exc_info, stacklevel=2)

    def critical(self, message: str) -> None:
        self.logger.critical(message, stacklevel=2)


logger = Logger()


def get_logger(
    name: str = 'context-compression',
    level: int = logging.DEBUG,
    console_level: Optional[int] = logging.INFO,
    log_dir: Optional[str] = None,
) -> Logger:
    """返回具备自定义级别的日志器实例"""
    return Logger(name=name, level=level, console_level=console_level, log_dir=log_dir)
