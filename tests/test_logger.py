"""日志封装单元测试"""

import importlib
import logging

from context_compression.utils.logger import LOG_DIR_ENV, get_logger


class TestLogger:
    """Logger 测试"""

    def test_console_only_without_log_dir(self, monkeypatch):
        """测试：未指定目录时只有控制台输出"""
        monkeypatch.delenv(LOG_DIR_ENV, raising=False)

        log = get_logger(name="cc-test-console")

        assert len(log.logger.handlers) == 1
        assert isinstance(log.logger.handlers[0], logging.StreamHandler)

    def test_file_handler_with_log_dir(self, tmp_path):
        """测试：指定目录时写入日志文件"""
        log = get_logger(name="cc-test-file", log_dir=str(tmp_path / "logs"))

        log.info("压缩完成")
        for handler in log.logger.handlers:
            handler.flush()

        log_file = tmp_path / "logs" / "context-compression.log"
        assert log_file.exists()
        assert "压缩完成" in log_file.read_text(encoding="utf-8")

    def test_module_exposes_logger_instance(self):
        """测试：模块只导出 logger 实例与 get_logger"""
        logger_module = importlib.import_module("context_compression.utils.logger")

        assert isinstance(logger_module.logger, logger_module.Logger)
        for name in ("debug", "info", "warning", "error", "critical"):
            assert not hasattr(logger_module, name)
