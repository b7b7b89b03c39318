"""日志（loguru + rich）

三种控制台模式（LOG_MODE）:
- simple: [module] message
- detailed: 时间、级别、调用位置与上下文字段，异常使用 rich 渲染
- json: 每行一个 JSON 对象，适合日志采集

LOG_FILE 非空时额外写入按大小轮转的 JSON 文件。

    from app.core.logging import get_logger

    logger = get_logger("services.consultation")
    logger.info("咨询回复已保存", session_id="abc", tokens_used=120)
"""

import json
import sys
import traceback
from pathlib import Path
from typing import Any

from loguru import logger as _loguru
from rich.console import Console
from rich.traceback import install as install_rich_traceback

from app.core.config import settings
from app.core.paths import get_project_root

LOG_MODES = ("simple", "detailed", "json")

_COLORS = {
    "DEBUG": "dim cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold red",
}

_configured = False


def _escape(text: str) -> str:
    """转义 loguru 的颜色标记与 format 占位符"""
    return text.replace("<", "\\<").replace("{", "{{").replace("}", "}}")


def _plain_value(value: Any, depth: int = 0) -> Any:
    """上下文字段转为 JSON 友好的值"""
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if depth >= 3:
        return repr(value)
    if isinstance(value, dict):
        return {str(k): _plain_value(v, depth + 1) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_plain_value(v, depth + 1) for v in value]
    if hasattr(value, "model_dump"):
        return _plain_value(value.model_dump(), depth + 1)
    text = repr(value)
    return text if len(text) <= 500 else text[:500] + "..."


def _source(record: dict) -> str:
    path = Path(record["file"].path)
    try:
        return str(path.resolve().relative_to(get_project_root()))
    except (ValueError, OSError):
        return path.name


def _context(record: dict) -> dict[str, Any]:
    return {k: v for k, v in record["extra"].items() if k != "module"}


def _format_simple(record: dict) -> str:
    color = _COLORS.get(record["level"].name, "white")
    module = record["extra"].get("module", "app")
    line = f"<{color}>[{module}]</{color}> {_escape(record['message'])}\n"
    if record["exception"] is not None:
        line += "{exception}\n"
    return line


def _format_detailed(record: dict) -> str:
    level = record["level"].name
    color = _COLORS.get(level, "white")
    module = record["extra"].get("module", "app")
    when = record["time"].strftime("%H:%M:%S.%f")[:-3]

    line = (
        f"<dim>{when}</dim> <{color}>{level:8}</{color}> <magenta>[{module}]</magenta> "
        f"{_escape(record['message'])}"
    )
    context = _context(record)
    if context:
        fields = " ".join(f"{k}={_escape(repr(v))}" for k, v in context.items())
        line += f" <dim>| {fields}</dim>"
    line += f" <dim>({_escape(_source(record))}:{record['line']})</dim>\n"

    if record["exception"] is not None:
        line += "<red>{exception}</red>\n"
    return line


def _json_line(record: dict) -> str:
    entry: dict[str, Any] = {
        "time": record["time"].isoformat(),
        "level": record["level"].name,
        "module": record["extra"].get("module", "app"),
        "message": record["message"],
        "source": f"{_source(record)}:{record['line']}",
        **_context(record),
    }
    exc = record["exception"]
    if exc is not None and exc.value is not None:
        entry["exception"] = "".join(traceback.format_exception(exc.type, exc.value, exc.traceback))
    return json.dumps(entry, ensure_ascii=False, default=str)


def _format_json(record: dict) -> str:
    return _escape(_json_line(record)) + "\n"


def configure_logging(
    mode: str | None = None,
    level: str | None = None,
    log_file: str | None = None,
) -> None:
    """安装日志 sink（可重复调用，后一次覆盖前一次）"""
    global _configured

    mode = (mode or settings.LOG_MODE).lower()
    level = (level or settings.LOG_LEVEL).upper()
    log_file = settings.LOG_FILE if log_file is None else log_file
    if mode not in LOG_MODES:
        raise ValueError(f"无效的日志模式: {mode}")

    _loguru.remove()

    if mode == "detailed":
        install_rich_traceback(console=Console(stderr=True), show_locals=False, width=120)
    formatter = {"simple": _format_simple, "detailed": _format_detailed, "json": _format_json}[mode]
    _loguru.add(sys.stderr, format=formatter, level=level, colorize=mode != "json", diagnose=False)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        _loguru.add(
            log_file,
            format=_format_json,
            level=level,
            rotation=settings.LOG_FILE_ROTATION,
            retention=settings.LOG_FILE_RETENTION,
            compression="gz",
        )

    _configured = True
    _loguru.bind(module="logging").debug(f"日志已配置: mode={mode}, level={level}, file={log_file or '-'}")


class ModuleLogger:
    """按模块绑定的日志器，关键字参数作为结构化上下文输出"""

    def __init__(self, module: str):
        self.module = module

    def _log(self, level: str, message: str, exc_info: bool, extra: dict[str, Any]) -> None:
        if not _configured:
            configure_logging()
        fields = {k: _plain_value(v) for k, v in extra.items()}
        fields.setdefault("module", self.module)
        # depth=2: 调用方 -> info/warning/... -> _log
        _loguru.bind(**fields).opt(depth=2, exception=exc_info).log(level, message)

    def debug(self, message: str, **extra: Any) -> None:
        self._log("DEBUG", message, False, extra)

    def info(self, message: str, **extra: Any) -> None:
        self._log("INFO", message, False, extra)

    def warning(self, message: str, **extra: Any) -> None:
        self._log("WARNING", message, False, extra)

    def error(self, message: str, **extra: Any) -> None:
        self._log("ERROR", message, False, extra)

    def exception(self, message: str, **extra: Any) -> None:
        """ERROR 级别并附带当前异常堆栈"""
        self._log("ERROR", message, True, extra)


def get_logger(module: str) -> ModuleLogger:
    return ModuleLogger(module)
