import logging
import sys
from pathlib import Path

from loguru import logger

from src.debugkit.runtime.config.config_data import ConfigData

_FMT_PLAIN = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "[<cyan>{extra[correlation_id]}</cyan>] | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


class InterceptHandler(logging.Handler):
    """Redirect standard 'logging' records to Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        logger.opt(depth=2, exception=record.exc_info).bind(
            logger_name=record.name
        ).log(level, record.getMessage())


def configure_logging(config: ConfigData, level: str | None = None) -> list[int]:
    """Install the console, file and Logflare sinks.

    Returns the loguru handler ids so callers (tests, shutdown) can remove them.
    """
    cfg = config.logging
    env = config.app.environment
    level = (level or cfg.level).upper()

    logger.remove()
    logger.configure(extra={"correlation_id": "-"})

    backtrace_on = env != "production"
    diagnose_on = env != "production"

    handler_ids = [
        logger.add(
            sys.stderr,
            level=level,
            format=_FMT_PLAIN,
            colorize=True,
            backtrace=backtrace_on,
            diagnose=diagnose_on,
        )
    ]

    if cfg.file:
        path = Path(cfg.file)
        path.parent.mkdir(parents=True, exist_ok=True)
        is_json_file = cfg.format == "json"
        handler_ids.append(
            logger.add(
                str(path),
                level=level,
                format="{message}" if is_json_file else _FMT_PLAIN,
                serialize=is_json_file,
                rotation=f"{cfg.max_size_mb} MB",
                retention=cfg.backup_count,
                compression="zip",
                enqueue=True,
                backtrace=backtrace_on,
                diagnose=diagnose_on,
            )
        )

    if cfg.logflare.enabled and not cfg.logflare.is_configured:
        logger.warning(
            "Logflare is enabled but LOGFLARE_API_KEY or LOGFLARE_SOURCE_TOKEN is missing"
        )
    elif cfg.logflare.is_configured:
        from src.debugkit.core.services.logflare_sink import install_logflare_sink

        handler_ids.append(install_logflare_sink(cfg.logflare, config.app, level))

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)

    logger.debug(
        "Logging configured: level={}, file={}, logflare={}",
        level,
        cfg.file or "-",
        cfg.logflare.is_configured,
    )
    return handler_ids
