#!/usr/bin/env python3
# main.py
"""
Главная точка входа Order Tracking Relay.
Запускает HTTP/WebSocket сервер на порту из конфигурации (или $PORT).

Запуск:
    python main.py
    python main.py --port 3000
"""

from __future__ import annotations

import argparse
import sys

import uvicorn

from src.common.logger import get_logger, setup_logging
from src.config import settings


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Разбирает аргументы командной строки."""
    parser = argparse.ArgumentParser(description="Order Tracking Relay")
    parser.add_argument("--host", default=settings.server.HOST, help="Адрес для прослушивания")
    parser.add_argument("--port", type=int, default=settings.server.PORT, help="Порт")
    parser.add_argument(
        "--reload",
        action="store_true",
        default=settings.system.DEBUG,
        help="Перезапуск при изменении кода (разработка)",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Запустить сервер."""
    args = parse_args(argv)

    setup_logging()
    logger = get_logger()
    logger.info(f"Сервер слушает {args.host}:{args.port}")

    # Ошибку привязки порта uvicorn логирует сам и завершает процесс с кодом 1
    uvicorn.run(
        "src.services.tracking_ws.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.logging.LOG_LEVEL.lower(),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
