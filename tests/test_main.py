# tests/test_main.py
"""
Тесты точки входа.
"""

from unittest.mock import patch

import main


class TestMain:
    """Тесты для main.main."""

    def test_runs_uvicorn_with_args(self) -> None:
        with patch("main.uvicorn.run") as mock_run, patch("main.setup_logging"):
            exit_code = main.main(["--host", "127.0.0.1", "--port", "3100"])

        assert exit_code == 0
        args, kwargs = mock_run.call_args
        assert args == ("src.services.tracking_ws.app:app",)
        assert kwargs["host"] == "127.0.0.1"
        assert kwargs["port"] == 3100
        assert kwargs["reload"] is False

    def test_defaults_from_settings(self) -> None:
        with patch("main.uvicorn.run") as mock_run, patch("main.setup_logging"):
            main.main([])

        assert mock_run.call_args.kwargs["port"] == main.settings.server.PORT
