# src/shared/__init__.py
"""
Общий код сервиса.

Модули:
- models: общие Pydantic-модели ответов
"""
