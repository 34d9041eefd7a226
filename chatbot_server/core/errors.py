"""
Error taxonomy for the chatbot server.

Every error raised during startup or shutdown derives from ChatbotServerError
so the top-level runner can log it and exit.
"""


class ChatbotServerError(Exception):
    """Base class for all chatbot server errors."""


class ConfigError(ChatbotServerError):
    """Missing or invalid environment values."""


class AdapterError(ChatbotServerError):
    """A wrapped embedding or chat model failed."""


class StoreConnectionError(ChatbotServerError):
    """Database or content store connect/close failure."""


class ServerError(ChatbotServerError):
    """HTTP bind, listen or close failure."""
