"""
RAG Chatbot Server Application.

This is the main application package that assembles a retrieval-augmented
chatbot from its building blocks:
- API routes (FastAPI endpoints for conversations)
- Services (model adapters, content store, retrieval pipeline, prompts, conversations)
- Schemas (content and conversation data models)
- Core (configuration and errors)
- bootstrap/server (startup wiring and the process lifecycle)
"""

from chatbot_server.core.config import ConnectionConfig, load_env_vars
from chatbot_server.main import AppConfig, make_app

__all__ = [
    "ConnectionConfig",
    "load_env_vars",
    "AppConfig",
    "make_app",
]
