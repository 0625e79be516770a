from assistant_backend.presentation.routes import chat, config_probe, search

__all__ = ["chat", "config_probe", "search"]
