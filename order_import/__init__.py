"""Order import service: builds complete orders from external API payloads."""

__version__ = "0.1.0"
