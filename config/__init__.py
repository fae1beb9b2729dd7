"""Configuration package utilities."""

__all__ = ["AppSettings", "ConfigController"]


def __getattr__(name: str):
    if name == "ConfigController":
        from config.controller import ConfigController

        return ConfigController
    if name == "AppSettings":
        from config.settings import AppSettings

        return AppSettings
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
