"""Compressed-domain motion vector extraction."""


from typing import TYPE_CHECKING, Any

__all__ = ["AppConfig", "ArrangedPipeline", "FrameGrid", "load_config", "run_extract"]

if TYPE_CHECKING:  # pragma: no cover - for static type checkers only
    from .arranged import ArrangedPipeline
    from .config import AppConfig, load_config
    from .extract import run_extract
    from .grid import FrameGrid

_EXPORTS = {
    "AppConfig": ".config",
    "load_config": ".config",
    "ArrangedPipeline": ".arranged",
    "FrameGrid": ".grid",
    "run_extract": ".extract",
}


def __getattr__(name: str) -> Any:
    if name in _EXPORTS:
        import importlib

        module = importlib.import_module(_EXPORTS[name], __name__)
        value = getattr(module, name)
        globals()[name] = value
        return value
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
