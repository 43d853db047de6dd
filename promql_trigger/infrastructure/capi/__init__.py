from .client import CapiClient, CapiConfig

__all__ = ["CapiClient", "CapiConfig"]
