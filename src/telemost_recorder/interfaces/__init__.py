"""
Interfaces module - Abstract base classes for the browser driver facade.

The recorder depends only on these contracts, never on a concrete driver.
"""

from telemost_recorder.interfaces.browser import (
    IBrowser,
    IBrowserContext,
    IPage,
    IElement,
    IAudioStream,
    BrowserType,
    PageEvent,
    LocatorKind,
    LocatorStrategy,
)

__all__ = [
    "IBrowser",
    "IBrowserContext",
    "IPage",
    "IElement",
    "IAudioStream",
    "BrowserType",
    "PageEvent",
    "LocatorKind",
    "LocatorStrategy",
]
