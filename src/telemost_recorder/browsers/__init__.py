"""
Browsers module - Playwright implementation of the browser facade.
"""

from telemost_recorder.browsers.playwright_browser import (
    PlaywrightBrowser,
    PlaywrightContext,
    PlaywrightPage,
    PlaywrightElement,
    PlaywrightAudioStream,
)
from telemost_recorder.browsers.pool import BrowserPool

__all__ = [
    "PlaywrightBrowser",
    "PlaywrightContext",
    "PlaywrightPage",
    "PlaywrightElement",
    "PlaywrightAudioStream",
    "BrowserPool",
]
