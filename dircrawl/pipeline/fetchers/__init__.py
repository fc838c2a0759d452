from .browser import BrowserSession

__all__ = ['BrowserSession']
