"""
Route package initialization.
"""
from .crawl import router as crawl_router

__all__ = ["crawl_router"]
