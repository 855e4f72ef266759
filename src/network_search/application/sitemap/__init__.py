"""Network sitemap: page trees across tenant sites."""

from .builder import NetworkSitemap, build_page_tree

__all__ = ["NetworkSitemap", "build_page_tree"]
