"""
NetworkSitemap - hierarchical page listing across tenant sites.

For every public site, published pages are arranged into a tree by parent
id, siblings sorted by title. Sites without pages are left out. The result
is plain data; rendering is up to the caller.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict

from network_search.domain.entities import ContentItem, PageNode, SiteTree
from network_search.infrastructure.cache.result_cache import CacheFamily, ResultCache
from network_search.infrastructure.store.base import LocalContentStore

logger = logging.getLogger(__name__)


def build_page_tree(pages: list[ContentItem]) -> list[PageNode]:
    """
    Arrange pages by parent id.

    Pages whose parent is not among ``pages`` are treated as roots, so an
    unpublished parent does not hide its published children.
    """
    ordered = sorted(pages, key=lambda p: p.title)
    ids = {page.item_id for page in ordered}

    children: dict[int, list[ContentItem]] = defaultdict(list)
    roots: list[ContentItem] = []
    for page in ordered:
        if page.parent_id and page.parent_id in ids and page.parent_id != page.item_id:
            children[page.parent_id].append(page)
        else:
            roots.append(page)

    def attach(page: ContentItem, ancestors: frozenset[int]) -> PageNode:
        node = PageNode(item_id=page.item_id, title=page.title, url=page.permalink)
        for child in children.get(page.item_id, []):
            if child.item_id in ancestors:
                continue  # parent cycle
            node.children.append(attach(child, ancestors | {child.item_id}))
        return node

    return [attach(root, frozenset({root.item_id})) for root in roots]


class NetworkSitemap:
    """
    Builds and caches the network-wide sitemap.

    Usage:
        sitemap = NetworkSitemap(store, cache, ttl=21600)
        trees = await sitemap.build()
    """

    def __init__(
        self,
        store: LocalContentStore,
        cache: ResultCache,
        ttl: float = 6 * 3600.0,
        post_type: str = "page",
    ) -> None:
        self._store = store
        self._cache = cache
        self._ttl = ttl
        self._post_type = post_type

    async def build(self) -> list[SiteTree]:
        sites = await asyncio.to_thread(self._store.list_sites, True)
        key = f"{CacheFamily.SITEMAP.value}:{self._post_type}:{len(sites)}"
        trees = await self._cache.get_or_compute(key, lambda: asyncio.to_thread(self.build_sync), ttl=self._ttl)
        return list(trees)

    def build_sync(self) -> tuple[SiteTree, ...]:
        trees: list[SiteTree] = []
        for site in self._store.list_sites(public_only=True):
            pages = self._store.list_published(site.site_id, self._post_type)
            if not pages:
                continue
            trees.append(SiteTree(site_name=site.name, site_url=site.home_url, pages=build_page_tree(pages)))
        logger.info(f"Sitemap built for {len(trees)} site(s)")
        return tuple(trees)
