"""Tests for the network sitemap."""

from datetime import timedelta

from conftest import BASE_TIME
from network_search.application.sitemap import NetworkSitemap, build_page_tree
from network_search.domain.entities import ContentItem


def _page(item_id: int, title: str, parent_id: int = 0) -> ContentItem:
    return ContentItem(item_id, 1, "page", title, f"https://site/{item_id}/", BASE_TIME, parent_id=parent_id)


class TestBuildPageTree:
    def test_nesting_and_title_order(self):
        pages = [_page(1, "Zeta"), _page(2, "Alpha"), _page(3, "Child B", 1), _page(4, "Child A", 1)]

        tree = build_page_tree(pages)

        assert [n.title for n in tree] == ["Alpha", "Zeta"]
        assert [c.title for c in tree[1].children] == ["Child A", "Child B"]

    def test_missing_parent_becomes_root(self):
        tree = build_page_tree([_page(5, "Orphan", parent_id=99)])
        assert [n.title for n in tree] == ["Orphan"]

    def test_self_parent_is_root(self):
        tree = build_page_tree([_page(6, "Loop", parent_id=6)])
        assert tree[0].children == []

    def test_to_dict(self):
        tree = build_page_tree([_page(1, "Root"), _page(2, "Leaf", 1)])
        assert tree[0].to_dict() == {
            "id": 1,
            "title": "Root",
            "url": "https://site/1/",
            "children": [{"id": 2, "title": "Leaf", "url": "https://site/2/", "children": []}],
        }


class TestNetworkSitemap:
    async def test_public_sites_only(self, store, cache):
        sitemap = NetworkSitemap(store, cache)

        trees = await sitemap.build()

        assert [t.site_name for t in trees] == ["Knee Education", "Foot Care"]
        knee = trees[0]
        assert [p.title for p in knee.pages] == ["Knee Pain", "Knee Replacement"]
        assert [c.title for c in knee.pages[0].children] == ["Orthopedics FAQ"]

    async def test_cached_until_invalidated(self, store, cache):
        sitemap = NetworkSitemap(store, cache)
        await sitemap.build()

        store.add_item(
            ContentItem(50, 2, "page", "Heel Spurs", "https://foot.example.com/heel/", BASE_TIME - timedelta(days=2))
        )
        assert "Heel Spurs" not in [p.title for p in (await sitemap.build())[1].pages]

        cache.invalidate_all()
        assert "Heel Spurs" in [p.title for p in (await sitemap.build())[1].pages]

    async def test_expires(self, store, cache, fake_timer):
        sitemap = NetworkSitemap(store, cache, ttl=100)
        await sitemap.build()
        store.delete_item(2, 20)

        fake_timer.advance(101)

        assert [t.site_name for t in await sitemap.build()] == ["Knee Education"]
