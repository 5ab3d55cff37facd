"""Tests for greedy clustering and near-duplicate merging."""

from moment_engine.clustering.categories import classify_category, hostname_from_url
from moment_engine.clustering.engine import (
    Cluster,
    ClusterItem,
    build_clusters,
    cluster,
    max_clusters_for,
    merge_near_duplicates,
)
from moment_engine.models.domain import RawItem


def make_item(tokens, source="hn", category="ai", weight=0.0, title="t"):
    return ClusterItem(
        raw=RawItem(source=source, title=title),
        source=source,
        tokens=tuple(tokens),
        category=category,
        weight=weight,
    )


def make_cluster(items):
    c = Cluster(category=items[0].category)
    for it in items:
        c.add_member(it)
    return c


def test_cluster_item_from_raw():
    raw = RawItem(
        source="HackerNews",
        title="Postgres adds native vector search",
        url="https://www.github.com/pg/vector",
        keywords=("pgvector",),
        weight=12,
    )
    item = ClusterItem.from_raw(raw)
    assert item.source == "hn"
    assert item.tokens == ("postgre", "adds", "native", "vector", "search", "github", "pgvector")
    assert item.category == "data"
    assert item.weight == 12.0


def test_cluster_item_explicit_category_wins():
    item = ClusterItem.from_raw(RawItem(source="hn", title="Postgres news", category="web"))
    assert item.category == "web"


def test_cluster_item_bad_weight():
    item = ClusterItem.from_raw(RawItem(source="hn", title="x", weight=float("nan")))
    assert item.weight == 0.0


def test_classify_category():
    assert classify_category("New LLM agent framework") == "ai"
    assert classify_category("OpenSSH CVE patched") == "security"
    assert classify_category("Chrome drops cookies") == "web"
    assert classify_category("The history of the floppy disk") == "technology"


def test_hostname_from_url():
    assert hostname_from_url("https://www.example.com/a") == "example.com"
    assert hostname_from_url(None) == ""
    assert hostname_from_url("not a url") == ""


def test_similar_items_join_one_cluster(raw_items):
    clusters = cluster(raw_items, max_clusters=10)
    assert len(clusters) == 2
    # Two-source cluster ranks first
    assert clusters[0].size == 2
    assert set(clusters[0].sources) == {"hn", "reddit"}
    assert clusters[1].size == 1


def test_tokenless_items_stand_alone():
    items = [make_item([]), make_item([]), make_item(["vector", "search"])]
    clusters = cluster(items, max_clusters=10)
    assert len(clusters) == 3


def test_below_threshold_starts_new_cluster():
    items = [
        make_item(["a1", "a2", "a3", "a4", "a5"]),
        make_item(["a1", "b2", "b3", "b4", "b5"]),  # 1/9 < 0.22
    ]
    assert len(cluster(items, max_clusters=10)) == 2


def test_same_category_constraint():
    items = [
        make_item(["vector", "search", "index"], category="ai"),
        make_item(["vector", "search", "index"], category="data"),
    ]
    assert len(cluster(items, max_clusters=10)) == 1
    assert len(cluster(items, max_clusters=10, same_category=True)) == 2


def test_ranking_and_cap():
    items = [
        make_item(["solo", "one", "thing"], weight=5),
        make_item(["heavy", "two", "thing2"], weight=50),
        make_item(["multi", "three", "thing3"], source="hn"),
        make_item(["multi", "three", "thing3"], source="reddit"),
    ]
    clusters = cluster(items, max_clusters=2)
    assert len(clusters) == 2
    assert len(clusters[0].sources) == 2
    assert clusters[1].weight_max == 50


def test_centroid_ties_keep_first_seen_order():
    c = make_cluster([make_item(["b", "a", "c"]), make_item(["c", "d"])])
    assert c.centroid(3) == ["c", "b", "a"]


def test_cluster_is_deterministic(raw_items):
    a = [c.key() for c in build_clusters(raw_items)]
    b = [c.key() for c in build_clusters(raw_items)]
    assert a == b


def test_cluster_key_format():
    c = make_cluster([make_item(["vector", "search"])])
    key = c.key()
    assert key.startswith("moment:")
    assert len(key) == len("moment:") + 12


def test_merge_near_duplicates_combines_clusters():
    shared = ["t1", "t2", "t3", "t4", "t5", "t6"]
    a = make_cluster([make_item(shared + ["a7", "a8"], source="hn")])
    b = make_cluster([make_item(shared + ["b7", "b8"], source="reddit")])

    merged = merge_near_duplicates([a, b])

    assert len(merged) == 1
    assert merged[0].size == 2
    assert set(merged[0].sources) == {"hn", "reddit"}
    assert merged[0].collapsed_from == [b.key()]


def test_merge_does_not_mutate_input():
    shared = ["t1", "t2", "t3", "t4", "t5", "t6"]
    a = make_cluster([make_item(shared + ["a7", "a8"])])
    b = make_cluster([make_item(shared + ["b7", "b8"])])
    merge_near_duplicates([a, b])
    assert a.size == 1
    assert b.size == 1
    assert a.collapsed_from == []


def test_merge_crosses_categories_by_default():
    shared = ["t1", "t2", "t3", "t4", "t5", "t6"]
    a = make_cluster([make_item(shared + ["a7", "a8"], category="technology")])
    b = make_cluster([make_item(shared + ["b7", "b8"], category="ai")])

    merged = merge_near_duplicates([a, b])

    assert len(merged) == 1
    assert merged[0].size == 2


def test_merge_same_category_mode_keeps_categories_apart():
    shared = ["t1", "t2", "t3", "t4", "t5", "t6"]
    a = make_cluster([make_item(shared + ["a7", "a8"], category="technology")])
    b = make_cluster([make_item(shared + ["b7", "b8"], category="ai")])
    assert len(merge_near_duplicates([a, b], same_category=True)) == 2


def test_build_clusters_threads_same_category():
    items = [
        make_item(["rust", "compiler", "release", "speeds", "builds", "notes", "agent"], category="technology"),
        make_item(["rust", "compiler", "release", "speeds", "builds", "notes", "agent"], category="ai"),
    ]
    assert len(build_clusters(items, max_clusters=10)) == 1
    assert len(build_clusters(items, max_clusters=10, same_category=True)) == 2


def test_merge_below_threshold_keeps_both():
    a = make_cluster([make_item(["t1", "t2", "t3", "t4", "a5", "a6", "a7", "a8"])])
    b = make_cluster([make_item(["t1", "t2", "t3", "t4", "b5", "b6", "b7", "b8"])])
    # 4/12 < 0.55
    assert len(merge_near_duplicates([a, b])) == 2


def test_merge_respects_cap():
    clusters = [make_cluster([make_item([f"x{i}", f"y{i}", f"z{i}"])]) for i in range(5)]
    assert len(merge_near_duplicates(clusters, max_clusters=3)) == 3


def test_empty_input():
    assert cluster([], max_clusters=10) == []
    assert merge_near_duplicates([]) == []
    assert build_clusters([]) == []


def test_max_clusters_for():
    assert max_clusters_for(0) == 6
    assert max_clusters_for(18) == 6
    assert max_clusters_for(24) == 8
    assert max_clusters_for(100) == 10
