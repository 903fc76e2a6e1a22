import pytest

from pathquery import (
    PathTree, TreeNodeKind, QuerySpec, OrderItem, variable_name,
    PathNotFoundError, InvalidTreeError,
)


def _gene_tree() -> PathTree:
    t = PathTree("Gene")
    t.add("Gene.chromosome", TreeNodeKind.NODE, "Chromosome")
    t.add("Gene.chromosome.gene", TreeNodeKind.NODE, "Gene")
    t.add("Gene.chromosome.gene.length", TreeNodeKind.PROPERTY)
    t.add("Gene.symbol", TreeNodeKind.PROPERTY)
    return t


def test_variable_name_uses_full_path():
    assert variable_name("Gene.chromosome.gene.length") == "gene_chromosome_gene_length"
    assert variable_name("Gene") == "gene"


def test_variable_names_are_unique_per_tree():
    t = _gene_tree()
    names = [n.variable_name for n in t]
    assert len(names) == len(set(names)) == len(t)


def test_node_fields():
    t = _gene_tree()
    n = t.node("Gene.chromosome.gene.length")
    assert n.kind is TreeNodeKind.PROPERTY
    assert n.name == "length" and n.graphical_name == "length"
    assert n.depth == 4
    assert t.parent(n).path == "Gene.chromosome.gene"
    assert t.root.is_root and t.root.kind is TreeNodeKind.NODE
    assert t.parent(t.root) is None


def test_children_keep_insertion_order():
    t = _gene_tree()
    assert [c.name for c in t.children(t.root)] == ["chromosome", "symbol"]


def test_walk_is_preorder():
    t = _gene_tree()
    assert [n.path for n in t.walk()] == [
        "Gene",
        "Gene.chromosome",
        "Gene.chromosome.gene",
        "Gene.chromosome.gene.length",
        "Gene.symbol",
    ]


def test_readding_same_kind_returns_existing():
    t = _gene_tree()
    before = len(t)
    n = t.add("Gene.symbol", TreeNodeKind.PROPERTY)
    assert n is t.node("Gene.symbol") and len(t) == before


def test_kind_is_never_reclassified():
    t = _gene_tree()
    with pytest.raises(InvalidTreeError):
        t.add("Gene.symbol", TreeNodeKind.NODE)


def test_missing_parent_rejected():
    t = PathTree("Gene")
    with pytest.raises(PathNotFoundError) as ei:
        t.add("Gene.organism.name", TreeNodeKind.PROPERTY)
    assert ei.value.path == "Gene.organism"


def test_property_is_leaf():
    t = _gene_tree()
    with pytest.raises(InvalidTreeError):
        t.add("Gene.symbol.first", TreeNodeKind.PROPERTY)


def test_relationship_must_hang_off_node():
    t = PathTree("Gene")
    t.add("Gene.interacts_with", TreeNodeKind.RELATIONSHIP, "INTERACTS_WITH")
    with pytest.raises(InvalidTreeError):
        t.add("Gene.interacts_with.via", TreeNodeKind.RELATIONSHIP, "VIA")
    # relationship children may be nodes or properties
    t.add("Gene.interacts_with.gene2", TreeNodeKind.NODE, "Gene")
    t.add("Gene.interacts_with.score", TreeNodeKind.PROPERTY)


def test_colliding_variable_names_rejected():
    t = PathTree("Gene")
    t.add("Gene.a", TreeNodeKind.NODE, "A")
    t.add("Gene.a.b", TreeNodeKind.PROPERTY)
    with pytest.raises(InvalidTreeError):
        t.add("Gene.a_b", TreeNodeKind.PROPERTY)


def test_second_root_rejected():
    t = PathTree("Gene")
    with pytest.raises(InvalidTreeError):
        t.add("Protein", TreeNodeKind.NODE)
    with pytest.raises(InvalidTreeError):
        PathTree("Gene.symbol")


def test_frozen_tree_rejects_insertion():
    t = _gene_tree().freeze()
    assert t.frozen
    with pytest.raises(InvalidTreeError):
        t.add("Gene.name", TreeNodeKind.PROPERTY)


def test_lookup():
    t = _gene_tree()
    assert "Gene.symbol" in t and "Gene.name" not in t
    assert t.get("Gene.name") is None
    with pytest.raises(PathNotFoundError):
        t.node("Gene.name")
    assert t.paths()[0] == "Gene"


def test_query_spec_paths_deduplicated_in_order():
    spec = QuerySpec(
        view=["Gene.symbol", "Gene.chromosome.gene.length", "Gene.symbol"],
        order_by=[OrderItem("Gene.length", "DESC"), OrderItem("Gene.symbol")],
    )
    assert spec.paths() == ["Gene.symbol", "Gene.chromosome.gene.length", "Gene.length"]
