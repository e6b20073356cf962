import copy
import pytest
from hostkit.hostkit_recordtype import (
    NIL, Record, define, is_recordtype, typename, parent, record_id,
)
from hostkit.hostkit_errors import InvalidKey, InvalidPrototype, InvalidDescriptor


@pytest.fixture
def bintree():
    return define("BinaryTree", {"value": "anonymous", "left": NIL, "right": NIL})

# --- Construction ---

def test_defaults_and_nil_fields(bintree):
    b = bintree.new()
    assert b.value == "anonymous"
    assert b.left is None
    assert b["right"] is None

def test_factory_template_overrides_defaults(bintree):
    b = bintree.new({"value": "root", "left": 1})
    assert b.value == "root"
    assert b.left == 1

def test_template_with_unknown_key_raises(bintree):
    with pytest.raises(InvalidKey) as ei:
        bintree.new({"valu": 1})
    assert ei.value.key == "valu"
    assert "BinaryTree" in str(ei.value)

def test_template_must_be_mapping(bintree):
    with pytest.raises(TypeError):
        bintree.factory([("value", 1)])

def test_instances_are_distinct(bintree):
    a = bintree.new()
    b = bintree.new()
    assert a is not b
    assert a != b
    assert a == a
    assert record_id(a) != record_id(b)
    assert len({a, b}) == 2

def test_defaults_round_trip(bintree):
    b = bintree.new()
    assert dict(b) == {"value": "anonymous", "left": None, "right": None}

# --- Field access ---

def test_unknown_key_read_raises(bintree):
    b = bintree.new()
    with pytest.raises(InvalidKey):
        b.val
    with pytest.raises(KeyError):
        b["val"]
    with pytest.raises(AttributeError):
        getattr(b, "val")

def test_unknown_key_write_raises(bintree):
    b = bintree.new()
    with pytest.raises(InvalidKey):
        b.val = 1
    with pytest.raises(InvalidKey):
        b["val"] = 1

def test_assignment_and_nil_unsets(bintree):
    b = bintree.new()
    b.left = "leaf"
    b["right"] = "other"
    assert b.left == "leaf"
    assert b.right == "other"
    b.left = NIL
    assert b.left is None
    del b.right
    assert b.right is None

def test_update_validates_before_assigning(bintree):
    b = bintree.new()
    with pytest.raises(InvalidKey):
        b.update({"value": "changed", "bogus": 1})
    assert b.value == "anonymous"
    b.update(value="changed")
    assert b.value == "changed"

def test_mapping_protocol(bintree):
    b = bintree.new()
    assert list(b) == ["value", "left", "right"]
    assert len(b) == 3
    assert "left" in b
    assert "nope" not in b
    assert bintree.fields() == ("value", "left", "right")

# --- Custom constructor and stringifier ---

def test_custom_constructor():
    def make(rt, value=None, left=None, right=None):
        return rt.factory({"value": value, "left": left, "right": right})
    tree = define("BinaryTree", {"value": NIL, "left": NIL, "right": NIL}, make)
    leaf = tree.new("leaf")
    root = tree.new("root", leaf)
    assert root.value == "root"
    assert root.left is leaf
    assert root.right is None
    assert tree.is_instance(root)

def test_custom_stringifier():
    point = define("Point", {"x": 0, "y": 0}, stringifier=lambda p: f"({p.x}, {p.y})")
    p = point.new({"x": 1, "y": 2})
    assert str(p) == "(1, 2)"
    assert repr(p) == "(1, 2)"

def test_default_repr_uses_type_name(bintree):
    b = bintree.new()
    assert repr(b) == f"<BinaryTree: {record_id(b)}>"

# --- Validation ---

def test_prototype_validation():
    with pytest.raises(InvalidPrototype):
        define(42, {})
    with pytest.raises(InvalidPrototype):
        define("Bad", [1, 2])
    with pytest.raises(InvalidPrototype):
        define("Bad", {1: "x"})

def test_descriptor_validation():
    with pytest.raises(InvalidDescriptor):
        define("Bad", {}, constructor="not callable")
    with pytest.raises(InvalidDescriptor):
        define("Bad", {}, stringifier=3)

def test_any_string_is_a_field_name():
    row = define("Row", {"values": NIL, "keys": 1, "new": "n", "update": NIL})
    r = row.new()
    assert r["values"] is None
    assert r["keys"] == 1
    r["values"] = [1, 2]
    r["keys"] = 2
    assert r["values"] == [1, 2]
    assert r["keys"] == 2
    assert r["new"] == "n"
    assert dict(r) == {"values": [1, 2], "keys": 2, "new": "n", "update": None}
    assert sorted(r.keys()) == ["keys", "new", "update", "values"]
    r.new = "assigned"
    assert r["new"] == "assigned"

def test_type_level_api_is_not_on_instances(bintree):
    b = bintree.new()
    for name in ("new", "factory", "fields", "is_instance"):
        with pytest.raises(InvalidKey):
            getattr(b, name)

def test_empty_prototype():
    empty = define("Empty", None)
    e = empty.new()
    assert len(e) == 0
    with pytest.raises(InvalidKey):
        e.anything

# --- Helpers ---

def test_type_helpers(bintree):
    b = bintree.new()
    other = define("BinaryTree", {"value": NIL})
    assert bintree.is_instance(b)
    assert not other.is_instance(b)
    assert not bintree.is_instance({"value": 1})
    assert is_recordtype(bintree)
    assert not is_recordtype(Record)
    assert not is_recordtype(b)
    assert typename(b) == "BinaryTree"
    assert typename(bintree) == "recordtype"
    assert typename(Record) == "recordtype root"
    assert typename(3) is None
    assert parent(b) is bintree
    assert parent(bintree) is Record
    assert parent("x") is None
    assert record_id("x") is None

def test_nil_is_falsy_singleton():
    assert not NIL
    assert type(NIL)() is NIL
    assert repr(NIL) == "<recordtype NIL>"

# --- Copying ---

def test_copy_and_deepcopy(bintree):
    b = bintree.new({"left": ["leaf"]})
    c = copy.copy(b)
    assert c is not b
    assert bintree.is_instance(c)
    assert dict(c) == dict(b)
    c.value = "changed"
    assert b.value == "anonymous"
    d = copy.deepcopy(b)
    assert d.left == ["leaf"]
    assert d.left is not b.left
