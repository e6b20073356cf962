import pytest
from hostkit.hostkit_set import Set, new, is_set
from hostkit.hostkit_errors import InsufficientElements


def make(items, **kw):
    s = Set(**kw)
    for i in items:
        s.insert(i)
    return s

# --- Basic operations ---

def test_new_set_is_empty():
    s = new()
    assert is_set(s)
    assert not is_set({1, 2})
    assert s.empty()
    assert s.size() == 0
    assert list(s.elements()) == []

def test_insert_ignores_duplicates():
    s = make([1, 2, 2, 3, 1])
    assert s.size() == 3
    assert sorted(s) == [1, 2, 3]

def test_insert_keeps_existing_element():
    s = Set(value_fn=lambda d: d["id"])
    first = {"id": 1, "name": "first"}
    second = {"id": 1, "name": "second"}
    assert s.insert(first) is first
    assert s.insert(second) is first
    assert s.contains(second) is first
    assert s.size() == 1

def test_delete_and_contains():
    s = make(["a", "b"])
    assert "a" in s
    assert s.contains("a") == "a"
    s.delete("a")
    assert "a" not in s
    assert s.contains("a") is None
    s.delete("missing")
    assert s.size() == 1

def test_elements_view_is_live_and_restartable():
    s = make([1, 2])
    view = s.elements()
    assert sorted(view) == [1, 2]
    assert sorted(view) == [1, 2]
    s.insert(3)
    assert len(view) == 3
    assert 3 in view

# --- Equality modes ---

def test_unhashable_elements_are_kept_by_identity():
    s = Set()
    a = [1, 2]
    assert s.insert(a) is a
    s.insert(a)
    assert s.size() == 1
    assert a in s
    assert s.contains(a) is a
    twin = [1, 2]
    assert twin not in s
    s.insert(twin)
    s.insert({"k": 1})
    s.insert("plain")
    assert s.size() == 4
    s.delete(a)
    assert a not in s
    assert s.contains(twin) is twin
    assert s.size() == 3

def test_eq_fn_linear_mode():
    s = Set(eq_fn=lambda a, b: a.lower() == b.lower())
    s.insert("Hello")
    s.insert("HELLO")
    s.insert("world")
    assert s.size() == 2
    assert s.contains("hello") == "Hello"
    s.delete("WORLD")
    assert s.size() == 1

def test_value_fn_and_eq_fn_compose():
    s = Set(value_fn=lambda p: p[0], eq_fn=lambda a, b: abs(a - b) < 1)
    s.insert((1.0, "a"))
    s.insert((1.5, "b"))
    s.insert((3.0, "c"))
    assert s.size() == 2
    assert (1.2, "z") in s

# --- Set algebra ---

def test_union_size():
    a = make([1, 2, 3, 4])
    b = make([3, 4, 5])
    u = a.union(b)
    assert u.size() == a.size() + b.size() - a.intersection(b).size()
    assert sorted(a | b) == [1, 2, 3, 4, 5]

def test_intersection_and_difference():
    a = make([1, 2, 3])
    b = make([2, 3, 4])
    assert sorted(a & b) == [2, 3]
    assert sorted(a - b) == [1]
    assert sorted(b.difference(a)) == [4]

def test_difference_with_self_is_empty():
    a = make(["x", "y"])
    assert a.difference(a).empty()

def test_algebra_preserves_equality():
    a = Set(value_fn=abs)
    a.insert(-2)
    b = Set(value_fn=abs)
    b.insert(2)
    u = a.union(b)
    assert u.size() == 1
    assert u.value_fn is abs
    assert a.intersection(b).size() == 1

def test_operands_are_unchanged():
    a = make([1, 2])
    b = make([2, 3])
    a.union(b)
    a.difference(b)
    assert sorted(a) == [1, 2]
    assert sorted(b) == [2, 3]

# --- choose ---

def test_choose_then_reinsert_restores():
    a = make(range(10))
    chosen = a.choose(4)
    assert chosen.size() == 4
    assert a.size() == 6
    assert a.intersection(chosen).empty()
    for e in chosen:
        a.insert(e)
    assert sorted(a) == list(range(10))

def test_choose_too_many_raises_without_mutation():
    a = make([1, 2])
    with pytest.raises(InsufficientElements) as ei:
        a.choose(3)
    assert ei.value.wanted == 3
    assert ei.value.available == 2
    assert a.size() == 2

def test_choose_keeps_equality():
    a = Set(eq_fn=lambda x, y: x % 5 == y % 5)
    for i in (1, 2, 3):
        a.insert(i)
    chosen = a.choose(2)
    assert chosen.eq_fn is a.eq_fn
    assert not chosen.simple

# --- Higher-order helpers ---

def test_map_filter_foreach():
    a = make([1, 2, 3, 4])
    assert sorted(a.map(lambda x: x % 2)) == [0, 1]
    assert sorted(a.filter(lambda x: x > 2)) == [3, 4]
    seen = []
    a.foreach(seen.append)
    assert sorted(seen) == [1, 2, 3, 4]

def test_repr_names_mode():
    assert "simple" in repr(Set())
    assert "mapped" in repr(Set(value_fn=str))
    assert "linear" in repr(Set(eq_fn=lambda a, b: a == b))
