import pytest


def test_locate_top_level_property():
    from badgecheck.structure_locator import locate_property

    doc = {"someProp": {"@context": "http://openbadges.org/extension1", "value": "x"}}
    loc = locate_property(doc, "someProp")
    assert loc.pointer == "/someProp"
    assert loc.local_context_ref == "http://openbadges.org/extension1"


def test_locate_in_badge_and_issuer_scopes():
    from badgecheck.structure_locator import locate_property

    doc = {
        "badge": {
            "inBadge": {"@context": "ctx:a"},
            "issuer": {"inIssuer": {"@context": "ctx:b"}},
        }
    }
    assert locate_property(doc, "inBadge").pointer == "/badge/inBadge"
    loc = locate_property(doc, "inIssuer")
    assert loc.pointer == "/badge/issuer/inIssuer"
    assert loc.local_context_ref == "ctx:b"


def test_first_scope_wins():
    from badgecheck.structure_locator import locate_property

    doc = {"p": {"@context": "top"}, "badge": {"p": {"@context": "nested"}}}
    loc = locate_property(doc, "p")
    assert loc.pointer == "/p"
    assert loc.local_context_ref == "top"


def test_missing_badge_or_issuer_is_not_a_crash():
    from badgecheck.errors import PropertyNotFoundError
    from badgecheck.structure_locator import locate_property

    for doc in ({}, {"badge": "https://example.org/badge"}, {"badge": {"issuer": None}}):
        with pytest.raises(PropertyNotFoundError):
            locate_property(doc, "someProp")


def test_non_string_local_context_is_none():
    from badgecheck.structure_locator import locate_property

    doc = {"p": {"@context": {"x": "y"}}, "q": "plain"}
    assert locate_property(doc, "p").local_context_ref is None
    assert locate_property(doc, "q").local_context_ref is None


def test_custom_scopes():
    from badgecheck.structure_locator import locate_property

    doc = {"recipient": {"ext": {"@context": "c"}}}
    loc = locate_property(doc, "ext", scopes=((), ("recipient",)))
    assert loc.pointer == "/recipient/ext"


def test_pointer_escaping_and_resolution():
    from badgecheck.structure_locator import locate_property, resolve_pointer

    doc = {"a/b~c": {"@context": "c", "items": [1, {"k": "v"}]}}
    loc = locate_property(doc, "a/b~c")
    assert loc.pointer == "/a~1b~0c"
    assert resolve_pointer(doc, loc.pointer) is doc["a/b~c"]
    assert resolve_pointer(doc, "/a~1b~0c/items/1/k") == "v"
    assert resolve_pointer(doc, "") is doc

    with pytest.raises(KeyError):
        resolve_pointer(doc, "/nope")
    with pytest.raises(KeyError):
        resolve_pointer(doc, "/a~1b~0c/items/7")
