"""
Tests for file identifiers and ticket strings.
"""

from filetree.tickets import FileIdentifier, to_ticket


class TestToTicket:
    def test_full(self) -> None:
        assert to_ticket("corpus", "root", "a/b.go") == "kythe://corpus?path=a/b.go?root=root"

    def test_empty_components_are_omitted(self) -> None:
        assert to_ticket("corpus") == "kythe://corpus"
        assert to_ticket("corpus", "", "/a") == "kythe://corpus?path=/a"
        assert to_ticket("", "r", "") == "kythe:?root=r"
        assert to_ticket("") == "kythe:"

    def test_escaping_keeps_slashes(self) -> None:
        assert to_ticket("c", "", "/a b/c?d.go") == "kythe://c?path=/a%20b/c%3Fd.go"

    def test_distinct_roots_give_distinct_tickets(self) -> None:
        assert to_ticket("c", "", "/a") != to_ticket("c", "out", "/a")


class TestFileIdentifier:
    def test_ticket(self) -> None:
        f = FileIdentifier(corpus="c", root="", path="src/main.go")
        assert f.ticket == "kythe://c?path=src/main.go"

    def test_hashable_value(self) -> None:
        a = FileIdentifier("c", "", "x")
        b = FileIdentifier("c", "", "x")
        assert a == b
        assert len({a, b}) == 1

    def test_dict_roundtrip_defaults(self) -> None:
        f = FileIdentifier.from_dict({"corpus": "c", "path": "p"})
        assert f == FileIdentifier("c", "", "p")
        assert f.to_dict() == {"corpus": "c", "root": "", "path": "p"}
