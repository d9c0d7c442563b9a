"""Tests for the identify and group property builders."""

from gibraltar_posthog.properties import group_properties, identify_properties


class TestIdentifyProperties:
    def test_all_groups_present(self):
        props = identify_properties({"a": 1}, {"b": 2}, {"$groups": {"g": "x"}})

        assert props == {
            "$set": {"a": 1},
            "$set_once": {"b": 2},
            "$groups": {"g": "x"},
        }

    def test_omits_set_once(self):
        props = identify_properties({"a": 1}, groups={"$groups": {"g": "x"}})

        assert "$set_once" not in props
        assert props == {"$set": {"a": 1}, "$groups": {"g": "x"}}

    def test_groups_without_groups_key_are_ignored(self):
        props = identify_properties({"a": 1}, groups={"company": "acme"})
        assert props == {"$set": {"a": 1}}

    def test_nothing_supplied(self):
        assert identify_properties() == {}

    def test_empty_dicts_are_kept(self):
        # Supplied-but-empty is different from absent
        props = identify_properties({}, {})
        assert props == {"$set": {}, "$set_once": {}}


class TestGroupProperties:
    def test_with_details(self):
        props = group_properties("company", "acme", {"name": "Acme"})

        assert props == {
            "$group_set": {"name": "Acme"},
            "$group_type": "company",
            "$group_key": "acme",
        }

    def test_without_details(self):
        props = group_properties("company", "acme")

        assert "$group_set" not in props
        assert props == {"$group_type": "company", "$group_key": "acme"}
