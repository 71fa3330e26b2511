"""Tests for randomized naming."""

import string

from tf_module_tests.naming import project_name, unique_id


def test_unique_id_is_base62():
    value = unique_id()
    assert len(value) == 6
    assert all(c in string.ascii_letters + string.digits for c in value)


def test_project_name_lowercases_suffix():
    name = project_name("vpc-test-")
    assert name.startswith("vpc-test-")
    assert len(name) == len("vpc-test-") + 6
    assert name == name.lower()


def test_names_differ():
    assert len({unique_id(12) for _ in range(20)}) == 20
