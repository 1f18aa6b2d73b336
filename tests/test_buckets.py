"""
Tests for sqlacl.store.buckets and the executor's set helpers.
"""

import pytest
from pydantic import ValidationError

from sqlacl.store.buckets import BucketKind, BucketNames, bucket_names, classify
from sqlacl.store.executor import decode_map, decode_set, difference_values, union_values
from sqlacl.exceptions import StorageError


class TestBucketNames:
    """Tests for BucketNames aliases."""

    def test_defaults(self):
        names = BucketNames()
        assert names.users == "users"
        assert names.permissions == "permissions"

    def test_table_for(self):
        names = BucketNames(users="members")
        assert names.table_for("users") == "members"
        assert names.table_for("roles") == "roles"
        assert names.table_for("custom") == "custom"

    def test_unknown_alias_rejected(self):
        with pytest.raises(ValidationError):
            BucketNames(groups="teams")

    def test_bucket_names_from_mapping(self):
        assert bucket_names({"meta": "info"}).meta == "info"
        assert bucket_names(None) == BucketNames()
        names = BucketNames(roles="groups")
        assert bucket_names(names) is names


class TestClassify:
    """Tests for bucket classification."""

    def test_set_bucket(self):
        bucket = classify("users", "acl_", BucketNames())
        assert bucket.kind is BucketKind.SET
        assert bucket.table == "acl_users"
        assert bucket.row_key("joed") == "joed"
        assert bucket.row_key(7) == "7"

    def test_permission_bucket(self):
        bucket = classify("roles_allows_admin", "acl_", BucketNames())
        assert bucket.kind is BucketKind.PERMISSION
        assert bucket.is_permission
        assert bucket.table == "acl_permissions"
        assert bucket.row_key("blogs") == "roles_allows_admin"

    def test_permission_bucket_alias(self):
        bucket = classify("allows_editor", "", BucketNames(permissions="grants"))
        assert bucket.table == "grants"

    def test_unaliased_bucket_passes_through(self):
        assert classify("custom_bucket", "x_", BucketNames()).table == "x_custom_bucket"


class TestSetHelpers:
    """Tests for union, difference and decoding helpers."""

    def test_union_keeps_first_occurrence(self):
        assert union_values(["a", "b"], ["c", "a"], ["b", "d"]) == ["a", "b", "c", "d"]

    def test_union_distinguishes_strings_and_numbers(self):
        assert union_values(["1"], [1]) == ["1", 1]

    def test_difference(self):
        assert difference_values(["a", "b", "c"], ["b", "x"]) == ["a", "c"]

    def test_decode_empty(self):
        assert decode_set(None, "t") == []
        assert decode_set("", "t") == []
        assert decode_map(None, "t") == {}

    def test_decode_wrong_shape(self):
        with pytest.raises(StorageError):
            decode_set('{"a": 1}', "t")
        with pytest.raises(StorageError):
            decode_map("[1]", "t")

    def test_decode_unsupported_set_element(self):
        with pytest.raises(StorageError, match="Unsupported set element"):
            decode_set('["a", {"b": 1}]', "t")
        with pytest.raises(StorageError):
            decode_set("[true]", "t")
        assert decode_set('["a", 1, 2.5]', "t") == ["a", 1, 2.5]

    def test_decode_map_values_must_be_arrays(self):
        with pytest.raises(StorageError, match="JSON array"):
            decode_map('{"blogs": 5}', "t")
        with pytest.raises(StorageError, match="Unsupported set element"):
            decode_map('{"blogs": [["read"]]}', "t")
        assert decode_map('{"blogs": ["read"]}', "t") == {"blogs": ["read"]}
