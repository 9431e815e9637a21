"""Tests for identifier generation and the syntactic validity check."""

import uuid

import pytest
from backend.app.models.identifiers import ID_LENGTH, is_valid_id, new_id


class TestNewId:
    def test_new_id_is_valid(self) -> None:
        assert is_valid_id(new_id())

    def test_new_id_is_canonical_length(self) -> None:
        assert len(new_id()) == ID_LENGTH

    def test_new_ids_are_unique(self) -> None:
        assert len({new_id() for _ in range(100)}) == 100


class TestIsValidId:
    def test_accepts_uuid4(self) -> None:
        assert is_valid_id(str(uuid.uuid4()))

    def test_accepts_uppercase(self) -> None:
        assert is_valid_id(str(uuid.uuid4()).upper())

    @pytest.mark.parametrize(
        "value",
        [
            "",
            "not-an-id",
            "507f1f77bcf86cd799439011",  # 24-char hex, another store's format
            "3f1c2b9e5d7a4c1e8b2f6a9d0c3e7b14",  # hex without hyphens
            "3f1c2b9e-5d7a-4c1e-8b2f-6a9d0c3e7b1z",
            " 3f1c2b9e-5d7a-4c1e-8b2f-6a9d0c3e7b1",
        ],
    )
    def test_rejects_malformed_strings(self, value: str) -> None:
        assert is_valid_id(value) is False

    @pytest.mark.parametrize("value", [None, 123, b"bytes", uuid.uuid4()])
    def test_rejects_non_strings(self, value: object) -> None:
        assert is_valid_id(value) is False
