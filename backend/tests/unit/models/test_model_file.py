"""Unit tests for :class:`filevault.models.file.File`."""

from __future__ import annotations

import pytest
from filevault.models import File
from filevault.models.file import extension_of
from tests.factories.file import FileFactory


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("report.pdf", ".pdf"),
        ("archive.tar.gz", ".gz"),
        ("README", ""),
        (".bashrc", ""),
        ("dir/photo.JPG", ".JPG"),
    ],
)
def test_extension_of(name, expected):
    assert extension_of(name) == expected


class TestFileModel:
    def test_factory_persists_with_uuid_and_timestamps(self, session):
        row = FileFactory(name="report.pdf")
        session.flush()

        assert len(row.id) == 36
        assert row.user_id == row.owner.id
        assert row.created_at is not None
        assert row.updated_at is not None

    def test_blank_name_is_rejected(self):
        with pytest.raises(ValueError, match="File name is required"):
            File(name="   ", path="k", user_id="a@b.com")

    def test_repr_mentions_id(self, session):
        row = FileFactory()
        session.flush()
        assert row.id in repr(row)
