"""Tests for the depth-bounded folder walker."""

import os

import pytest

from storage import LocalDriver, StorageError
from workflows.walker import walk_files


def touch(*parts):
    path = os.path.join(*parts)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w") as f:
        f.write("x")
    return path


@pytest.fixture
def tree(tmp_path):
    root = str(tmp_path / "Incoming")
    touch(root, "top.xlsx")
    touch(root, "Laurel Inn", "laurel.xlsx")
    touch(root, "Laurel Inn", "2013", "Monthly", "deep.xlsx")
    touch(root, "--RunLog", "2013-04-starsort.log")
    touch(root, "Done", "filed.xlsx")
    return root


@pytest.fixture
def driver():
    return LocalDriver()


def names(entries):
    return [e.file.name for e in entries]


class TestWalkFiles:

    def test_files_before_subfolders(self, driver, tree):
        entries = list(walk_files(driver, tree))
        assert names(entries) == ["top.xlsx", "filed.xlsx", "laurel.xlsx", "deep.xlsx"]

    def test_ancestors_nearest_first_and_capped(self, driver, tree):
        entries = {e.file.name: e for e in walk_files(driver, tree)}
        assert entries["top.xlsx"].ancestors == ("Incoming",)
        assert entries["laurel.xlsx"].ancestors == ("Laurel Inn", "Incoming")
        assert entries["deep.xlsx"].ancestors == ("Monthly", "2013", "Laurel Inn")

    def test_system_folders_skipped(self, driver, tree):
        assert "2013-04-starsort.log" not in names(walk_files(driver, tree))

    def test_skip_folder_ids(self, driver, tree):
        done = os.path.join(tree, "Done")
        entries = walk_files(driver, tree, skip_folder_ids={done})
        assert "filed.xlsx" not in names(entries)

    def test_without_subfolders(self, driver, tree):
        entries = walk_files(driver, tree, include_subfolders=False)
        assert names(entries) == ["top.xlsx"]

    def test_max_depth(self, driver, tree):
        entries = list(walk_files(driver, tree, max_depth=1))
        assert "deep.xlsx" not in names(entries)
        assert "laurel.xlsx" in names(entries)

    def test_is_lazy(self, driver, tree):
        entries = walk_files(driver, tree)
        assert next(entries).file.name == "top.xlsx"


class FailingListDriver(LocalDriver):
    """Local driver whose listing of one folder raises."""

    def __init__(self, broken_name, method="list_files"):
        super().__init__()
        self.broken_name = broken_name
        self.method = method

    def _check(self, folder_id, method):
        if method == self.method and os.path.basename(folder_id) == self.broken_name:
            raise StorageError(f"403 rate limited on {self.broken_name}")

    def list_files(self, folder_id):
        self._check(folder_id, "list_files")
        return super().list_files(folder_id)

    def list_folders(self, folder_id):
        self._check(folder_id, "list_folders")
        return super().list_folders(folder_id)


class TestListingErrors:

    def test_failed_folder_is_reported_and_skipped(self, tree):
        failures = []
        entries = list(walk_files(FailingListDriver("Laurel Inn"), tree,
                                  on_error=lambda path, e: failures.append((path, str(e)))))
        assert names(entries) == ["top.xlsx", "filed.xlsx"]
        assert failures == [("Incoming/Laurel Inn", "403 rate limited on Laurel Inn")]

    def test_failed_subfolder_listing_keeps_folder_files(self, tree):
        failures = []
        entries = list(walk_files(FailingListDriver("Laurel Inn", method="list_folders"), tree,
                                  on_error=lambda path, e: failures.append(path)))
        assert names(entries) == ["top.xlsx", "filed.xlsx", "laurel.xlsx"]
        assert failures == ["Incoming/Laurel Inn"]

    def test_raises_without_handler(self, tree):
        with pytest.raises(StorageError):
            list(walk_files(FailingListDriver("Laurel Inn"), tree))
