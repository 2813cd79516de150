"""Unit tests for storage location selection."""

import os

from change_plan_manager.io import paths


class TestCandidateStorageDirs:
    def test_explicit_path_comes_first(self, tmp_path):
        dirs = paths.candidate_storage_dirs(str(tmp_path))
        assert dirs[0] == (str(tmp_path), "environment variable STORAGE_PATH")

    def test_empty_path_is_skipped(self):
        dirs = paths.candidate_storage_dirs("")
        assert dirs[0][1] == "system temporary directory"
        assert len(dirs) == 3

    def test_temp_dir_includes_instance_id(self):
        temp_dir, _ = paths.candidate_storage_dirs("")[0]
        assert temp_dir.endswith(paths.app_instance_id())


class TestAppInstanceId:
    def test_stable_and_short(self):
        assert paths.app_instance_id("/a") == paths.app_instance_id("/a")
        assert paths.app_instance_id("/a") != paths.app_instance_id("/b")
        assert len(paths.app_instance_id("/a")) == 8


class TestSelectStorageFile:
    def test_uses_explicit_directory(self, tmp_path):
        target = tmp_path / "plans"
        path = paths.select_storage_file(str(target), file_name="plans.yaml")
        assert path == os.path.join(str(target), "plans.yaml")
        assert target.is_dir()
        assert not (target / paths.WRITE_PROBE_NAME).exists()

    def test_falls_back_when_directory_unwritable(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        path = paths.select_storage_file(str(blocker / "sub"))
        assert path is not None
        assert not path.startswith(str(blocker))

    def test_none_when_nothing_writable(self, monkeypatch, caplog):
        monkeypatch.setattr(paths, "is_writable_dir", lambda d: False)
        assert paths.select_storage_file("/anywhere") is None
        assert "No valid storage location found" in caplog.text


class TestIsWritableDir:
    def test_creates_missing_directory(self, tmp_path):
        target = tmp_path / "a" / "b"
        assert paths.is_writable_dir(str(target)) is True
        assert target.is_dir()

    def test_file_in_the_way(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        assert paths.is_writable_dir(str(blocker)) is False
