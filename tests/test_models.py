from watchfolders.models import TaskProfile, WatchConfig


def test_configs_compare_by_identity(tmp_path):
    first = WatchConfig(folder_path=tmp_path)
    second = WatchConfig(folder_path=tmp_path)

    assert first != second
    assert len({first, second}) == 2


def test_add_watch_folder_is_idempotent(tmp_path):
    profile = TaskProfile()
    config = WatchConfig(folder_path=tmp_path)

    assert profile.add_watch_folder(config) is True
    assert profile.add_watch_folder(config) is False
    assert profile.watch_folders == [config]


def test_remove_watch_folder_by_identity(tmp_path):
    profile = TaskProfile()
    kept = WatchConfig(folder_path=tmp_path)
    removed = WatchConfig(folder_path=tmp_path)
    profile.add_watch_folder(kept)
    profile.add_watch_folder(removed)

    assert profile.remove_watch_folder(removed) is True
    assert profile.remove_watch_folder(removed) is False
    assert profile.has_watch_folder(kept)
    assert not profile.has_watch_folder(removed)
    assert profile.watch_folders == [kept]


def test_snapshot_is_detached_from_profile(tmp_path):
    profile = TaskProfile(name="p", watch_folder_enabled=True, extras={"uploader": "a"})
    snapshot = profile.snapshot()

    profile.extras["uploader"] = "b"
    profile.set_watch_enabled(False)

    assert snapshot.extras == {"uploader": "a"}
    assert snapshot.watch_folder_enabled is True
    assert profile.is_watch_enabled() is False


def test_string_paths_are_converted(tmp_path):
    config = WatchConfig(folder_path=str(tmp_path))
    profile = TaskProfile(destination_folder=str(tmp_path))

    assert config.folder_path == tmp_path
    assert profile.destination_folder == tmp_path
