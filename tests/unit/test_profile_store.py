"""Tests for postman_remote/credentials/profile_store.py - rc file storage."""

import json
import stat
import sys

import pytest

from postman_remote.credentials import codec
from postman_remote.credentials.models import Profile
from postman_remote.credentials.profile_store import ProfileStore, _merge
from postman_remote.enums import ErrorKind
from postman_remote.exceptions import AliasNotFoundError, ProfileStoreError


def rc_data(*profiles: Profile) -> dict:
    return {"login": {"_profiles": [profile.to_rc() for profile in profiles]}}


@pytest.fixture
def store(tmp_path) -> ProfileStore:
    return ProfileStore(
        home_file=tmp_path / "home" / ".postman" / "newmanrc",
        project_file=tmp_path / "project" / ".newmanrc",
    )


@pytest.fixture
def work_profile() -> Profile:
    return Profile(alias="work", secret=codec.encode("PMAK-work"))


class TestRead:
    def test_missing_files_load_empty(self, store):
        assert store.load(home=True, project=True) == {}

    def test_empty_file_loads_empty(self, store):
        store.home_file.parent.mkdir(parents=True)
        store.home_file.write_text("  \n")

        assert store.load() == {}

    def test_reads_newman_layout(self, store, plain_profile):
        store.home_file.parent.mkdir(parents=True)
        store.home_file.write_text(json.dumps(rc_data(plain_profile)))

        profiles = store.profiles(store.load())

        assert profiles == [plain_profile]

    def test_reads_file_with_bom(self, store, plain_profile):
        store.home_file.parent.mkdir(parents=True)
        store.home_file.write_text("\ufeff" + json.dumps(rc_data(plain_profile)), encoding="utf-8")

        assert store.profiles(store.load()) == [plain_profile]

    def test_invalid_json(self, store):
        store.home_file.parent.mkdir(parents=True)
        store.home_file.write_text("{not json")

        with pytest.raises(ProfileStoreError) as exc_info:
            store.load()

        assert "contains invalid data." in exc_info.value.message
        assert exc_info.value.kind == ErrorKind.PROFILE_STORE_ERROR

    def test_non_object(self, store):
        store.home_file.parent.mkdir(parents=True)
        store.home_file.write_text("[1, 2]")

        with pytest.raises(ProfileStoreError):
            store.load()

    def test_project_file_overrides_home(self, store, plain_profile, work_profile):
        override = Profile(alias="default", secret=codec.encode("PMAK-project"))
        store.home_file.parent.mkdir(parents=True)
        store.home_file.write_text(json.dumps(rc_data(plain_profile, work_profile)))
        store.project_file.parent.mkdir(parents=True)
        store.project_file.write_text(json.dumps(rc_data(override)))

        profiles = store.profiles(store.load(home=True, project=True))

        assert [p.alias for p in profiles] == ["default", "work"]
        assert codec.decode(profiles[0].secret) == "PMAK-project"

    def test_project_file_ignored_unless_requested(self, store, plain_profile):
        store.project_file.parent.mkdir(parents=True)
        store.project_file.write_text(json.dumps(rc_data(plain_profile)))

        assert store.load() == {}


class TestProfiles:
    def test_no_login_section(self):
        assert ProfileStore.profiles({"other": True}) == []

    def test_unknown_fields_survive(self):
        raw = {"alias": "default", "postmanApiKey": "x", "encrypted": False, "note": "kept"}
        profile = ProfileStore.profiles({"login": {"_profiles": [raw]}})[0]

        assert profile.to_rc()["note"] == "kept"

    def test_malformed_profile(self):
        with pytest.raises(ProfileStoreError):
            ProfileStore.profiles({"login": {"_profiles": [{"alias": "default"}]}})

    def test_add_replaces_same_alias(self, plain_profile, work_profile):
        replacement = Profile(alias="default", secret="abcd", encrypted=True)
        data = ProfileStore.add_profile(rc_data(plain_profile, work_profile), replacement)

        profiles = ProfileStore.profiles(data)
        assert [p.alias for p in profiles] == ["work", "default"]
        assert profiles[1].encrypted is True

    def test_add_does_not_mutate_input(self, plain_profile, work_profile):
        data = rc_data(plain_profile)
        ProfileStore.add_profile(data, work_profile)

        assert data == rc_data(plain_profile)

    def test_add_keeps_other_sections(self, work_profile):
        data = ProfileStore.add_profile({"reporters": {"cli": {}}}, work_profile)

        assert data["reporters"] == {"cli": {}}
        assert data["login"]["_profiles"] == [work_profile.to_rc()]

    def test_remove(self, plain_profile, work_profile):
        data = ProfileStore.remove_profile(rc_data(plain_profile, work_profile), "default")

        assert ProfileStore.profiles(data) == [work_profile]

    def test_remove_unknown_alias(self, plain_profile):
        with pytest.raises(AliasNotFoundError) as exc_info:
            ProfileStore.remove_profile(rc_data(plain_profile), "missing")

        assert exc_info.value.message == "Alias not found."
        assert exc_info.value.alias == "missing"

    def test_remove_from_empty_data(self):
        with pytest.raises(AliasNotFoundError):
            ProfileStore.remove_profile({}, "default")


class TestStore:
    def test_round_trip(self, store, plain_profile):
        path = store.store(rc_data(plain_profile))

        assert path == store.home_file
        assert store.profiles(store.load()) == [plain_profile]

    def test_writes_secret_under_newman_name(self, store, plain_profile):
        store.store(rc_data(plain_profile))

        raw = json.loads(store.home_file.read_text())
        assert raw["login"]["_profiles"][0]["postmanApiKey"] == plain_profile.secret

    def test_project_target(self, store, plain_profile):
        store.project_file.parent.mkdir(parents=True)
        path = store.store(rc_data(plain_profile), target="project")

        assert path == store.project_file
        assert not store.home_file.exists()

    def test_no_temp_file_left(self, store, plain_profile):
        store.store(rc_data(plain_profile))

        assert [p.name for p in store.home_file.parent.iterdir()] == ["newmanrc"]

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    def test_permissions(self, store, plain_profile):
        store.store(rc_data(plain_profile))

        assert stat.S_IMODE(store.home_file.stat().st_mode) == 0o600
        assert stat.S_IMODE(store.home_file.parent.stat().st_mode) == 0o700

    def test_unwritable_location(self, tmp_path, plain_profile):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        store = ProfileStore(home_file=blocker / "newmanrc")

        with pytest.raises(ProfileStoreError) as exc_info:
            store.store(rc_data(plain_profile))

        assert "Unable to create the config directory" in exc_info.value.message


class TestMerge:
    def test_nested_dicts_merge(self):
        merged = _merge({"a": {"x": 1, "y": 2}}, {"a": {"y": 3}, "b": 4})

        assert merged == {"a": {"x": 1, "y": 3}, "b": 4}

    def test_profiles_merge_by_alias(self):
        base = {"_profiles": [{"alias": "a", "v": 1}, {"alias": "b", "v": 1}]}
        override = {"_profiles": [{"alias": "b", "v": 2}, {"alias": "c", "v": 2}]}

        merged = _merge(base, override)

        assert merged["_profiles"] == [{"alias": "a", "v": 1}, {"alias": "b", "v": 2}, {"alias": "c", "v": 2}]
        assert base["_profiles"][1]["v"] == 1


class TestMalformedLoginSection:
    def test_null_login_has_no_profiles(self):
        assert ProfileStore.profiles({"login": None}) == []

    def test_null_login_accepts_new_profile(self, work_profile):
        data = ProfileStore.add_profile({"login": None}, work_profile)

        assert ProfileStore.profiles(data) == [work_profile]

    def test_null_login_remove_reports_missing_alias(self):
        with pytest.raises(AliasNotFoundError):
            ProfileStore.remove_profile({"login": None}, "default")

    @pytest.mark.parametrize(
        "data",
        [
            {"login": "not-an-object"},
            {"login": {"_profiles": "not-a-list"}},
            {"login": {"_profiles": ["not-an-object"]}},
            {"login": {"_profiles": [None]}},
        ],
        ids=["login_string", "profiles_string", "profile_string", "profile_null"],
    )
    def test_wrong_shapes_raise_store_error(self, data, work_profile):
        with pytest.raises(ProfileStoreError, match="invalid data"):
            ProfileStore.profiles(data)
        with pytest.raises(ProfileStoreError):
            ProfileStore.add_profile(data, work_profile)
        with pytest.raises(ProfileStoreError):
            ProfileStore.remove_profile(data, "default")


def test_failed_write_removes_temp_file(store, plain_profile):
    # A non-empty directory at the target path makes the final rename fail.
    store.home_file.mkdir(parents=True)
    (store.home_file / "occupied").write_text("")

    with pytest.raises(ProfileStoreError, match="Unable to write the rc file"):
        store.store(rc_data(plain_profile))

    assert not store.home_file.with_name("newmanrc.tmp").exists()
