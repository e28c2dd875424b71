"""Tests for the ledger store."""

import uuid

import pytest

from probe_core import ledger as ledger_mod
from probe_core.errors import LedgerAlreadyExists, LedgerMalformed, LedgerNotFound
from probe_core.ledger import Ledger, LedgerRecord, parse, serialize

FRESH_TEMPLATE = (
    "-----BEGIN UUID-----\n{}\n-----END UUID-----\n"
    "-----BEGIN SERVICES TO VERIFY-----\n\n-----END SERVICES TO VERIFY-----\n"
    "-----BEGIN TASKS TO VERIFY-----\n\n-----END TASKS TO VERIFY-----"
)


@pytest.fixture
def ledger(tmp_path):
    store = Ledger(tmp_path / "info")
    store.create()
    return store


class TestCreate:
    def test_create_returns_valid_uuid4(self, tmp_path):
        store = Ledger(tmp_path / "info")
        assert not store.exists()
        agent_id = store.create()
        assert store.exists()
        assert agent_id.version == 4
        assert store.read_agent_id() == agent_id
        uuid.UUID(str(store.read_agent_id()))

    def test_fresh_file_matches_legacy_layout(self, ledger):
        agent_id = ledger.read_agent_id()
        assert ledger.path.read_text(encoding="utf-8") == FRESH_TEMPLATE.format(agent_id)

    def test_second_create_refuses_and_keeps_id(self, ledger):
        agent_id = ledger.read_agent_id()
        with pytest.raises(LedgerAlreadyExists):
            ledger.create()
        assert ledger.read_agent_id() == agent_id

    def test_ensure_is_stable(self, tmp_path):
        store = Ledger(tmp_path / "nested" / "info")
        first = store.ensure()
        assert store.ensure() == first
        assert Ledger(store.path).ensure() == first

    def test_new_ledger_has_empty_lists(self, ledger):
        assert ledger.read_services() == []
        assert ledger.read_tasks() == []


class TestMissing:
    def test_reads_fail_without_file(self, tmp_path):
        store = Ledger(tmp_path / "info")
        with pytest.raises(LedgerNotFound):
            store.read_agent_id()
        with pytest.raises(LedgerNotFound):
            store.read_services()
        with pytest.raises(LedgerNotFound):
            store.read_tasks()

    def test_mutations_fail_without_file(self, tmp_path):
        store = Ledger(tmp_path / "info")
        with pytest.raises(LedgerNotFound):
            store.add_service("nginx")
        with pytest.raises(LedgerNotFound):
            store.remove_task("backup")
        with pytest.raises(LedgerNotFound):
            store.compact()
        assert not store.exists()


class TestMalformed:
    @pytest.mark.parametrize("text", [
        "",
        "garbage",
        "-----BEGIN UUID-----\nnot-a-uuid\n-----END UUID-----\n"
        "-----BEGIN SERVICES TO VERIFY-----\n\n-----END SERVICES TO VERIFY-----\n"
        "-----BEGIN TASKS TO VERIFY-----\n\n-----END TASKS TO VERIFY-----",
        "-----BEGIN UUID-----\n" + str(uuid.uuid4()) + "\n-----END UUID-----\n"
        "-----BEGIN SERVICES TO VERIFY-----\nnginx\n",
    ])
    def test_malformed_files_raise(self, tmp_path, text):
        path = tmp_path / "info"
        path.write_text(text, encoding="utf-8")
        with pytest.raises(LedgerMalformed):
            Ledger(path).read_services()

    def test_sections_out_of_order(self, tmp_path):
        agent_id = uuid.uuid4()
        text = (
            f"-----BEGIN UUID-----\n{agent_id}\n-----END UUID-----\n"
            "-----BEGIN TASKS TO VERIFY-----\n\n-----END TASKS TO VERIFY-----\n"
            "-----BEGIN SERVICES TO VERIFY-----\n\n-----END SERVICES TO VERIFY-----"
        )
        with pytest.raises(LedgerMalformed):
            parse(text)

    def test_ensure_does_not_replace_corrupt_file(self, tmp_path):
        path = tmp_path / "info"
        path.write_text("garbage", encoding="utf-8")
        with pytest.raises(LedgerMalformed):
            Ledger(path).ensure()
        assert path.read_text(encoding="utf-8") == "garbage"


class TestServicesAndTasks:
    def test_add_is_idempotent(self, ledger):
        assert ledger.add_service("nginx") is True
        assert ledger.add_service("nginx") is False
        assert ledger.read_services() == ["nginx"]

    def test_add_then_remove_restores_file(self, ledger):
        ledger.add_service("nginx")
        before = ledger.path.read_text(encoding="utf-8")
        before_list = ledger.read_services()

        ledger.add_service("postgres")
        ledger.remove_service("postgres")

        assert ledger.read_services() == before_list
        assert ledger.path.read_text(encoding="utf-8") == before

    def test_remove_last_entry_leaves_no_blank_entry(self, ledger):
        fresh = ledger.path.read_text(encoding="utf-8")
        ledger.add_task("backup")
        ledger.remove_task("backup")
        assert ledger.read_tasks() == []
        assert ledger.path.read_text(encoding="utf-8") == fresh

    def test_remove_missing_is_noop(self, ledger):
        ledger.add_service("nginx")
        assert ledger.remove_service("redis") is False
        assert ledger.read_services() == ["nginx"]

    def test_remove_matches_whole_names_only(self, ledger):
        ledger.add_service("webserver")
        ledger.add_service("web")
        ledger.remove_service("web")
        assert ledger.read_services() == ["webserver"]

    def test_add_does_not_match_prefix(self, ledger):
        ledger.add_task("backup-nightly")
        assert ledger.add_task("backup") is True
        assert ledger.read_tasks() == ["backup-nightly", "backup"]

    def test_order_is_preserved(self, ledger):
        for name in ("c", "a", "b"):
            ledger.add_service(name)
        ledger.remove_service("a")
        ledger.add_service("a")
        assert ledger.read_services() == ["c", "b", "a"]

    def test_lists_are_independent(self, ledger):
        ledger.add_service("shared")
        ledger.add_task("shared")
        ledger.remove_service("shared")
        assert ledger.read_services() == []
        assert ledger.read_tasks() == ["shared"]

    def test_mutations_keep_agent_id(self, ledger):
        agent_id = ledger.read_agent_id()
        ledger.add_service("nginx")
        ledger.add_task("backup")
        ledger.remove_service("nginx")
        assert ledger.read_agent_id() == agent_id

    @pytest.mark.parametrize("bad", [
        "", "   ", " nginx", "two\nlines", "-----END SERVICES TO VERIFY-----", "x-----BEGIN UUID-----",
    ])
    def test_invalid_names_rejected(self, ledger, bad):
        with pytest.raises(ValueError):
            ledger.add_service(bad)
        with pytest.raises(ValueError):
            ledger.add_task(bad)
        assert ledger.read_services() == []

    def test_returned_list_is_a_copy(self, ledger):
        ledger.add_service("nginx")
        services = ledger.read_services()
        services.append("intruder")
        assert ledger.read_services() == ["nginx"]


class TestRoundTrip:
    def test_write_then_read(self, ledger):
        for name in ("s1", "s2"):
            ledger.add_service(name)
        ledger.add_task("t1")

        reopened = Ledger(ledger.path)
        assert reopened.read_services() == ["s1", "s2"]
        assert reopened.read_tasks() == ["t1"]

    def test_serialize_parse(self):
        record = LedgerRecord(agent_id=uuid.uuid4(), services_to_verify=["s1", "s2"], tasks_to_verify=["t1"])
        assert parse(serialize(record)) == record

    def test_reads_legacy_file_with_blank_lines(self, tmp_path):
        agent_id = uuid.uuid4()
        path = tmp_path / "info"
        path.write_text(
            f"-----BEGIN UUID-----\n{agent_id}\n-----END UUID-----\n"
            "-----BEGIN SERVICES TO VERIFY-----\n\nnginx\n\npostgres\n-----END SERVICES TO VERIFY-----\n"
            "-----BEGIN TASKS TO VERIFY-----\n\n-----END TASKS TO VERIFY-----\n",
            encoding="utf-8",
        )
        store = Ledger(path)
        assert store.read_agent_id() == agent_id
        assert store.read_services() == ["nginx", "postgres"]
        assert store.read_tasks() == []


class TestAtomicWrite:
    def test_failed_replace_removes_temp_file(self, ledger, monkeypatch):
        before = ledger.path.read_text(encoding="utf-8")

        def refuse(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(ledger_mod.os, "replace", refuse)
        with pytest.raises(OSError):
            ledger.add_service("nginx")

        assert not ledger.path.with_name("info.tmp").exists()
        assert ledger.path.read_text(encoding="utf-8") == before

    def test_successful_write_leaves_no_temp_file(self, ledger):
        ledger.add_task("backup")
        assert sorted(p.name for p in ledger.path.parent.iterdir()) == ["info"]


class TestCompact:
    def test_compact_drops_blank_and_duplicate_lines(self, tmp_path):
        agent_id = uuid.uuid4()
        path = tmp_path / "info"
        path.write_text(
            f"-----BEGIN UUID-----\n{agent_id}\n-----END UUID-----\n"
            "-----BEGIN SERVICES TO VERIFY-----\n\nnginx\n\n\nnginx\nredis\n-----END SERVICES TO VERIFY-----\n"
            "-----BEGIN TASKS TO VERIFY-----\n\n\n-----END TASKS TO VERIFY-----",
            encoding="utf-8",
        )
        store = Ledger(path)
        assert store.compact() is True
        assert path.read_text(encoding="utf-8") == serialize(
            LedgerRecord(agent_id=agent_id, services_to_verify=["nginx", "redis"])
        )
        assert store.compact() is False

    def test_compact_fresh_ledger_is_noop(self, ledger):
        assert ledger.compact() is False
