from unittest.mock import patch

import pytest

from file_manager.conflicts import ConflictAction
from file_manager.errors import InvalidArgumentError, NotFoundError
from file_manager.registry import FileRegistry
from file_manager.schemas import ConflictDescriptor

PDF_CONTENT = b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\ntrailer\n<</Root 1 0 R>>\n%%EOF"


def test_upload_then_list(registry: FileRegistry):
    key = registry.upload_file(PDF_CONTENT, "report.pdf", "application/pdf")

    files = registry.list_files()

    assert len(files) == 1
    assert files[0].key == key
    assert files[0].original_name == "report.pdf"
    assert files[0].size == len(PDF_CONTENT)
    assert key in files[0].download_url


def test_upload__empty_file_is_rejected(registry: FileRegistry):
    with pytest.raises(InvalidArgumentError):
        registry.upload_file(b"", "empty.txt")
    assert registry.list_files() == []


def test_upload__same_name_twice_reports_conflict(registry: FileRegistry):
    first_key = registry.upload_file(b"first", "a.txt", "text/plain")

    result = registry.upload_file(b"second", "a.txt", "text/plain")

    assert isinstance(result, ConflictDescriptor)
    assert result.existing_key == first_key
    assert result.original_filename == "a.txt"
    assert set(result.options) == {"cancel", "replace", "keepBoth"}
    # nothing was written for the conflicting upload
    assert [file_info.key for file_info in registry.list_files()] == [first_key]
    assert registry.download_file(first_key) == b"first"


def test_resolve_conflict__replace_keeps_key_and_swaps_content(registry: FileRegistry):
    first_key = registry.upload_file(b"first", "a.txt", "text/plain")
    conflict = registry.upload_file(b"second", "a.txt", "text/plain")

    key = registry.resolve_conflict(b"second", "a.txt", "replace", existing_key=conflict.existing_key)

    assert key == first_key
    assert registry.download_file(key) == b"second"
    assert [file_info.key for file_info in registry.list_files()] == [first_key]


def test_resolve_conflict__keep_both_writes_a_new_key(registry: FileRegistry):
    first_key = registry.upload_file(b"first", "a.txt", "text/plain")
    conflict = registry.upload_file(b"second", "a.txt", "text/plain")

    key = registry.resolve_conflict(b"second", "a.txt", ConflictAction.KEEP_BOTH, existing_key=conflict.existing_key)

    assert key != first_key
    assert registry.download_file(first_key) == b"first"
    assert registry.download_file(key) == b"second"
    files = registry.list_files()
    assert {file_info.key for file_info in files} == {first_key, key}
    assert {file_info.original_name for file_info in files} == {"a.txt"}


def test_resolve_conflict__keep_both_never_reuses_existing_key(store, monkeypatch):
    ticks = iter([1_700_000_000_000, 1_700_000_000_000, 1_700_000_000_000, 1_700_000_000_001])
    monkeypatch.setattr("file_manager.naming.current_epoch_millis", lambda: next(ticks))
    registry = FileRegistry(store)

    first_key = registry.upload_file(b"first", "a.txt")
    key = registry.resolve_conflict(b"second", "a.txt", "keepBoth", existing_key=first_key)

    assert first_key == "a_1700000000000.txt"
    assert key == "a_1700000000001.txt"


def test_resolve_conflict__cancel_writes_nothing(registry: FileRegistry):
    first_key = registry.upload_file(b"first", "a.txt")

    assert registry.resolve_conflict(b"second", "a.txt", "cancel", existing_key=first_key) is None
    assert registry.download_file(first_key) == b"first"
    assert len(registry.list_files()) == 1
    registry.get_upload_status(first_key)
    assert registry.get_upload_status(first_key) is False


@pytest.mark.parametrize("existing_key", [None, ""])
def test_resolve_conflict__replace_requires_existing_key(registry: FileRegistry, existing_key):
    with pytest.raises(InvalidArgumentError):
        registry.resolve_conflict(b"content", "a.txt", "replace", existing_key=existing_key)


def test_resolve_conflict__replace_of_missing_key_is_rejected(registry: FileRegistry):
    with pytest.raises(InvalidArgumentError):
        registry.resolve_conflict(b"content", "a.txt", "replace", existing_key="a_1.txt")
    assert registry.list_files() == []


def test_resolve_conflict__unknown_action_is_rejected(registry: FileRegistry):
    with pytest.raises(InvalidArgumentError):
        registry.resolve_conflict(b"content", "a.txt", "merge")


def test_upload_status__true_exactly_once(registry: FileRegistry):
    key = registry.upload_file(b"content", "a.txt")

    assert registry.get_upload_status(key) is True
    assert registry.get_upload_status(key) is False


def test_upload_status__set_by_conflict_resolution(registry: FileRegistry):
    first_key = registry.upload_file(b"first", "a.txt")
    assert registry.get_upload_status(first_key) is True

    replaced_key = registry.resolve_conflict(b"second", "a.txt", "replace", existing_key=first_key)
    kept_key = registry.resolve_conflict(b"third", "a.txt", "keepBoth", existing_key=first_key)

    assert registry.get_upload_status(replaced_key) is True
    assert registry.get_upload_status(kept_key) is True


def test_search__case_insensitive_substring_on_name(registry: FileRegistry):
    invoice_key = registry.upload_file(PDF_CONTENT, "Invoice-2024.pdf", "application/pdf")
    registry.upload_file(b"notes", "notes.txt", "text/plain")

    matches = registry.search_files("invoice")

    assert [file_info.key for file_info in matches] == [invoice_key]
    assert matches[0].original_name == "Invoice-2024.pdf"


def test_search__matches_key(registry: FileRegistry):
    key = registry.upload_file(b"notes", "notes.txt", "text/plain")
    timestamp = key.split("_")[-1].split(".")[0]

    assert [file_info.key for file_info in registry.search_files(timestamp)] == [key]
    assert registry.search_files("no-such-file") == []


def test_list__falls_back_to_key_when_metadata_missing(registry: FileRegistry):
    store = registry.store
    store.s3_client.put_object(Bucket=store.bucket_name, Key="legacy_1600000000000.csv", Body=b"a,b")

    files = registry.list_files()

    assert [(file_info.key, file_info.original_name) for file_info in files] == [
        ("legacy_1600000000000.csv", "legacy"),
    ]
    assert [file_info.key for file_info in registry.search_files("LEGACY")] == ["legacy_1600000000000.csv"]


def test_list__skips_objects_deleted_after_listing(registry: FileRegistry):
    kept_key = registry.upload_file(b"kept", "kept.txt")
    gone_key = registry.upload_file(b"gone", "gone.txt")

    real_list = registry.store.list

    def list_then_delete():
        listed = real_list()
        registry.store.delete(gone_key)
        return listed

    registry.store.list = list_then_delete

    assert [file_info.key for file_info in registry.list_files()] == [kept_key]


def test_download__missing_key_is_not_found(registry: FileRegistry):
    with pytest.raises(NotFoundError):
        registry.download_file("missing.txt")


def test_delete(registry: FileRegistry):
    key = registry.upload_file(b"content", "a.txt")

    assert registry.delete_file(key) is True
    assert registry.list_files() == []
    with pytest.raises(NotFoundError):
        registry.download_file(key)
    # deleting again is still a success
    assert registry.delete_file(key) is True


def test_upload__non_ascii_filename_round_trips(registry: FileRegistry):
    key = registry.upload_file(b"cv", "résumé 文件.pdf", "application/pdf")

    files = registry.list_files()
    assert [(file_info.key, file_info.original_name) for file_info in files] == [(key, "résumé 文件.pdf")]
    assert [file_info.key for file_info in registry.search_files("文件")] == [key]

    conflict = registry.upload_file(b"cv v2", "résumé 文件.pdf", "application/pdf")
    assert isinstance(conflict, ConflictDescriptor)
    assert conflict.existing_key == key
    assert conflict.original_filename == "résumé 文件.pdf"


def test_list__heads_each_object_once(registry: FileRegistry):
    registry.upload_file(b"a", "a.txt")
    registry.upload_file(b"b", "b.txt")

    with patch.object(registry.store, "head", wraps=registry.store.head) as head:
        files = registry.list_files()

    assert len(files) == 2
    assert head.call_count == 2
