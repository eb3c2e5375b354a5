from concurrent.futures import ThreadPoolExecutor

from file_manager.status_tracker import UploadStatusTracker


def test_take__reports_completion_exactly_once():
    tracker = UploadStatusTracker()
    tracker.mark_completed("a_1.txt")

    assert tracker.take("a_1.txt") is True
    assert tracker.take("a_1.txt") is False


def test_take__unknown_key_is_not_completed():
    assert UploadStatusTracker().take("missing") is False


def test_mark_completed__twice_is_still_consumed_once():
    tracker = UploadStatusTracker()
    tracker.mark_completed("k")
    tracker.mark_completed("k")

    assert len(tracker) == 1
    assert tracker.take("k") is True
    assert tracker.take("k") is False


def test_concurrent_pollers__only_one_sees_each_completion():
    tracker = UploadStatusTracker()
    keys = [f"file_{i}.bin" for i in range(200)]

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(tracker.mark_completed, keys))
        # every key polled by four threads at once
        results = list(pool.map(tracker.take, keys * 4))

    assert sum(results) == len(keys)
    assert len(tracker) == 0
