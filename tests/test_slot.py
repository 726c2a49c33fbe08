import threading

from conftest import make_frame

from core.slot import LatestFrameSlot


def test_empty_slot_reads_none():
    assert LatestFrameSlot().read_latest() is None


def test_read_returns_most_recent_write_without_removing_it():
    slot = LatestFrameSlot()
    slot.write(make_frame(index=1))
    slot.write(make_frame(index=2))
    assert slot.read_latest().index == 2
    assert slot.read_latest().index == 2


def test_counts_frames_overwritten_before_being_read():
    slot = LatestFrameSlot()
    for i in range(5):
        slot.write(make_frame(index=i))
    slot.read_latest()
    slot.write(make_frame(index=5))
    assert slot.written == 6
    assert slot.dropped == 4


def test_clear_empties_slot():
    slot = LatestFrameSlot()
    slot.write(make_frame())
    slot.clear()
    assert slot.read_latest() is None


def test_reader_never_sees_older_frame_than_last_completed_write():
    slot = LatestFrameSlot()
    done = threading.Event()
    # Highest index whose write() has returned
    completed = [-1]
    violations = []

    def writer():
        for i in range(2000):
            slot.write(make_frame(width=2, height=2, index=i))
            completed[0] = i
        done.set()

    def reader():
        while not done.is_set():
            floor = completed[0]
            frame = slot.read_latest()
            if frame is not None and frame.index < floor:
                violations.append((frame.index, floor))

    threads = [threading.Thread(target=writer), threading.Thread(target=reader)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert violations == []
    assert slot.read_latest().index == 1999
