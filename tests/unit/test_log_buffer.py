"""
Unit tests for app/jobs/log_buffer.py

Cursor semantics: sequence numbers survive trimming.
"""
import pytest

from app.jobs.log_buffer import LogBuffer


def test_append_splits_lines_and_skips_empty():
    buf = LogBuffer()
    buf.append("out", "first\n\nsecond\r\nthird\rfourth\n")

    lines, next_cursor = buf.read_from(0)
    assert lines == ["[out] first", "[out] second", "[out] third", "[out] fourth"]
    assert next_cursor == 4
    assert len(buf) == 4


def test_tags_are_rendered_per_line():
    buf = LogBuffer()
    buf.append("out", "downloading")
    buf.append("err", "WARNING: slow")

    lines, _ = buf.read_from(0)
    assert lines == ["[out] downloading", "[err] WARNING: slow"]


def test_read_is_idempotent_without_appends():
    buf = LogBuffer()
    buf.append("out", "a\nb\nc")

    assert buf.read_from(1) == buf.read_from(1)
    assert buf.read_from(1) == (["[out] b", "[out] c"], 3)


def test_cursor_past_end_returns_nothing_and_same_cursor():
    buf = LogBuffer()
    buf.append("out", "a\nb")

    assert buf.read_from(2) == ([], 2)
    assert buf.read_from(50) == ([], 50)


def test_empty_buffer_keeps_cursor():
    assert LogBuffer().read_from(0) == ([], 0)
    assert LogBuffer().read_from(7) == ([], 7)


def test_negative_cursor_reads_from_start():
    buf = LogBuffer()
    buf.append("out", "a")
    assert buf.read_from(-5) == (["[out] a"], 1)


def test_trimming_keeps_sequence_numbers():
    buf = LogBuffer(max_lines=3)
    for i in range(5):
        buf.append("out", f"line-{i}")

    assert len(buf) == 3
    assert buf.next_seq == 5
    assert buf.read_from(0) == (["[out] line-2", "[out] line-3", "[out] line-4"], 5)

    # an issued cursor still points at the same line after trimming
    assert buf.read_from(3) == (["[out] line-3", "[out] line-4"], 5)


def test_cursor_below_trimmed_region_clamps_to_oldest():
    buf = LogBuffer(max_lines=2)
    buf.append("out", "a\nb\nc\nd")

    assert buf.read_from(0) == (["[out] c", "[out] d"], 4)
    assert buf.read_from(1) == (["[out] c", "[out] d"], 4)


def test_polling_from_zero_never_duplicates_under_trimming():
    buf = LogBuffer(max_lines=4)
    collected = []
    cursor = 0
    counter = 0

    for _ in range(6):
        for _ in range(3):
            buf.append("out", f"line-{counter}")
            counter += 1
        lines, cursor = buf.read_from(cursor)
        collected.extend(lines)

    # every poll came before the buffer overflowed, so nothing was lost
    assert collected == [f"[out] line-{i}" for i in range(counter)]
    assert cursor == buf.next_seq

    retained, _ = buf.read_from(0)
    assert collected[-len(retained):] == retained


def test_lines_lost_to_trimming_are_skipped_not_repeated():
    buf = LogBuffer(max_lines=3)
    buf.append("out", "l0\nl1")
    first, cursor = buf.read_from(0)
    buf.append("out", "l2\nl3\nl4\nl5\nl6")
    second, cursor = buf.read_from(cursor)

    assert first == ["[out] l0", "[out] l1"]
    assert second == ["[out] l4", "[out] l5", "[out] l6"]
    assert cursor == 7


def test_default_capacity_is_2000():
    buf = LogBuffer()
    buf.append("out", "\n".join(f"x{i}" for i in range(2500)))
    assert buf.max_lines == 2000
    assert len(buf) == 2000
    assert buf.read_from(0)[0][0] == "[out] x500"


def test_rejects_zero_capacity():
    with pytest.raises(ValueError):
        LogBuffer(max_lines=0)
