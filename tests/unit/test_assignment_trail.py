"""配置の記録とやり直しのテスト"""
from timetable_engine.domain.services.csp.assignment_trail import AssignmentTrail


def test_push_updates_indexes(make_entry):
    trail = AssignmentTrail()
    entry = make_entry("e1", room_id="理科室", teacher_ids=("t1", "t2"))

    trail.push(entry)

    assert len(trail) == 1
    assert trail.class_occupied("1-1", "月", 1)
    assert list(trail.teacher_entries("t2", "月", 1)) == [entry]
    assert list(trail.room_entries("理科室", "月", 1)) == [entry]
    assert trail.teacher_load("t1") == 1
    assert trail.teacher_load("t2") == 1


def test_undo_to_restores_previous_state(make_entry):
    """マーク以降の配置と教員の確定を取り消す"""
    trail = AssignmentTrail()
    trail.push(make_entry("e1"))
    mark = trail.mark()

    trail.bind(("1-1", "math"), "t1")
    trail.push(make_entry("e2", day="火"))
    trail.push(make_entry("e3", day="水"))
    assert trail.teacher_load("t1") == 3

    trail.undo_to(mark)

    assert [e.id for e in trail.entries] == ["e1"]
    assert trail.bound_teacher(("1-1", "math")) is None
    assert trail.teacher_load("t1") == 1
    assert not trail.class_occupied("1-1", "火", 1)
    assert trail.class_occupied("1-1", "月", 1)


def test_snapshot_is_independent_copy(make_entry):
    trail = AssignmentTrail()
    trail.push(make_entry("e1"))

    snapshot = trail.snapshot()
    trail.undo_to(0)

    assert [e.id for e in snapshot] == ["e1"]
    assert trail.entries == []


def test_slot_entries_follow_push_and_undo(make_entry):
    """コマ単位の索引も巻き戻しに追従する"""
    trail = AssignmentTrail()
    first = make_entry("e1", class_id="1-1")
    trail.push(first)
    mark = trail.mark()
    trail.push(make_entry("e2", class_id="1-2", teacher_id="t2"))

    assert [e.id for e in trail.slot_entries("月", 1)] == ["e1", "e2"]

    trail.undo_to(mark)

    assert list(trail.slot_entries("月", 1)) == [first]
    assert list(trail.slot_entries("火", 1)) == []
