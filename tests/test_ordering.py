"""Tests for commit log parsing and descendants-first ordering."""

from aur_fleet.core import CommitRecord, order_commits, parse_commit_log


def _record(commit_id, parents=(), timestamp=0, message=""):
    return CommitRecord(
        id=commit_id, parents=tuple(parents), timestamp=timestamp, message=message or commit_id
    )


def _ids(records):
    return [r.id for r in records]


def test_linear_history_newest_first():
    records = [
        _record("a", timestamp=1),
        _record("b", ["a"], timestamp=2),
        _record("c", ["b"], timestamp=3),
    ]
    assert _ids(order_commits(records)) == ["c", "b", "a"]


def test_input_order_does_not_matter():
    records = [
        _record("c", ["b"], timestamp=3),
        _record("a", timestamp=1),
        _record("b", ["a"], timestamp=2),
    ]
    assert _ids(order_commits(reversed(records))) == _ids(order_commits(records))


def test_children_precede_parents_even_with_skewed_clocks():
    # "child" was committed with an older timestamp than its parent
    records = [
        _record("parent", ["base"], timestamp=100),
        _record("child", ["parent"], timestamp=10),
    ]
    assert _ids(order_commits(records)) == ["child", "parent"]


def test_merge_orders_branches_by_timestamp():
    #   base - left ----\
    #       \- right --- merge
    records = [
        _record("left", ["base"], timestamp=5),
        _record("right", ["base"], timestamp=7),
        _record("merge", ["left", "right"], timestamp=9),
    ]
    assert _ids(order_commits(records)) == ["merge", "right", "left"]


def test_timestamp_ties_fall_back_to_id():
    records = [
        _record("bbb", ["base"], timestamp=5),
        _record("aaa", ["base"], timestamp=5),
        _record("merge", ["aaa", "bbb"], timestamp=6),
    ]
    assert _ids(order_commits(records)) == ["merge", "aaa", "bbb"]


def test_parents_outside_the_set_are_ignored():
    records = [_record("x", ["outside-1", "outside-2"], timestamp=1)]
    assert _ids(order_commits(records)) == ["x"]


def test_empty():
    assert order_commits([]) == []


def test_parse_commit_log():
    output = (
        "1111\x1f0000\x1f1700000060\x1fadd feature\n\n\0"
        "2222\x1f1111 3333\x1f1700000120\x1fMerge branch\n\nwith body\n\0"
    )
    records = parse_commit_log(output)
    assert records == [
        CommitRecord(id="1111", parents=("0000",), timestamp=1700000060, message="add feature"),
        CommitRecord(
            id="2222",
            parents=("1111", "3333"),
            timestamp=1700000120,
            message="Merge branch\n\nwith body",
        ),
    ]


def test_parse_root_commit_has_no_parents():
    records = parse_commit_log("abcd\x1f\x1f1\x1finitial\n\0")
    assert records[0].parents == ()


def test_parse_empty_output():
    assert parse_commit_log("") == []
