import pytest

from src.society_fines.society_fines.common.identifiers import normalize_member_id, normalize_member_ids
from src.society_fines.society_fines.core.exceptions import ValidationError
from src.society_fines.society_fines.fines.diff import diff_absentees, present_members


def test_diff_treats_numeric_strings_as_same_member():
    diff = diff_absentees([206, "15"], ["206", 15, 31])

    assert diff.newly_absent == (31,)
    assert diff.newly_present == ()


def test_diff_reports_both_directions_and_affected_union():
    diff = diff_absentees([1, 2, 3], [3, 4])

    assert diff.newly_absent == (4,)
    assert diff.newly_present == (1, 2)
    assert diff.affected == (1, 2, 4)
    assert diff.has_changes


def test_identical_rosters_have_no_changes():
    diff = diff_absentees([5, 6], ["6", "5"])

    assert not diff.has_changes
    assert diff.affected == ()


def test_present_members_keeps_roster_order():
    assert present_members([1, 2, 3, 4], ["2", 4]) == [1, 3]


def test_normalize_accepts_assignment_objects():
    assert normalize_member_id({"member_id": "42"}) == 42
    assert normalize_member_ids([3, "3", {"member_id": 3}, 7.0]) == [3, 7]


@pytest.mark.parametrize("bad", [True, "abc", 1.5, {"id": 1}, None, "--5", "\u00b2", "1_000", "12a"])
def test_normalize_rejects_garbage(bad):
    with pytest.raises(ValidationError):
        normalize_member_id(bad)


def test_normalize_rejects_non_list_roster():
    with pytest.raises(ValidationError):
        normalize_member_ids("1,2,3")
