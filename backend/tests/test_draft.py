import pytest

from conftest import POLICY_END, POLICY_START, TODAY, child, parent, spouse
from portal.core.constants import ParentSet, Relationship
from portal.enrollment.draft import EnrollmentDraft, PolicyDates
from portal.premium.engine import NO_COVERAGE_DESCRIPTION


@pytest.fixture
def draft() -> EnrollmentDraft:
    return EnrollmentDraft(PolicyDates(TODAY, POLICY_START, POLICY_END), today=TODAY)


def test_valid_member_is_added(draft):
    result = draft.add_family_member(spouse())
    assert result.valid
    assert len(draft.family_members) == 1


def test_invalid_member_leaves_draft_unchanged(draft):
    draft.add_family_member(spouse())
    result = draft.add_family_member(spouse(40, "Meera"))

    assert not result.valid
    assert [m.name for m in draft.family_members] == ["Priya"]


def test_remove_family_member_by_index(draft):
    draft.add_family_member(child(3, "Aarav"))
    draft.add_family_member(child(6, "Anaya"))

    removed = draft.remove_family_member(0)

    assert removed.name == "Aarav"
    assert [m.name for m in draft.family_members] == ["Anaya"]


@pytest.mark.parametrize("index", [-1, 0, 5])
def test_remove_out_of_range(draft, index):
    with pytest.raises(IndexError):
        draft.remove_family_member(index)


def test_parent_respects_selected_set(draft):
    draft.set_parental_coverage(True, ParentSet.PARENTS_IN_LAW)

    result = draft.add_parent(parent(Relationship.FATHER))

    assert result.errors == ["Father cannot be added under Parents-in-law coverage"]
    assert draft.parents == []


def test_parent_needs_coverage_selected(draft):
    result = draft.add_parent(parent(Relationship.FATHER))

    assert result.errors == ["Select parental coverage before adding parents"]
    assert draft.parents == []


def test_premium_follows_parent_count(draft):
    assert draft.premium_breakdown().total == 0

    draft.set_parental_coverage(True, ParentSet.PARENTS)
    draft.add_parent(parent(Relationship.FATHER))
    assert draft.premium_breakdown().total == 33942

    draft.add_parent(parent(Relationship.MOTHER))
    assert draft.premium_breakdown().total == 67884

    draft.remove_parent(1)
    assert draft.premium_breakdown().total == 33942


def test_deselecting_coverage_clears_parents(draft):
    draft.set_parental_coverage(True, ParentSet.PARENTS)
    draft.add_parent(parent(Relationship.FATHER))

    draft.set_parental_coverage(False)

    assert draft.parents == []
    assert draft.coverage.parent_set is None
    assert draft.covered_parent_count == 0
    assert draft.premium_breakdown().description == NO_COVERAGE_DESCRIPTION


def test_validate_runs_submission_rules(draft):
    draft.set_parental_coverage(True)
    assert draft.validate().errors == [
        "Please select which parents to cover (Parents or Parents-in-law)",
        "Please add at least one parent for parental coverage",
    ]
