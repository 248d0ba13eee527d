from datetime import date

import pytest

from conftest import TODAY, born, child, parent, spouse
from portal.core.constants import Gender, ParentSet, Relationship
from portal.validation.enrollment_rules import (
    check_family_candidate,
    check_parent_candidate,
    validate_enrollment,
)
from portal.validation.models import FamilyMember, Parent, ParentalCoverageSelection

PARENTS = ParentalCoverageSelection(selected=True, parent_set=ParentSet.PARENTS)
IN_LAWS = ParentalCoverageSelection(selected=True, parent_set=ParentSet.PARENTS_IN_LAW)
NO_COVER = ParentalCoverageSelection()


class TestFamilyCandidate:
    def test_valid_spouse(self):
        assert check_family_candidate([], spouse(), TODAY).valid

    def test_missing_fields_reported_alone(self):
        result = check_family_candidate([], FamilyMember(), TODAY)
        assert result.errors == [
            "Name is required",
            "Relationship is required",
            "Date of birth is required",
        ]

    def test_parent_relationship_not_allowed(self):
        candidate = FamilyMember("Ravi", Relationship.FATHER, born(60), Gender.MALE)
        assert check_family_candidate([], candidate, TODAY).errors == ["Invalid relationship: Father"]

    def test_second_spouse(self):
        result = check_family_candidate([spouse()], spouse(31, "Meera"), TODAY)
        assert result.errors == ["You've already added a Spouse", "Only one spouse can be covered."]

    def test_third_child(self):
        result = check_family_candidate([child(), child(3)], child(1), TODAY)
        assert result.errors == ["Maximum 2 children allowed."]

    def test_child_turning_26_tomorrow_is_still_25(self):
        candidate = FamilyMember("Kabir", Relationship.CHILD, date(1998, 6, 16), Gender.MALE)
        assert check_family_candidate([], candidate, TODAY).valid

    def test_child_aged_26(self):
        result = check_family_candidate([], child(26), TODAY)
        assert result.errors == ["Child must be between 0-25 years."]

    def test_newborn_child(self):
        assert check_family_candidate([], child(0), TODAY).valid

    def test_underage_spouse(self):
        result = check_family_candidate([], spouse(17), TODAY)
        assert result.errors == ["Spouse must be between 18-80 years."]


class TestParentCandidate:
    def test_valid_father(self):
        assert check_parent_candidate([], parent(Relationship.FATHER), PARENTS, TODAY).valid

    def test_in_law_outside_selected_set(self):
        result = check_parent_candidate([], parent(Relationship.MOTHER_IN_LAW), PARENTS, TODAY)
        assert result.errors == ["Mother-in-law cannot be added under Parents coverage"]

    def test_parent_outside_in_law_set(self):
        result = check_parent_candidate([], parent(Relationship.FATHER), IN_LAWS, TODAY)
        assert result.errors == ["Father cannot be added under Parents-in-law coverage"]

    def test_duplicate_relationship(self):
        result = check_parent_candidate(
            [parent(Relationship.MOTHER)], parent(Relationship.MOTHER, name="Asha"), PARENTS, TODAY
        )
        assert result.errors == ["You've already added a Mother", "Cannot add more than one Mother."]

    def test_third_parent(self):
        existing = [parent(Relationship.FATHER), parent(Relationship.MOTHER)]
        result = check_parent_candidate(existing, parent(Relationship.FATHER_IN_LAW), PARENTS, TODAY)
        assert "Maximum 2 parents can be added." in result.errors

    def test_family_relationship_not_allowed(self):
        candidate = Parent("Priya", Relationship.SPOUSE, born(30), Gender.FEMALE)
        result = check_parent_candidate([], candidate, PARENTS, TODAY)
        assert result.errors == ["Invalid relationship: Spouse"]

    @pytest.mark.parametrize("age, valid", [(17, False), (18, True), (80, True), (81, False)])
    def test_age_band(self, age, valid):
        result = check_parent_candidate([], parent(Relationship.FATHER, age), PARENTS, TODAY)
        assert result.valid is valid

    def test_coverage_not_selected(self):
        result = check_parent_candidate([], parent(Relationship.FATHER), NO_COVER, TODAY)
        assert result.errors == ["Select parental coverage before adding parents"]

    def test_without_chosen_set_any_parent_relationship_passes_domain_check(self):
        selection = ParentalCoverageSelection(selected=True)
        assert check_parent_candidate([], parent(Relationship.FATHER_IN_LAW), selection, TODAY).valid


class TestValidateEnrollment:
    def test_family_only_without_parental_cover(self):
        result = validate_enrollment([spouse(), child()], [], NO_COVER, TODAY)
        assert result.valid

    def test_empty_enrollment_is_valid(self):
        assert validate_enrollment([], [], NO_COVER, TODAY).valid

    def test_full_enrollment(self):
        result = validate_enrollment(
            [spouse(), child()],
            [parent(Relationship.FATHER), parent(Relationship.MOTHER)],
            PARENTS,
            TODAY,
        )
        assert result.valid

    def test_parents_without_selection(self):
        result = validate_enrollment([], [parent(Relationship.FATHER)], NO_COVER, TODAY)
        assert result.errors == ["Parents can only be added when parental coverage is selected"]

    def test_selected_without_set_or_parents(self):
        result = validate_enrollment([], [], ParentalCoverageSelection(selected=True), TODAY)
        assert result.errors == [
            "Please select which parents to cover (Parents or Parents-in-law)",
            "Please add at least one parent for parental coverage",
        ]

    def test_domain_mismatch(self):
        result = validate_enrollment([], [parent(Relationship.FATHER_IN_LAW)], PARENTS, TODAY)
        assert result.errors == [
            'For "Parents" coverage, only Father and Mother relationships are allowed'
        ]

    def test_in_law_domain_mismatch(self):
        result = validate_enrollment([], [parent(Relationship.MOTHER)], IN_LAWS, TODAY)
        assert result.errors == [
            'For "Parents-in-law" coverage, only Father-in-law and Mother-in-law relationships are allowed'
        ]

    def test_prefixed_record_errors(self):
        result = validate_enrollment(
            [FamilyMember(relationship=Relationship.CHILD, date_of_birth=born(30))],
            [Parent("Ravi", Relationship.FATHER, None, Gender.MALE)],
            PARENTS,
            TODAY,
        )
        assert result.errors == [
            "Family member 1: Name is required",
            "Family member 1: Child must be between 0-25 years.",
            "Parent 1: Date of birth is required",
        ]

    def test_composition_rechecked(self):
        result = validate_enrollment([spouse(), spouse(40, "Meera")], [], NO_COVER, TODAY)
        assert result.errors == ["Only one spouse can be covered."]

    def test_age_rechecked_at_submission(self):
        result = validate_enrollment([], [parent(Relationship.MOTHER, 85)], PARENTS, TODAY)
        assert result.errors == ["Parent 1: Mother must be between 18-80 years."]


def test_deselecting_cover_drops_parent_set():
    selection = ParentalCoverageSelection(selected=False, parent_set=ParentSet.PARENTS)
    assert selection.parent_set is None
