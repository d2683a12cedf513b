"""
Tests for domain/specifications.py - composable member predicates.
"""
from datetime import date

import pytest

from domain.specifications import (
    BelongsToFamilySpec,
    FamilyMemberSpecBuilder,
    InPolygamousHouseSpec,
    IsArchivedSpec,
    IsDeceasedSpec,
    IsIdentityVerifiedSpec,
    IsMinorSpec,
    IsPotentialDependantSpec,
)


@pytest.fixture
def household(make_member, minor, verified_adult):
    deceased = make_member(first_name="Mwangi", gender="MALE", date_of_death=date(2021, 8, 8))
    cousin = make_member(family_id="fam-002", first_name="Akinyi")
    verified_adult.assign_to_polygamous_house("house-1", 1)
    return {
        "minor": minor,
        "wife": verified_adult,
        "deceased": deceased,
        "cousin": cousin,
    }


# =============================================================================
# Single Specification Tests
# =============================================================================

class TestStatusSpecifications:

    def test_is_minor(self, household):
        spec = IsMinorSpec()
        assert spec.is_satisfied_by(household["minor"])
        assert not spec.is_satisfied_by(household["wife"])

    def test_is_deceased_and_archived(self, household):
        assert IsDeceasedSpec().is_satisfied_by(household["deceased"])
        assert IsArchivedSpec().is_satisfied_by(household["deceased"])
        assert not IsArchivedSpec().is_satisfied_by(household["wife"])

    def test_identity_verified(self, household):
        assert IsIdentityVerifiedSpec().is_satisfied_by(household["wife"])
        assert not IsIdentityVerifiedSpec().is_satisfied_by(household["cousin"])

    def test_potential_dependant_excludes_deceased(self, household):
        spec = IsPotentialDependantSpec()
        assert spec.is_satisfied_by(household["minor"])
        assert not spec.is_satisfied_by(household["deceased"])

    def test_membership(self, household):
        assert BelongsToFamilySpec("fam-002").is_satisfied_by(household["cousin"])
        assert InPolygamousHouseSpec("house-1").is_satisfied_by(household["wife"])
        assert not InPolygamousHouseSpec("house-2").is_satisfied_by(household["wife"])


# =============================================================================
# Composition Tests
# =============================================================================

class TestComposition:

    def test_operators(self, household):
        spec = BelongsToFamilySpec("fam-001") & ~IsDeceasedSpec()
        matched = [k for k, m in household.items() if spec.is_satisfied_by(m)]
        assert sorted(matched) == ["minor", "wife"]

    def test_or(self, household):
        spec = IsMinorSpec() | IsDeceasedSpec()
        assert spec.is_satisfied_by(household["minor"])
        assert spec.is_satisfied_by(household["deceased"])
        assert not spec.is_satisfied_by(household["cousin"])

    def test_query_params(self):
        spec = BelongsToFamilySpec("fam-001") & ~IsDeceasedSpec()
        assert spec.to_query_params() == {
            "$and": [{"family_id": "fam-001"}, {"$not": {"life_state": "DECEASED"}}]
        }


class TestSpecBuilder:

    def test_empty_builder_matches_everything(self, household):
        spec = FamilyMemberSpecBuilder().build()
        assert all(spec.is_satisfied_by(m) for m in household.values())

    def test_living_active_verified_in_house(self, household):
        spec = (
            FamilyMemberSpecBuilder()
            .in_family("fam-001")
            .in_house("house-1")
            .living()
            .active()
            .verified()
            .build()
        )
        matched = [k for k, m in household.items() if spec.is_satisfied_by(m)]
        assert matched == ["wife"]

    def test_potential_dependant_minors(self, household):
        spec = FamilyMemberSpecBuilder().minors().potential_dependants().build()
        matched = [k for k, m in household.items() if spec.is_satisfied_by(m)]
        assert matched == ["minor"]
