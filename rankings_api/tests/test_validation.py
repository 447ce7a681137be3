from __future__ import annotations

import pytest

from rankings_api.rankings.errors import (
    InvalidLimit,
    InvalidPage,
    InvalidRegion,
    InvalidSubject,
    InvalidWeightSubjects,
    InvalidWeightValues,
    InvalidWeightsFormat,
    InvalidYear,
    ValidationFailed,
    WeightsNotNormalized,
)
from rankings_api.rankings.validation import (
    VALID_SUBJECTS,
    VALID_WEIGHT_SUBJECTS,
    validate_pagination,
    validate_region,
    validate_subject,
    validate_weights,
    validate_year,
)


# ── Subject ──────────────────────────────────────────────────────────────


class TestValidateSubject:
    def test_absent_returns_none(self):
        assert validate_subject(None) is None
        assert validate_subject("") is None

    @pytest.mark.parametrize("subject", VALID_SUBJECTS)
    def test_valid_subject_maps_to_score_field(self, subject):
        assert validate_subject(subject) == f"{subject} SCORE"

    def test_match_is_case_sensitive(self):
        with pytest.raises(InvalidSubject):
            validate_subject("ar")

    def test_error_lists_valid_codes(self):
        with pytest.raises(InvalidSubject) as exc_info:
            validate_subject("XYZ")
        message = str(exc_info.value)
        assert message.startswith("Invalid subject. Must be one of:")
        assert "AR, ER, FSR" in message
        assert "Overall" in message

    def test_weight_subjects_exclude_overall(self):
        assert "Overall" not in VALID_WEIGHT_SUBJECTS
        assert len(VALID_WEIGHT_SUBJECTS) == 10


# ── Region / Year ────────────────────────────────────────────────────────


class TestValidateRegion:
    def test_absent_returns_none(self):
        assert validate_region(None) is None

    def test_returns_canonical_casing(self):
        assert validate_region("middle east") == "Middle East"
        assert validate_region("NORTH AMERICA") == "North America"
        assert validate_region("Asia") == "Asia"

    def test_unknown_region(self):
        with pytest.raises(InvalidRegion) as exc_info:
            validate_region("Atlantis")
        assert "Invalid region" in str(exc_info.value)

    def test_partial_name_is_rejected(self):
        with pytest.raises(InvalidRegion):
            validate_region("East")


class TestValidateYear:
    def test_absent_returns_none(self):
        assert validate_year(None) is None

    def test_valid_years(self):
        assert validate_year("2025") == "2025"
        assert validate_year("2026") == "2026"

    def test_unknown_year(self):
        with pytest.raises(InvalidYear) as exc_info:
            validate_year("2024")
        assert str(exc_info.value) == "Invalid year. Must be one of: 2025, 2026"


# ── Pagination ───────────────────────────────────────────────────────────


class TestValidatePagination:
    def test_defaults(self):
        assert validate_pagination(None, None) == {"page": 1, "limit": 10}

    def test_page_zero_falls_back_to_first_page(self):
        assert validate_pagination("0", "5") == {"page": 1, "limit": 5}

    def test_negative_page(self):
        with pytest.raises(InvalidPage):
            validate_pagination("-1", "10")

    def test_zero_limit(self):
        with pytest.raises(InvalidLimit):
            validate_pagination("1", "0")

    def test_limit_out_of_range(self):
        with pytest.raises(InvalidLimit):
            validate_pagination("1", "101")
        with pytest.raises(InvalidLimit):
            validate_pagination("1", "-5")

    def test_limit_bounds_are_inclusive(self):
        assert validate_pagination("1", "1") == {"page": 1, "limit": 1}
        assert validate_pagination("2", "100") == {"page": 2, "limit": 100}

    def test_non_numeric_strings_fall_back_to_defaults(self):
        assert validate_pagination("abc", "xyz") == {"page": 1, "limit": 10}
        assert validate_pagination("1.5", "2.5") == {"page": 1, "limit": 10}

    def test_accepts_integers(self):
        assert validate_pagination(3, 20) == {"page": 3, "limit": 20}

    def test_overlong_digit_strings_fall_back_to_defaults(self):
        huge = "1" + "0" * 5000
        assert validate_pagination(huge, None) == {"page": 1, "limit": 10}
        assert validate_pagination("2", huge) == {"page": 2, "limit": 10}

    def test_errors_are_validation_failures(self):
        with pytest.raises(ValidationFailed):
            validate_pagination("-3", None)


# ── Weights ──────────────────────────────────────────────────────────────


class TestValidateWeights:
    def test_absent_returns_none(self):
        assert validate_weights(None, None) is None
        assert validate_weights("", {}) is None

    def test_json_weights(self):
        assert validate_weights('{"AR": 60, "ER": 40}') == {"AR": 60, "ER": 40}

    def test_individual_weight_params(self):
        result = validate_weights(None, {"weight_AR": "70", "weight_SUS": "30"})
        assert result == {"AR": 70.0, "SUS": 30.0}

    def test_json_and_params_are_merged(self):
        result = validate_weights('{"AR": 50}', {"weight_ER": "50"})
        assert result == {"AR": 50, "ER": 50.0}

    def test_params_override_json(self):
        result = validate_weights('{"AR": 10, "ER": 90}', {"weight_AR": "10.0", "weight_ER": "90"})
        assert result == {"AR": 10.0, "ER": 90.0}

    def test_unrecognised_params_are_ignored(self):
        assert validate_weights(None, {"weight_Overall": "100", "weight_XYZ": "5", "page": "2"}) is None

    def test_precision_is_preserved(self):
        result = validate_weights('{"AR": 33.33, "ER": 33.33, "FSR": 33.34}')
        assert result == {"AR": 33.33, "ER": 33.33, "FSR": 33.34}

    def test_total_within_tolerance(self):
        assert validate_weights('{"AR": 50.005, "ER": 50}') == {"AR": 50.005, "ER": 50}

    def test_malformed_json(self):
        with pytest.raises(InvalidWeightsFormat) as exc_info:
            validate_weights("{AR: 50")
        assert str(exc_info.value) == "Invalid weights JSON format"

    def test_json_must_be_an_object(self):
        with pytest.raises(InvalidWeightsFormat):
            validate_weights("[50, 50]")

    def test_invalid_subjects_are_named(self):
        with pytest.raises(InvalidWeightSubjects) as exc_info:
            validate_weights('{"AR": 50, "Overall": 25, "XYZ": 25}')
        message = str(exc_info.value)
        assert "Invalid weight subjects: Overall, XYZ" in message
        assert "Valid subjects: AR, ER" in message

    def test_out_of_range_values_are_enumerated(self):
        with pytest.raises(InvalidWeightValues) as exc_info:
            validate_weights('{"AR": 150, "ER": -50}', None)
        message = str(exc_info.value)
        assert "AR=150" in message
        assert "ER=-50" in message
        assert message.endswith("Weights must be numbers between 0 and 100.")

    def test_integer_too_large_for_float(self):
        huge = "1" + "0" * 400
        with pytest.raises(InvalidWeightValues) as exc_info:
            validate_weights('{"AR": ' + huge + ', "ER": 50}')
        assert f"AR={huge}" in str(exc_info.value)

    def test_unparseable_param_value(self):
        with pytest.raises(InvalidWeightValues) as exc_info:
            validate_weights(None, {"weight_AR": "abc", "weight_ER": "100"})
        assert "AR=nan" in str(exc_info.value)

    def test_non_numeric_json_values(self):
        with pytest.raises(InvalidWeightValues):
            validate_weights('{"AR": "50", "ER": 50}')
        with pytest.raises(InvalidWeightValues):
            validate_weights('{"AR": true, "ER": 99}')

    def test_total_must_be_100(self):
        with pytest.raises(WeightsNotNormalized) as exc_info:
            validate_weights('{"AR": 60, "ER": 30}')
        assert str(exc_info.value) == "Total weights must equal 100%. Current total: 90.00%"

    def test_total_just_outside_tolerance(self):
        with pytest.raises(WeightsNotNormalized):
            validate_weights('{"AR": 50.02, "ER": 50}')
