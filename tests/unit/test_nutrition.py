"""Unit tests for the calorie calculator."""

import pytest

from coachbuilder.core.nutrition import calculate_bmr, calculate_targets


class TestCalculateBmr:
    """Mifflin-St Jeor with a per-gender constant."""

    def test_male(self):
        # 10*80 + 6.25*180 - 5*30 + 5
        assert calculate_bmr(30, 180, 80, "Male") == 1780

    def test_female(self):
        assert calculate_bmr(30, 180, 80, "female") == 1780 - 5 - 161

    def test_other_sits_between(self):
        assert calculate_bmr(30, 180, 80, "Other") == 1780 - 5 - 78

    def test_unrecognised_gender_uses_blended_offset(self):
        assert calculate_bmr(30, 180, 80, "prefer not to say") == calculate_bmr(30, 180, 80, "other")


class TestCalculateTargets:

    def test_sedentary_maintain_male(self):
        targets = calculate_targets(30, 180, 80, "Male", "sedentary", "maintain")

        assert targets.bmr == 1780
        assert targets.tdee == pytest.approx(2136)
        assert targets.calories == 2136
        assert targets.protein_g == 144
        assert targets.label == "2136 kcal | 144g Protein"

    def test_lose_applies_deficit_and_protein(self):
        targets = calculate_targets(30, 180, 80, "Male", "sedentary", "lose")
        assert targets.calories == 2136 - 500
        assert targets.protein_g == 176

    def test_gain_applies_surplus(self):
        targets = calculate_targets(30, 180, 80, "Male", "moderate", "gain")
        # 1780 * 1.55 = 2759
        assert targets.calories == 2759 + 300
        assert targets.protein_g == 160

    def test_rounds_half_up(self):
        # protein 62.5 * 1.8 = 112.5
        targets = calculate_targets(30, 160, 62.5, "female")
        assert targets.protein_g == 113

    def test_unknown_activity_level(self):
        with pytest.raises(ValueError, match="activity level"):
            calculate_targets(30, 180, 80, "male", activity_level="couch")

    def test_unknown_goal(self):
        with pytest.raises(ValueError, match="goal"):
            calculate_targets(30, 180, 80, "male", goal="bulk")

    def test_non_positive_inputs(self):
        with pytest.raises(ValueError, match="positive"):
            calculate_targets(0, 180, 80, "male")
