"""Tests for particle stress."""

import numpy as np
import pytest

from cell_simulator.core.degradation import CrackModel, DegradationSelector, LAMModel
from cell_simulator.core.diffusion import DiffusionModel
from cell_simulator.core.stress import StressModel, StressParameters


@pytest.fixture
def diffusion():
    return DiffusionModel.spherical(5, 8.5e-6, 1.25e-5)


class TestStressModel:
    """Test suite for StressModel."""

    @pytest.fixture
    def stress(self):
        return StressModel(StressParameters())

    def test_flags_default_off(self, stress):
        """A new model computes nothing."""
        assert not stress.needs_dai
        assert not stress.needs_laresgoiti

    def test_flags_are_read_only(self, stress):
        """The flags can only change through configure."""
        with pytest.raises(AttributeError):
            stress.needs_dai = True

    def test_configure_from_selector(self, stress):
        """configure derives the flags from the selected models."""
        stress.configure(DegradationSelector(crack=(CrackModel.DAI,)))
        assert stress.needs_dai
        assert not stress.needs_laresgoiti

        stress.configure(DegradationSelector(crack=(CrackModel.LARESGOITI,)))
        assert not stress.needs_dai
        assert stress.needs_laresgoiti

        stress.configure(DegradationSelector(lam=(LAMModel.DAI,)))
        assert stress.needs_dai

        stress.configure(DegradationSelector())
        assert not stress.needs_dai
        assert not stress.needs_laresgoiti

    def test_uniform_profile_has_no_dai_stress(self, stress, diffusion):
        """Without a concentration gradient there is no diffusion stress."""
        c = np.full(5, 20000.0)
        hydrostatic, tangential = StressModel.dai_stress(diffusion, c, 20000.0, 3.17e-6, 15e9, 0.3)
        assert hydrostatic == pytest.approx(0.0, abs=1e-12)
        assert tangential == pytest.approx(0.0, abs=1e-12)

    def test_gradient_gives_dai_stress(self, stress, diffusion):
        """A lithium-rich surface puts the surface in compression."""
        c = np.linspace(10000.0, 20000.0, 5)
        hydrostatic, tangential = StressModel.dai_stress(diffusion, c, 21000.0, 3.17e-6, 15e9, 0.3)
        assert hydrostatic > 0
        assert tangential < 0

    def test_gating_leaves_unused_theory_empty(self, stress, diffusion):
        """Only the theories a selected model consumes are computed."""
        c_pos = np.full(5, 35000.0)
        c_neg = np.full(5, 15000.0)

        result = stress.compute(diffusion, c_pos, c_neg, 35000.0, 15000.0, 30555.0)
        assert result.dai is None
        assert result.laresgoiti is None

        stress.configure(DegradationSelector(crack=(CrackModel.DAI,)))
        result = stress.compute(diffusion, c_pos, c_neg, 35000.0, 15000.0, 30555.0)
        assert result.dai is not None
        assert result.laresgoiti is None

        stress.configure(DegradationSelector(crack=(CrackModel.LARESGOITI,)))
        result = stress.compute(diffusion, c_pos, c_neg, 35000.0, 15000.0, 30555.0)
        assert result.dai is None
        assert result.laresgoiti is not None

    def test_laresgoiti_lookup(self, stress):
        """The Laresgoiti stress interpolates its table."""
        assert stress.laresgoiti_stress(0.0) == pytest.approx(0.0)
        assert stress.laresgoiti_stress(0.2) == pytest.approx(14.5)
        assert stress.laresgoiti_stress(0.25) == pytest.approx(13.75)
