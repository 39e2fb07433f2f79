"""Tests for the physical cell state."""

import numpy as np
import pytest

from cell_simulator.core.state import PhysicalState, StateBounds
from cell_simulator.utils.validators import InvalidStateError


def make_state(**overrides):
    """Valid five-node state, with optional field overrides."""
    bounds = StateBounds(n_nodes=5, c_max_pos=51385.0, c_max_neg=30555.0)
    values = dict(
        c_pos=np.full(5, 35000.0),
        c_neg=np.full(5, 15000.0),
        temperature=298.15,
        sei_thickness=1e-9,
        lost_lithium=0.0,
        thickness_pos=70e-6,
        thickness_neg=73.5e-6,
        vol_frac_pos=0.5,
        vol_frac_neg=0.5,
        area_pos=3 * 0.5 / 8.5e-6,
        area_neg=3 * 0.5 / 1.25e-5,
        crack_surface=0.0087,
        diff_pos=8e-14,
        diff_neg=7e-14,
        resistance=0.0102,
        plated_thickness=0.0,
    )
    values.update(overrides)
    return PhysicalState(bounds=bounds, **values)


class TestPhysicalState:
    """Test suite for PhysicalState."""

    @pytest.fixture
    def state(self):
        return make_state()

    def test_valid_state_passes(self, state):
        """A physical state validates without raising."""
        state.validate()

    def test_validate_is_idempotent(self, state):
        """Validation does not modify the state."""
        before = state.to_dict()
        state.validate()
        state.validate()
        assert state.to_dict() == before

    @pytest.mark.parametrize(
        "field, value",
        [
            ("temperature", 0.0),
            ("temperature", 400.0),
            ("sei_thickness", 0.0),
            ("lost_lithium", -1.0),
            ("thickness_pos", 0.0),
            ("vol_frac_neg", 0.0),
            ("vol_frac_pos", 1.2),
            ("area_neg", -1.0),
            ("crack_surface", -1e-6),
            ("diff_pos", 0.0),
            ("resistance", np.nan),
            ("plated_thickness", -1e-9),
        ],
    )
    def test_out_of_bound_field_is_named(self, field, value):
        """Each out-of-bound field raises an error naming that field."""
        state = make_state(**{field: value})
        with pytest.raises(InvalidStateError) as exc_info:
            state.validate()
        assert exc_info.value.field == field

    def test_concentration_above_maximum(self):
        """A node above the maximum concentration is rejected."""
        c_neg = np.full(5, 15000.0)
        c_neg[-1] = 31000.0
        with pytest.raises(InvalidStateError) as exc_info:
            make_state(c_neg=c_neg).validate()
        assert exc_info.value.field == "c_neg"

    def test_negative_concentration(self):
        """A negative node concentration is rejected."""
        c_pos = np.full(5, 35000.0)
        c_pos[0] = -1.0
        with pytest.raises(InvalidStateError) as exc_info:
            make_state(c_pos=c_pos).validate()
        assert exc_info.value.field == "c_pos"

    def test_wrong_node_count(self):
        """A profile with the wrong length is rejected."""
        with pytest.raises(InvalidStateError) as exc_info:
            make_state(c_pos=np.full(4, 35000.0)).validate()
        assert exc_info.value.field == "c_pos"

    def test_first_failing_field_reported(self):
        """With several bad fields the first one checked is reported."""
        state = make_state(temperature=-1.0, resistance=-1.0)
        with pytest.raises(InvalidStateError) as exc_info:
            state.validate()
        assert exc_info.value.field == "temperature"

    def test_missing_bounds(self):
        """A state without bounds cannot be validated."""
        state = make_state()
        state.bounds = None
        with pytest.raises(InvalidStateError):
            state.validate()

    def test_set_concentrations_from_fraction(self, state):
        """Fractions fill both profiles uniformly."""
        state.set_concentrations_from_fraction(0.6, 0.4)
        np.testing.assert_allclose(state.c_pos, 0.6 * 51385.0)
        np.testing.assert_allclose(state.c_neg, 0.4 * 30555.0)
        assert state.c_pos.shape == (5,)
        state.validate()

    @pytest.mark.parametrize("frac_pos, frac_neg", [(-0.1, 0.5), (0.5, 1.1)])
    def test_set_concentrations_rejects_bad_fraction(self, state, frac_pos, frac_neg):
        """Fractions outside [0, 1] are rejected."""
        with pytest.raises(ValueError):
            state.set_concentrations_from_fraction(frac_pos, frac_neg)

    def test_initialize_validates(self):
        """initialize raises for an unphysical value."""
        state = make_state()
        values = state.to_dict()
        values["sei_thickness"] = 0.0
        with pytest.raises(InvalidStateError) as exc_info:
            PhysicalState.initialize(bounds=state.bounds, **values)
        assert exc_info.value.field == "sei_thickness"

    def test_copy_is_independent(self, state):
        """Mutating a copy leaves the original untouched."""
        clone = state.copy()
        clone.c_pos[0] = 0.0
        clone.sei_thickness = 2e-9
        assert state.c_pos[0] == 35000.0
        assert state.sei_thickness == 1e-9

    def test_to_dict_is_plain(self, state):
        """to_dict returns plain Python values."""
        data = state.to_dict()
        assert isinstance(data["c_pos"], list)
        assert len(data["c_neg"]) == 5
        assert data["temperature"] == 298.15
