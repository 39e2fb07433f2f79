"""Tests for spherical solid diffusion."""

import numpy as np
import pytest

from cell_simulator.core.diffusion import DiffusionModel
from cell_simulator.utils.validators import DiscretizationMismatchError

RADIUS_POS = 8.5e-6
RADIUS_NEG = 1.25e-5


class TestDiffusionModel:
    """Test suite for DiffusionModel."""

    @pytest.fixture
    def model(self):
        return DiffusionModel.spherical(5, RADIUS_POS, RADIUS_NEG)

    def test_shapes(self, model):
        """Operators have the node count's shapes."""
        assert model.n_nodes == 5
        assert model.a_matrix.shape == (5, 5)
        assert model.b_vector.shape == (5,)
        assert model.edges.shape == (6,)
        assert model.weights.sum() == pytest.approx(1.0)

    def test_arrays_are_read_only(self, model):
        """The operators cannot be modified after construction."""
        with pytest.raises(ValueError):
            model.a_matrix[0, 0] = 1.0
        with pytest.raises(ValueError):
            model.b_vector[0] = 1.0

    def test_fields_are_frozen(self, model):
        """Fields cannot be reassigned."""
        with pytest.raises(AttributeError):
            model.radius_pos = 1e-6

    def test_uniform_profile_is_steady(self, model):
        """A uniform profile without flux does not change."""
        c = np.full(5, 20000.0)
        result = model.advance(c, 0.0, 7e-14, RADIUS_NEG, 100.0)
        np.testing.assert_allclose(result, c)

    def test_mass_conservation_without_flux(self, model):
        """Diffusion redistributes lithium without changing the total."""
        c = np.linspace(10000.0, 25000.0, 5)
        result = model.advance(c, 0.0, 7e-14, RADIUS_NEG, 500.0)
        assert model.average_concentration(result) == pytest.approx(
            model.average_concentration(c), rel=1e-10
        )
        # Gradient relaxes
        assert np.ptp(result) < np.ptp(c)

    def test_flux_changes_average(self, model):
        """The average changes by -3 j dt / R for a surface flux j."""
        c = np.full(5, 20000.0)
        flux = 1e-5
        dt = 10.0
        result = model.advance(c, flux, 7e-14, RADIUS_NEG, dt)
        expected = 20000.0 - 3.0 * flux * dt / RADIUS_NEG
        assert model.average_concentration(result) == pytest.approx(expected, rel=1e-10)

    def test_large_step_is_stable(self, model):
        """Long steps are split into stable sub-steps."""
        c = np.linspace(10000.0, 25000.0, 5)
        result = model.advance(c, 0.0, 7e-14, RADIUS_NEG, 1e5)
        assert np.all(np.isfinite(result))
        np.testing.assert_allclose(result, model.average_concentration(c), rtol=1e-6)

    def test_advance_does_not_modify_input(self, model):
        """advance returns a new array."""
        c = np.linspace(10000.0, 25000.0, 5)
        original = c.copy()
        model.advance(c, 1e-5, 7e-14, RADIUS_NEG, 10.0)
        np.testing.assert_array_equal(c, original)

    def test_advance_shape_mismatch(self, model):
        """A profile of the wrong length is rejected."""
        with pytest.raises(DiscretizationMismatchError):
            model.advance(np.zeros(4), 0.0, 7e-14, RADIUS_NEG, 1.0)

    def test_surface_concentration(self, model):
        """Outward flux lowers the surface below the outer node."""
        c = np.full(5, 20000.0)
        assert model.surface_concentration(c, 0.0, 7e-14, RADIUS_NEG) == pytest.approx(20000.0)
        assert model.surface_concentration(c, 1e-5, 7e-14, RADIUS_NEG) < 20000.0
        assert model.surface_concentration(c, -1e-5, 7e-14, RADIUS_NEG) > 20000.0

    def test_cumulative_average(self, model):
        """The last cumulative average is the particle average."""
        c = np.linspace(10000.0, 25000.0, 5)
        cumulative = model.cumulative_average(c)
        assert cumulative[0] == pytest.approx(c[0])
        assert cumulative[-1] == pytest.approx(model.average_concentration(c))

    def test_inconsistent_operators(self):
        """Operators with mismatched shapes are rejected."""
        with pytest.raises(DiscretizationMismatchError):
            DiffusionModel(
                edges=np.linspace(0, 1, 6),
                a_matrix=np.zeros((4, 4)),
                b_vector=np.zeros(5),
                radius_pos=RADIUS_POS,
                radius_neg=RADIUS_NEG,
            )

    def test_invalid_node_count(self):
        """At least one node is needed."""
        with pytest.raises(ValueError):
            DiffusionModel.spherical(0, RADIUS_POS, RADIUS_NEG)

    def test_save_and_load(self, model, tmp_path):
        """A saved model loads back with identical operators."""
        path = tmp_path / "diffusion.npz"
        model.save(path)
        loaded = DiffusionModel.load(path)

        assert loaded.n_nodes == model.n_nodes
        assert loaded.radius_pos == model.radius_pos
        assert loaded.radius_neg == model.radius_neg
        np.testing.assert_array_equal(loaded.a_matrix, model.a_matrix)
        np.testing.assert_array_equal(loaded.b_vector, model.b_vector)

    def test_load_missing_file(self, tmp_path):
        """Loading a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            DiffusionModel.load(tmp_path / "missing.npz")
