"""Tests for the radial-basis regression."""

import numpy as np
import pytest

from flight_eda.config import RegressionConfig
from flight_eda.errors import DegenerateRegressionError
from flight_eda.regression import RBFRegression, design_matrix, make_knots


class TestBasis:
    """Tests for knots and the design matrix."""

    def test_knots_span_range(self):
        """Test knots are evenly spaced from min to max."""
        knots = make_knots([90.0, 0.0, 45.0, 30.0], 4)

        np.testing.assert_allclose(knots, [0.0, 30.0, 60.0, 90.0])

    def test_design_matrix(self):
        """Test bias column plus one Gaussian column per knot."""
        X = design_matrix([0.0, 50.0], [0.0, 50.0], bandwidth=50.0)

        assert X.shape == (2, 3)
        np.testing.assert_allclose(X[:, 0], [1.0, 1.0])
        np.testing.assert_allclose(X[0, 1:], [1.0, np.exp(-1.0)])
        np.testing.assert_allclose(X[1, 1:], [np.exp(-1.0), 1.0])


class TestRBFRegression:
    """Tests for RBFRegression."""

    def test_linear_truth_at_knots(self):
        """Test an exactly determined fit reproduces a line at the knots."""
        x = np.array([0.0, 30.0, 45.0, 60.0, 90.0])
        y = 2.0 + 0.5 * x

        fit = RBFRegression(knot_count=4, bandwidth=50.0).fit(x, y)

        np.testing.assert_allclose(fit.predict(fit.knots), 2.0 + 0.5 * fit.knots, atol=1e-6)

    def test_overdetermined_recovers_coefficients(self):
        """Test many points generated from the basis give back its coefficients."""
        x = np.linspace(0.0, 100.0, 40)
        beta = np.array([1.0, 3.0, -2.0, 0.5, 4.0])
        y = design_matrix(x, make_knots(x, 4), 50.0) @ beta

        fit = RBFRegression(knot_count=4, bandwidth=50.0).fit(x, y)

        np.testing.assert_allclose(fit.coefficients, beta, atol=1e-6)

    def test_overdetermined_wide_bandwidth_line(self):
        """Test a wide bandwidth approximates a line at points other than the knots."""
        x = np.linspace(0.0, 100.0, 40)
        y = 2.0 + 0.5 * x

        fit = RBFRegression(knot_count=4, bandwidth=500.0).fit(x, y)

        np.testing.assert_allclose(fit.predict(x), y, atol=0.05)
        np.testing.assert_allclose(fit.predict([12.5, 87.5]), [8.25, 45.75], atol=0.05)

    def test_constant_truth(self):
        """Test a constant target is predicted everywhere."""
        x = np.linspace(0.0, 200.0, 25)
        y = np.full_like(x, 12.5)

        fit = RBFRegression().fit(x, y)

        np.testing.assert_allclose(fit.predict([0.0, 37.0, 111.0, 200.0]), 12.5, atol=1e-6)

    def test_weights(self):
        """Test repeated distances are fitted to their weighted mean."""
        x = np.array([0.0, 30.0, 45.0, 45.0, 60.0, 90.0])
        y = np.array([0.0, 15.0, 10.0, 40.0, 30.0, 45.0])
        w = np.array([1.0, 1.0, 1.0, 2.0, 1.0, 1.0])

        fit = RBFRegression(knot_count=4, bandwidth=50.0).fit(x, y, weights=w)

        assert fit.predict([45.0])[0] == pytest.approx(30.0, abs=1e-6)

    def test_deterministic(self):
        """Test refitting identical inputs gives identical coefficients."""
        rng = np.random.default_rng(7)
        x = rng.uniform(0.0, 30.0, 40)
        y = 5.0 + np.sin(x / 5.0) + rng.normal(0.0, 0.1, 40)
        w = rng.integers(1, 50, 40)

        first = RBFRegression(bandwidth=10.0).fit(x, y, weights=w)
        second = RBFRegression(bandwidth=10.0).fit(x, y, weights=w)

        np.testing.assert_array_equal(first.coefficients, second.coefficients)

    def test_curve(self):
        """Test the prediction curve spans the fitted range."""
        x = np.array([0.0, 30.0, 45.0, 60.0, 90.0])
        model = RBFRegression()
        model.fit(x, 2.0 + 0.5 * x)

        curve = model.predict_curve(11)

        assert list(curve.columns) == ["dist", "predicted_dep_delay"]
        assert len(curve) == 11
        assert curve["dist"].iloc[0] == 0.0
        assert curve["dist"].iloc[-1] == 90.0

    def test_from_config(self):
        """Test constants come from the config."""
        model = RBFRegression.from_config(RegressionConfig(knot_count=6, bandwidth=2.5))

        assert model.knot_count == 6
        assert model.bandwidth == 2.5

    def test_to_dict(self):
        """Test the fit serializes to plain values."""
        x = np.array([0.0, 30.0, 45.0, 60.0, 90.0])
        fit = RBFRegression().fit(x, x)

        data = fit.to_dict()

        assert data["knots"] == [0.0, 30.0, 60.0, 90.0]
        assert len(data["coefficients"]) == 5
        assert data["n_observations"] == 5

    def test_predict_before_fit(self):
        """Test predicting without a fit fails."""
        with pytest.raises(RuntimeError):
            RBFRegression().predict([1.0])

    def test_invalid_parameters(self):
        """Test knot count and bandwidth are validated."""
        with pytest.raises(ValueError):
            RBFRegression(knot_count=0)
        with pytest.raises(ValueError):
            RBFRegression(bandwidth=0.0)


class TestDegenerateInputs:
    """Tests for inputs without a unique solution."""

    def test_empty(self):
        """Test an empty input."""
        with pytest.raises(DegenerateRegressionError):
            RBFRegression().fit([], [])

    def test_fewer_distinct_distances_than_knots(self):
        """Test too few distinct x values."""
        with pytest.raises(DegenerateRegressionError):
            RBFRegression(knot_count=4).fit([1.0, 1.0, 2.0, 3.0], [1.0, 2.0, 3.0, 4.0])

    def test_all_equal_distances(self):
        """Test a single repeated x value."""
        with pytest.raises(DegenerateRegressionError):
            RBFRegression(knot_count=1).fit([5.0, 5.0, 5.0], [1.0, 2.0, 3.0])

    def test_too_few_observations(self):
        """Test fewer observations than coefficients."""
        with pytest.raises(DegenerateRegressionError):
            RBFRegression(knot_count=4).fit([0.0, 1.0, 2.0, 3.0], [1.0, 2.0, 3.0, 4.0])

    def test_zero_weights(self):
        """Test weights that remove too many observations."""
        x = [0.0, 30.0, 45.0, 60.0, 90.0]
        with pytest.raises(DegenerateRegressionError):
            RBFRegression().fit(x, x, weights=[1.0, 1.0, 0.0, 0.0, 1.0])

    def test_non_finite(self):
        """Test NaN in the target."""
        with pytest.raises(DegenerateRegressionError):
            RBFRegression().fit([0.0, 30.0, 45.0, 60.0, 90.0], [1.0, np.nan, 1.0, 1.0, 1.0])

    def test_length_mismatch(self):
        """Test x and y of different lengths."""
        with pytest.raises(DegenerateRegressionError):
            RBFRegression().fit([0.0, 1.0, 2.0], [1.0, 2.0])

    def test_negative_weights(self):
        """Test negative weights."""
        x = [0.0, 30.0, 45.0, 60.0, 90.0]
        with pytest.raises(DegenerateRegressionError):
            RBFRegression().fit(x, x, weights=[1.0, -1.0, 1.0, 1.0, 1.0])
