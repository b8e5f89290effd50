import unittest
import numpy as np

from utilsControls import (nPhases, get_excitation_phases,
                           get_excitation_values, evaluate_piecewise_linear,
                           sample_control_functions,
                           sort_and_deduplicate_control_log)


class TestExcitationPhases(unittest.TestCase):
    def test_phases(self):
        phases, duration = get_excitation_phases(-1.0)
        self.assertEqual(phases.shape, (nPhases,))
        np.testing.assert_allclose(
            phases, [0, 0, 0, 0.0248, 0.02604, 0.0985, 0.1035, 0.1085, 0.197],
            atol=1e-12)
        self.assertAlmostEqual(duration, 0.197)

    def test_phases_are_sorted(self):
        for angle in [-2.0, -1.0, 0.0]:
            phases, _ = get_excitation_phases(angle)
            self.assertTrue(np.all(np.diff(phases) >= 0))

    def test_shift(self):
        phases, duration = get_excitation_phases(-1.0, t_eq=0.5)
        self.assertAlmostEqual(phases[0], 0.0)
        self.assertAlmostEqual(phases[1], 0.5)
        self.assertAlmostEqual(duration, 0.697)


class TestExcitationValues(unittest.TestCase):
    def test_scalar(self):
        values = get_excitation_values(0.1, 0.3)
        np.testing.assert_allclose(
            values, [0.1, 0.1, 0.45, 0.45, 0.295, 0.295, 0.37, 0.3, 0.3])

    def test_vector(self):
        values = get_excitation_values([0.1, 0.2], [0.3, 0.2])
        self.assertEqual(values.shape, (2, nPhases))
        np.testing.assert_allclose(values[1, :], 0.2)
        np.testing.assert_allclose(values[0, 6], 0.37)

    def test_size_mismatch(self):
        with self.assertRaises(ValueError):
            get_excitation_values([0.1, 0.2], [0.3])


class TestPiecewiseLinear(unittest.TestCase):
    def setUp(self):
        self.phases, self.duration = get_excitation_phases(-1.0)
        self.values = get_excitation_values(0.1, 0.3)

    def test_first_value_at_zero(self):
        out = evaluate_piecewise_linear(self.phases, self.values,
                                        [-0.001, 0.0])
        np.testing.assert_allclose(out, [0.1, 0.1])

    def test_jump_after_zero(self):
        out = evaluate_piecewise_linear(self.phases, self.values, [1e-6])
        np.testing.assert_allclose(out, [0.45], atol=1e-3)

    def test_sampling_starts_at_first_value(self):
        times, data = sample_control_functions(self.phases, self.values,
                                               self.duration)
        self.assertEqual(times[0], 0.0)
        self.assertAlmostEqual(data[0, 0], 0.1)

    def test_interpolation(self):
        out = evaluate_piecewise_linear(self.phases, self.values, [0.101])
        np.testing.assert_allclose(out, [0.3325])

    def test_constant_extrapolation(self):
        out = evaluate_piecewise_linear(self.phases, self.values,
                                        [0.197, 0.5])
        np.testing.assert_allclose(out, [0.3, 0.3])

    def test_mismatch(self):
        with self.assertRaises(ValueError):
            evaluate_piecewise_linear(self.phases[:-1], self.values, [0.0])

    def test_sampling(self):
        values = get_excitation_values([0.1, 0.0], [0.3, 0.0])
        times, data = sample_control_functions(self.phases, values,
                                               self.duration, 0.001)
        self.assertEqual(times.shape, (198,))
        self.assertEqual(data.shape, (198, 2))
        self.assertAlmostEqual(times[-1], 0.197)
        self.assertAlmostEqual(data[-1, 0], 0.3)
        np.testing.assert_allclose(data[:, 1], 0.0)


class TestControlLog(unittest.TestCase):
    def test_sort_and_deduplicate(self):
        times, controls = sort_and_deduplicate_control_log(
            [0.2, 0.1, 0.1, 0.3], [[2.0], [1.0], [1.5], [3.0]])
        np.testing.assert_allclose(times, [0.1, 0.2, 0.3])
        np.testing.assert_allclose(controls, [[1.0], [2.0], [3.0]])

    def test_empty(self):
        times, controls = sort_and_deduplicate_control_log([], [])
        self.assertEqual(times.shape[0], 0)

    def test_length_mismatch(self):
        with self.assertRaises(ValueError):
            sort_and_deduplicate_control_log([0.1, 0.2], [[1.0]])
