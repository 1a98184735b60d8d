import time
import unittest

import numpy as np

from missionswarm.core.motion import MotionIntegrator, integrate
from missionswarm.core.state import Kinematics


class _Body:
    """Minimal stand-in exposing the integrator's agent interface."""

    def __init__(self, kinematics):
        self.k = kinematics

    def update_kinematics(self, fn):
        self.k = fn(self.k)


class TestIntegrate(unittest.TestCase):
    def test_constant_acceleration_displacement(self):
        k = Kinematics.at([0.0, 0.0], vel=[1.0, 0.0])
        k.a = np.array([2.0, -2.0])
        out = integrate(k, 0.5, 0.5)

        np.testing.assert_allclose(out.p, [0.5 * (1.0 + 0.5 * 2.0 / 2.0), 0.5 * (0.5 * -2.0 / 2.0)])
        decay = np.exp(0.5 * np.log(0.5))
        np.testing.assert_allclose(out.v, [0.5 * 2.0 + decay, -1.0])

    def test_does_not_mutate_input(self):
        k = Kinematics.at([1.0, 2.0], vel=[3.0, 4.0])
        integrate(k, 0.1, 0.5)
        np.testing.assert_array_equal(k.p, [1.0, 2.0])
        np.testing.assert_array_equal(k.v, [3.0, 4.0])

    def test_velocity_decays_at_rest(self):
        k = Kinematics.at([0.0, 0.0], vel=[5.0, -3.0])
        speeds = [np.linalg.norm(k.v)]
        signs = np.sign(k.v)
        for _ in range(200):
            k = integrate(k, 0.05, 0.5)
            speeds.append(np.linalg.norm(k.v))
            np.testing.assert_array_equal(np.sign(k.v), signs)

        self.assertTrue(all(b < a for a, b in zip(speeds, speeds[1:])))
        self.assertLess(speeds[-1], 0.01 * speeds[0])

    def test_decay_is_step_size_independent(self):
        k = Kinematics.at([0.0, 0.0], vel=[4.0, 0.0])
        one = integrate(k, 0.2, 0.3)
        two = integrate(integrate(k, 0.1, 0.3), 0.1, 0.3)
        np.testing.assert_allclose(one.v, two.v)

    def test_theta_and_radius_untouched(self):
        k = Kinematics.at([0.0, 0.0], vel=[1.0, 1.0], theta=np.pi, radius=3.0)
        out = integrate(k, 0.1, 0.5)
        self.assertEqual(out.theta, np.pi)
        self.assertEqual(out.radius, 3.0)


class TestMotionIntegrator(unittest.TestCase):
    def test_invalid_retention(self):
        with self.assertRaises(ValueError):
            MotionIntegrator(retention=1.0)
        with self.assertRaises(ValueError):
            MotionIntegrator(retention=0.0)

    def test_step_advances_every_agent(self):
        integrator = MotionIntegrator(retention=0.5)
        bodies = [_Body(Kinematics.at([0.0, 0.0], vel=[1.0, 0.0])), _Body(Kinematics.at([5.0, 5.0], vel=[0.0, -1.0]))]
        for b in bodies:
            integrator.add_agent(b)
        integrator.step(0.1)
        self.assertGreater(bodies[0].k.p[0], 0.0)
        self.assertLess(bodies[1].k.p[1], 5.0)

    def test_thread_runs_until_stopped(self):
        integrator = MotionIntegrator(retention=0.5, period=0.0005)
        body = _Body(Kinematics.at([0.0, 0.0], vel=[10.0, 0.0]))
        integrator.add_agent(body)
        integrator.start()
        try:
            self.assertTrue(integrator.is_running)
            time.sleep(0.05)
        finally:
            integrator.stop()
        self.assertFalse(integrator.is_running)

        moved = body.k.p[0]
        self.assertGreater(moved, 0.0)
        time.sleep(0.02)
        self.assertEqual(body.k.p[0], moved)


if __name__ == '__main__':
    unittest.main()
