import numpy as np
from .base import SteeringPolicy


class PDSteeringPolicy(SteeringPolicy):
    """
    Critically damped spring toward the mission target:
        a = omega^2 * (target - p) - 2 * omega * v
    clipped componentwise to +/- max_accel.
    """

    def __init__(self, omega=0.5, max_accel=50.0):
        if omega <= 0:
            raise ValueError(f"omega must be positive, got {omega}")
        if max_accel <= 0:
            raise ValueError(f"max_accel must be positive, got {max_accel}")
        self.omega = omega
        self.max_accel = max_accel
        self.kp = omega ** 2
        self.kd = 2.0 * omega

    def build_observation(self, kinematics, mission):
        target = None if mission is None else mission.target
        return (kinematics.p, kinematics.v, target)

    def act(self, obs):
        p, v, target = obs
        if target is None:
            return np.zeros_like(p)
        a = self.kp * (target - p) - self.kd * v
        # keep the command finite and bounded even for degenerate input
        a = np.nan_to_num(a, nan=0.0, posinf=self.max_accel, neginf=-self.max_accel)
        return np.clip(a, -self.max_accel, self.max_accel)
