from abc import ABC, abstractmethod


class SteeringPolicy(ABC):
    @abstractmethod
    def build_observation(self, kinematics, mission):
        ...

    @abstractmethod
    def act(self, obs):
        """Return the commanded acceleration vector."""
        ...
