"""Pytest configuration for all tests."""

from hypothesis import HealthCheck, settings

# Each example spins up its own event loop, which is slower than Hypothesis'
# default deadline allows on loaded machines.
settings.register_profile(
    "taskflow",
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)
settings.load_profile("taskflow")
