from .scenario import SOLVER_PRESETS, STEP_PRESETS, Scenario

__all__ = ["Scenario", "SOLVER_PRESETS", "STEP_PRESETS"]
