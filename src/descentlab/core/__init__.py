from .analysis import (
    DescentPrediction,
    TerminalVelocityAnalysis,
    TerminalVelocityPrediction,
    altitude_table,
    analyze_terminal_velocity,
    freefall_time,
    landing_speed,
    predict_terminal_velocity,
    reference_descent,
)
from .simulation import World, WorldStats
