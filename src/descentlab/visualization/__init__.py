from .plotting import plot_atmosphere_profile, plot_descent, plot_forces

__all__ = ["plot_descent", "plot_forces", "plot_atmosphere_profile"]
