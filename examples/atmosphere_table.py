"""
Print the altitude table and plot the atmosphere profile.
"""
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from descentlab.core.analysis import altitude_table
from descentlab.models.atmosphere import AtmosphereModel
from descentlab.visualization.plotting import plot_atmosphere_profile


def main():
    print(f"{'alt [m]':>8} {'T [°C]':>8} {'P [kPa]':>9} {'rho':>7} {'Vt ff':>7} {'Vt canopy':>10}")
    for row in altitude_table(mass=80.0):
        print(f"{row.altitude:8.0f} {row.temperature:8.1f} {row.pressure / 1000:9.2f} "
              f"{row.air_density:7.3f} {row.freefall_terminal:7.1f} {row.canopy_terminal:10.2f}")

    plot_atmosphere_profile(atmosphere=AtmosphereModel(pressure_model="isa"),
                            save_path="output/atmosphere.png", show=False)


if __name__ == "__main__":
    main()
