"""
Hop and pop: jump from the default exit point, deploy at 300 m.

Demonstrates:
- Fluent Scenario setup with wind and a deployment trigger
- Per-frame history as a DataFrame
- Reference landing prediction with an adaptive ODE solver
"""
from pathlib import Path
import sys

import numpy as np

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from descentlab import Scenario


def main():
    print("=" * 60)
    print("Hop and Pop")
    print("=" * 60)

    sc = (
        Scenario("hop_and_pop", log=True)
        .add_skydiver("jumper", canopy="rectangular")
        .set_wind(4.0, np.pi / 4)
        .deploy_at(300.0)
        .configure_steps("smooth")
        .enable_plotting(show=False)
    )

    pred = sc.predict()
    print(f"\nFreefall prediction (no deployment): touchdown after "
          f"{pred.touchdown_time:.1f}s at {pred.touchdown_speed:.1f} m/s")

    sc.run(duration=300.0, log_interval=5.0)

    df = sc.history
    landed = df.iloc[-1]
    print("\nLanding:")
    print(f"  Time:     {landed['time']:.2f} s")
    print(f"  Position: x={landed['x']:.1f} m, z={landed['z']:.1f} m")
    print(f"  Peak speed: {df['speed'].max():.1f} m/s")

    sc.save_history(sc.world.output_path / "history.csv")


if __name__ == "__main__":
    main()
