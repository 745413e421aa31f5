"""
geotrack API Examples

Usage examples demonstrating the geo tracking API.
"""

import os
import sys

import numpy as np

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def example_basic_tracking():
    """
    Example 1: Basic Tracking

    Feed a walking object's noisy fixes and read back the smoothed estimate.
    """
    from geotrack import GeoTracker, translate

    print("=== Basic Tracking Example ===")

    tracker = GeoTracker()
    start = (13.4050, 52.5200)  # Berlin, [longitude, latitude]
    rng = np.random.default_rng(42)

    estimate = None
    for second in range(30):
        truth = translate(start, 1.2 * second, 0.4 * second)  # ~1.3 m/s, ENE
        noisy = translate(truth, *rng.normal(0.0, 3.0, size=2))
        estimate = tracker.record("walker", noisy, second * 1000, accuracy_meters=3.0)

    print(f"Position: {estimate.longitude:.6f}, {estimate.latitude:.6f}")
    print(f"Velocity: east {estimate.east_velocity_mps:.2f} m/s, north {estimate.north_velocity_mps:.2f} m/s")
    print(f"Speed: {estimate.speed_mps:.2f} m/s")
    print(f"Heading: {estimate.heading_degrees:.0f}°")
    print(f"Retained samples: {tracker.sample_count('walker')}")


def example_technology_presets():
    """
    Example 2: Technology Presets

    Compare the tuning shipped for different positioning technologies.
    """
    from geotrack import get_preset, get_preset_names

    print("\n=== Technology Presets ===")
    print(f"{'preset':<22}{'noise (m)':>10}{'gate (d²)':>11}{'window (s)':>12}")
    print("-" * 55)

    for name in get_preset_names():
        config = get_preset(name)
        print(
            f"{name:<22}{config.base_measurement_noise_meters:>10.1f}"
            f"{config.outlier_mahalanobis_threshold:>11.1f}"
            f"{config.time_window_millis / 1000:>12.0f}"
        )


def example_outlier_rejection():
    """
    Example 3: Outlier Rejection

    A single multipath jump is gated out and leaves the track untouched.
    """
    from geotrack import GeoTracker, distance, translate

    print("\n=== Outlier Rejection Example ===")

    tracker = GeoTracker()
    start = (4.9041, 52.3676)
    for second in range(10):
        tracker.record("asset", translate(start, 0.5 * second, 0.0), second * 1000)

    before = tracker.estimate_for("asset")
    jump = translate(start, 400.0, -250.0)
    after = tracker.record("asset", jump, 10_000)

    print(f"Jump distance from track: {distance(before.position, jump):.0f} m")
    print(f"Accepted: {tracker.samples('asset')[-1].accepted}")
    print(f"Estimate moved: {distance(before.position, after.position):.2f} m (prediction only)")


def example_measurement_profiles():
    """
    Example 4: Mixed Sources

    One tracker fusing UWB and BLE fixes through per-sample profiles.
    """
    from geotrack import GeoTracker, get_profile_preset, translate

    print("\n=== Mixed Source Example ===")

    uwb = get_profile_preset("uwb")
    ble = get_profile_preset("ble")
    tracker = GeoTracker()
    start = (-0.1276, 51.5072)

    for step in range(20):
        position = translate(start, 0.8 * step, 0.0)
        profile = uwb if step % 2 == 0 else ble
        estimate = tracker.record("forklift", position, step * 500, profile=profile)

    print(f"Speed: {estimate.speed_mps:.2f} m/s (truth 1.60 m/s)")
    print(f"Heading: {estimate.heading_degrees:.0f}° (truth 90°)")


def example_config_file():
    """
    Example 5: YAML Configuration

    Load a tuned configuration and named profiles from a YAML file.
    """
    import tempfile

    from geotrack import ConfigLoader, GeoTracker

    print("\n=== YAML Configuration Example ===")

    body = (
        "tracker:\n"
        "  preset: gps_outdoor_vehicle\n"
        "  time_window_millis: 90000\n"
        "profiles:\n"
        "  handheld:\n"
        "    preset: gps_indoor_slow\n"
        "    outlier_mahalanobis_threshold: 12.0\n"
    )
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "fleet.yaml")
        with open(path, "w", encoding="utf-8") as f:
            f.write(body)
        loader = ConfigLoader(path)

    tracker = GeoTracker(loader.get_config())
    estimate = tracker.record("truck-7", (2.3522, 48.8566), 0, profile=loader.get_profile("handheld"))

    print(f"Window: {tracker.config.time_window_millis / 1000:.0f} s")
    print(f"Profiles: {sorted(loader.get_profiles())}")
    print(f"First estimate: {estimate.longitude:.4f}, {estimate.latitude:.4f}")


def example_dateline():
    """
    Example 6: Antimeridian Crossing

    Tracks stay continuous when a ship crosses ±180° longitude.
    """
    from geotrack import GeoTracker, normalize, translate

    print("\n=== Antimeridian Example ===")

    tracker = GeoTracker()
    start = (179.999, -17.0)

    for second in range(0, 60, 5):
        fix = normalize(translate(start, 8.0 * second, 0.0))
        estimate = tracker.record("vessel", fix, second * 1000, accuracy_meters=5.0)
        print(f"  t={second:2d}s lon={estimate.longitude:+.5f} speed={estimate.speed_mps:.1f} m/s")


if __name__ == "__main__":
    print("geotrack API Examples")
    print("=" * 60)

    example_basic_tracking()
    example_technology_presets()
    example_outlier_rejection()
    example_measurement_profiles()
    example_config_file()
    example_dateline()

    print("\n" + "=" * 60)
    print("All examples completed successfully!")
