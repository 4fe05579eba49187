import argparse
import os
import sys
import time
import numpy as np
import PIL.Image
from sky_renders.core import compute_scattering
from sky_renders.rendering import SkyRenderer, sun_direction
from sky_renders.ui import CSS, create_ui


def generate_samples(renderer, resolution=1024):
    """Generate equirectangular sky samples for a few times of day."""
    width, height = resolution, resolution // 2
    print(f"\n--- Generating Environment Maps ({width}x{height}) ---")
    os.makedirs("output", exist_ok=True)

    samples = [
        ("High Noon", 80.0, f"sky_noon_{resolution}.png"),
        ("Afternoon", 30.0, f"sky_afternoon_{resolution}.png"),
        ("Sunset", 2.0, f"sky_sunset_{resolution}.png"),
    ]

    for name, elevation, filename in samples:
        print(f"Rendering {name} (sun at {elevation:.0f} deg)...")
        t0 = time.time()
        img = renderer.render_environment(width=width, height=height, sun_elevation=elevation)
        print(f"  Complete in {time.time() - t0:.2f}s")
        PIL.Image.fromarray(img).save(os.path.join("output", filename))


def run_physical_verification(renderer):
    """Run physical consistency checks. Returns True when every check passes."""
    print("\n--- Physical Verification ---")
    params = renderer.params
    camera = renderer.camera_position
    zenith = np.array([0.0, 1.0, 0.0])
    passed = True

    # Blue sky overhead with a high sun
    noon = compute_scattering(zenith, camera, sun_direction(60.0), params)
    r, g, b = noon.color
    ok = b > g > r > 0.0 and noon.alpha == 1.0
    passed &= ok
    print(f"Zenith, sun at 60 deg: RGB=({r:.4g}, {g:.4g}, {b:.4g}) -> {'blue-dominant' if ok else 'FAILED'}")

    # Nothing is visible from under the surface
    buried = np.array([0.0, params.planet_radius - 10.0, 0.0])
    directions = [zenith, -zenith, np.array([1.0, 0.0, 0.0]), np.array([0.3, -0.2, 0.9])]
    zero = all(np.all(compute_scattering(d, buried, zenith, params).as_rgba() == 0.0)
               for d in directions)
    passed &= zero
    print(f"Camera below surface: {'zero result' if zero else 'FAILED (non-zero light)'}")

    # Horizon reddens as the sun sets
    horizon = np.array([1.0, 0.02, 0.0])
    day = compute_scattering(horizon, camera, sun_direction(60.0), params).color
    dusk = compute_scattering(horizon, camera, sun_direction(2.0), params).color
    day_ratio = day[0] / day[2]
    dusk_ratio = dusk[0] / dusk[2]
    ok = dusk_ratio > day_ratio
    passed &= ok
    print(f"Horizon red/blue ratio: day={day_ratio:.3f}, sunset={dusk_ratio:.3f} "
          f"-> {'reddened' if ok else 'FAILED'}")

    print("All checks passed." if passed else "Some checks FAILED.")
    return passed


def main():
    parser = argparse.ArgumentParser(description="Sky Scattering Renderer CLI")
    parser.add_argument("--ui", action="store_true", help="Launch the interactive Gradio UI")
    parser.add_argument("--samples", action="store_true", help="Generate equirectangular sky samples")
    parser.add_argument("--verify", action="store_true", help="Run physical consistency checks")
    parser.add_argument("--res", type=int, default=1024, help="Width of the generated sample maps")
    parser.add_argument("--altitude", type=float, default=None, help="Camera altitude in meters")

    args = parser.parse_args()
    renderer = SkyRenderer(altitude_m=args.altitude)

    if args.ui:
        print("Launching UI...")
        demo = create_ui()
        demo.launch(css=CSS)
    elif args.samples:
        generate_samples(renderer, args.res)
    elif args.verify:
        if not run_physical_verification(renderer):
            sys.exit(1)
    else:
        parser.print_help()


def run_ui():
    """Entry point for sky-ui command."""
    sys.argv = [sys.argv[0], "--ui"]
    main()


def run_verify():
    """Entry point for sky-verify command."""
    sys.argv = [sys.argv[0], "--verify"]
    main()


def run_samples():
    """Entry point for sky-samples command."""
    sys.argv = [sys.argv[0], "--samples"]
    main()


if __name__ == "__main__":
    main()
