import argparse
import numpy as np
import matplotlib.pyplot as plt
from sky_renders.core import compute_scattering_batch
from sky_renders.parameters import AtmosphereParameters
from sky_renders.rendering import SkyRenderer, sun_direction

SUN_ELEVATIONS = [60.0, 20.0, 5.0, 1.0]
CHANNEL_COLORS = ["tab:red", "tab:green", "tab:blue"]


def sky_profile(renderer, sun_elevation, n_samples=181):
    """
    Radiance along the vertical plane that contains the sun.

    Returns:
        (view elevations in degrees, (N, 3) linear RGB)
    """
    elevations = np.linspace(-10.0, 90.0, n_samples)
    e = np.deg2rad(elevations)
    directions = np.stack([np.cos(e), np.sin(e), np.zeros_like(e)], axis=1)
    rgba = compute_scattering_batch(directions, renderer.camera_position,
                                    sun_direction(sun_elevation), renderer.params)
    return elevations, rgba[:, :3]


def plot_density(ax, params):
    heights = np.linspace(0.0, params.atmosphere_radius - params.planet_radius, 200)
    ax.plot(np.exp(-heights / params.rayleigh_scale_height), heights / 1000.0, label="Rayleigh")
    ax.plot(np.exp(-heights / params.mie_scale_height), heights / 1000.0, label="Mie")
    ax.set_xlabel("Relative density")
    ax.set_ylabel("Height (km)")
    ax.set_title("Density profiles")
    ax.legend()


def main():
    parser = argparse.ArgumentParser(description="Plot sky radiance against view elevation")
    parser.add_argument("--altitude", type=float, default=None, help="Camera altitude in meters")
    parser.add_argument("--save", type=str, default=None, help="Write the figure to this path instead of showing it")
    args = parser.parse_args()

    renderer = SkyRenderer(params=AtmosphereParameters.earth_default(), altitude_m=args.altitude)

    fig, axes = plt.subplots(1, len(SUN_ELEVATIONS) + 1, figsize=(4 * (len(SUN_ELEVATIONS) + 1), 4))
    fig.set_facecolor("#1c1c1c")

    for ax, elevation in zip(axes, SUN_ELEVATIONS):
        view_elev, rgb = sky_profile(renderer, elevation)
        for channel, color in enumerate(CHANNEL_COLORS):
            ax.plot(view_elev, rgb[:, channel], color=color)
        ax.axvline(elevation, color="gold", ls=":", lw=1)
        ax.set_yscale("log")
        ax.set_xlabel("View elevation (deg)")
        ax.set_title(f"Sun at {elevation:.0f} deg")

    axes[0].set_ylabel("Linear radiance")
    plot_density(axes[-1], renderer.params)
    fig.tight_layout()

    if args.save:
        fig.savefig(args.save, dpi=120)
        print(f"Saved {args.save}")
    else:
        plt.show()


if __name__ == "__main__":
    main()
