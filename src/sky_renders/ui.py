import gradio as gr
import PIL.Image
from . import constants
from .parameters import AtmosphereParameters
from .rendering import SkyRenderer

PROJECTIONS = ["Perspective", "Environment Map"]

# Camera altitude slider in km; the camera may not sit on the surface
MIN_ALTITUDE_KM = 0.01
MAX_ALTITUDE_KM = 120.0

# Control values on load and after "Reset", in the order of the inputs list
DEFAULTS = {
    "projection": "Perspective",
    "fov": constants.DEFAULT_FOV_DEGREES,
    "yaw": 0.0,
    "pitch": 10.0,
    "sun_elevation": constants.DEFAULT_SUN_ELEVATION_DEGREES,
    "sun_azimuth": constants.DEFAULT_SUN_AZIMUTH_DEGREES,
    "altitude_km": constants.DEFAULT_CAMERA_ALTITUDE_METERS / 1000.0,
    "mie_asymmetry": constants.MIE_ASYMMETRY,
    "exposure": constants.DEFAULT_EXPOSURE,
    "resolution": 256,
}

# Dark page; the previous frame stays visible while the next one renders.
CSS = """
.gradio-container { background-color: #05070d !important; }
#sky_view { background-color: #000 !important; border: none !important; }
#sky_view img { object-fit: contain; }
.generating, .pending { opacity: 1 !important; filter: none !important; }
.progress-view, .loader { display: none !important; }
"""


def render_frame(projection, fov, yaw, pitch, sun_elevation, sun_azimuth,
                 altitude_km, mie_asymmetry, exposure, resolution):
    """Render one frame for the current control values."""
    width = int(resolution)
    params = AtmosphereParameters.earth_default(mie_asymmetry=mie_asymmetry)
    renderer = SkyRenderer(params=params, altitude_m=max(altitude_km, MIN_ALTITUDE_KM) * 1000.0)

    if projection == "Environment Map":
        pixels = renderer.render_environment(width=width, height=width // 2,
                                             sun_elevation=sun_elevation, sun_azimuth=sun_azimuth,
                                             exposure=exposure)
    else:
        pixels = renderer.render(width=width, height=width * 3 // 4, fov=fov, yaw=yaw, pitch=pitch,
                                 sun_elevation=sun_elevation, sun_azimuth=sun_azimuth,
                                 exposure=exposure)
    return PIL.Image.fromarray(pixels)


def create_ui():
    with gr.Blocks(title="Sky Scattering Renderer") as demo:
        gr.Markdown("# Sky Scattering Renderer\n"
                    "Single-scattering Rayleigh + Mie sky over an Earth-like planet.")

        with gr.Row():
            with gr.Column(scale=1):
                with gr.Group():
                    gr.Markdown("### Camera")
                    projection = gr.Radio(PROJECTIONS, value=DEFAULTS["projection"], label="Projection")
                    fov = gr.Slider(10, 160, value=DEFAULTS["fov"], label="Vertical FOV (deg)",
                                    info="Perspective only")
                    yaw = gr.Slider(-180, 180, value=DEFAULTS["yaw"], step=1, label="Yaw (deg)",
                                    info="0 = +X, 90 = +Z")
                    pitch = gr.Slider(-89, 89, value=DEFAULTS["pitch"], step=1, label="Pitch (deg)")
                    altitude = gr.Slider(MIN_ALTITUDE_KM, MAX_ALTITUDE_KM, value=DEFAULTS["altitude_km"],
                                         step=0.01, label="Altitude (km)")
                    resolution = gr.Slider(64, 512, value=DEFAULTS["resolution"], step=64,
                                           label="Image width (px)")

                with gr.Group():
                    gr.Markdown("### Sun & Air")
                    sun_elevation = gr.Slider(-10, 90, value=DEFAULTS["sun_elevation"], step=0.5,
                                              label="Sun elevation (deg)")
                    sun_azimuth = gr.Slider(-180, 180, value=DEFAULTS["sun_azimuth"], step=1,
                                            label="Sun azimuth (deg)")
                    mie_asymmetry = gr.Slider(-0.95, 0.95, value=DEFAULTS["mie_asymmetry"], step=0.01,
                                              label="Mie asymmetry g", info="Haze glow around the sun")
                    exposure = gr.Slider(0.1, 20.0, value=DEFAULTS["exposure"], step=0.1, label="Exposure")

                reset = gr.Button("Reset")

            with gr.Column(scale=2):
                view = gr.Image(label="Sky", interactive=False, elem_id="sky_view")

        inputs = [projection, fov, yaw, pitch, sun_elevation, sun_azimuth,
                  altitude, mie_asymmetry, exposure, resolution]

        reset.click(fn=lambda: list(DEFAULTS.values()), outputs=inputs)
        gr.on(triggers=[control.change for control in inputs], fn=render_frame, inputs=inputs,
              outputs=view, trigger_mode="always_last", show_progress="hidden")
        demo.load(fn=render_frame, inputs=inputs, outputs=view, show_progress="hidden")

    return demo


if __name__ == "__main__":
    create_ui().launch(css=CSS)
