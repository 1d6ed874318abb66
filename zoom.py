import os
import sys
from dataclasses import dataclass, replace
from pathlib import Path

_VERBOSE_FLAGS = {"--verbose", "-v"}
_cli_verbose = any(arg in _VERBOSE_FLAGS for arg in sys.argv[1:])
_env_log_level = os.environ.get("TF_CPP_MIN_LOG_LEVEL")
_suppress_messages = (not _cli_verbose) and _env_log_level != "0"

if _suppress_messages and _env_log_level is None:
    os.environ["TF_CPP_MIN_LOG_LEVEL"] = "3"

VERBOSE = _cli_verbose


def log(message, *args, **kwargs):
    if VERBOSE:
        print(message, *args, **kwargs)


import tensorflow as tf

if _suppress_messages:
    tf.get_logger().setLevel("ERROR")
    for handler in tf.get_logger().handlers:
        handler.setLevel("ERROR")

import imageio.v2 as imageio

from fractal_engine import (
    ColorScheme,
    FractalConfig,
    FractalType,
    ImageSurface,
    blit,
    get_julia_preset,
    recenter,
    render_frame,
    zoom_schedule,
)
from fractal_engine.generator import EASINGS
from fractal_engine.presets import JULIA_PRESETS
from fractal_engine.renderer import BACKENDS

log("TensorFlow version: %s" % tf.__version__)

# Place the vectorized backend on the first visible GPU when there is one.
gpus = tf.config.list_physical_devices('GPU')
if gpus:
    try:
        for gpu in gpus:
            tf.config.experimental.set_memory_growth(gpu, True)
        DEVICE = '/GPU:0'
        log("GPU found, using %s" % gpus[0].name)
    except RuntimeError as e:
        log(e)
        DEVICE = '/CPU:0'
else:
    DEVICE = '/CPU:0'
    log("No GPU found, using CPU")

from argparse import ArgumentParser

MODES = ("image", "frames", "gif")


@dataclass
class OutputConfig:
    mode: str
    path: Path
    image_format: str


def build_parser():
    parser = ArgumentParser(description='Render Mandelbrot, Julia and Burning Ship fractals.')

    parser.add_argument('--type', dest='fractal_type', default='mandelbrot',
                        choices=['mandelbrot', 'julia', 'burning-ship'],
                        help='fractal to render')

    parser.add_argument('--max-iterations', type=int,
                        dest='max_iterations', help='maximum number of iterations per point',
                        metavar='MAX_ITERATIONS', default=256)

    parser.add_argument('--escape-radius', type=float,
                        dest='escape_radius', help='bound on the squared magnitude of z (4 means |z| > 2 escapes)',
                        metavar='ESCAPE_RADIUS', default=4.0)

    parser.add_argument('--color-scheme', dest='color_scheme', default='rainbow',
                        choices=[scheme.value for scheme in ColorScheme],
                        help='color scheme used for escaping points')

    parser.add_argument('--offset-x', type=float,
                        dest='offset_x', help='real part of the viewport center',
                        metavar='OFFSET_X', default=-0.5)

    parser.add_argument('--offset-y', type=float,
                        dest='offset_y', help='imaginary part of the viewport center',
                        metavar='OFFSET_Y', default=0.0)

    parser.add_argument('--zoom', type=float,
                        dest='zoom', help='magnification of the first frame; the viewport is 3/ZOOM wide',
                        metavar='ZOOM', default=1.0)

    parser.add_argument('--julia-preset', dest='julia_preset', type=str,
                        help='named Julia constant: ' + ', '.join(preset.name for preset in JULIA_PRESETS))

    parser.add_argument('--julia-c', dest='julia_c', type=float, nargs=2, metavar=('RE', 'IM'),
                        help='Julia constant given as its real and imaginary parts')

    parser.add_argument('--width', type=int,
                        dest='width', help='image width in pixels',
                        metavar='WIDTH', default=512)

    parser.add_argument('--height', type=int,
                        dest='height', help='image height in pixels',
                        metavar='HEIGHT', default=512)

    parser.add_argument('--frames', type=int,
                        dest='frames', help='number of frames to generate; more than one produces a zoom sequence',
                        metavar='FRAMES', default=1)

    parser.add_argument('--zoom-step', type=float,
                        dest='zoom_step', help='magnification applied between consecutive frames when --target-zoom is not set',
                        metavar='ZOOM_STEP', default=1.25)

    parser.add_argument('--target-zoom', type=float,
                        dest='target_zoom', help='zoom reached by the last frame; overrides --zoom-step',
                        metavar='TARGET_ZOOM', default=None)

    parser.add_argument('--easing', choices=list(EASINGS), default='ease',
                        help='progress curve toward --target-zoom: "linear" or "ease" for smooth ease-in-out')

    parser.add_argument('--mode', choices=list(MODES), default=None,
                        help='"image" writes the last frame, "frames" writes every frame, "gif" writes an animation. '
                             'Default: image for a single frame, gif otherwise.')

    parser.add_argument('--output', dest='output', type=str,
                        help='output file for the image and gif modes')

    parser.add_argument('--frame-dir', dest='frame_dir', type=str,
                        help='directory for the frames mode. Default: "frames".')

    parser.add_argument('--format', type=str,
                        dest='format', help='file format for image-based outputs. Can be any extension supported by Pillow. Default: "png".',
                        metavar='FORMAT', default='png')

    parser.add_argument('--backend', choices=list(BACKENDS), default='tensorflow',
                        help='"tensorflow" iterates the whole frame at once; "python" iterates pixel by pixel.')

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging, including TensorFlow and hardware diagnostics.')

    return parser


def check_dimensions(opt, parser: ArgumentParser) -> None:
    for name in ("width", "height", "frames"):
        if getattr(opt, name) < 1:
            parser.error(f"--{name} must be at least 1.")


def resolve_output_config(opt, parser: ArgumentParser) -> OutputConfig:
    mode = opt.mode or ("image" if opt.frames == 1 else "gif")
    image_format = (opt.format or "png").lower().lstrip(".") or "png"

    if mode == "frames":
        if opt.output:
            parser.error("--output is not used by the frames mode; use --frame-dir.")
        return OutputConfig(mode, Path(opt.frame_dir or "frames").expanduser().resolve(), image_format)

    if opt.frame_dir:
        parser.error("--frame-dir is only valid with the frames mode.")
    suffix = ".gif" if mode == "gif" else f".{image_format}"
    path = Path(opt.output or ("zoom" if mode == "gif" else "fractal")).expanduser()
    if not path.suffix:
        path = path.with_suffix(suffix)
    elif path.suffix.lower() != suffix:
        parser.error(f"--output must end with {suffix} in the {mode} mode.")
    return OutputConfig(mode, path.resolve(), image_format)


def resolve_julia_constant(opt, parser: ArgumentParser) -> tuple[float, float] | None:
    if opt.julia_preset and opt.julia_c:
        parser.error("--julia-preset and --julia-c are mutually exclusive.")
    if opt.julia_preset:
        try:
            return get_julia_preset(opt.julia_preset).constant
        except KeyError:
            names = ', '.join(preset.name for preset in JULIA_PRESETS)
            parser.error(f"Unknown Julia preset '{opt.julia_preset}'. Valid choices: {names}.")
    if opt.julia_c:
        return tuple(opt.julia_c)
    return None


def main(argv=None):
    parser = build_parser()
    opt = parser.parse_args(argv)

    check_dimensions(opt, parser)
    output = resolve_output_config(opt, parser)
    julia_constant = resolve_julia_constant(opt, parser)

    global VERBOSE
    VERBOSE = VERBOSE or bool(opt.verbose)

    fractal_type = FractalType(opt.fractal_type)
    config = FractalConfig(
        max_iterations=opt.max_iterations,
        escape_radius=opt.escape_radius,
        color_scheme=ColorScheme(opt.color_scheme),
        offset_x=opt.offset_x,
        offset_y=opt.offset_y,
        zoom=opt.zoom,
    )
    try:
        zooms = zoom_schedule(config, opt.frames, target_zoom=opt.target_zoom, zoom_step=opt.zoom_step, easing=opt.easing)
    except ValueError as e:
        parser.error(str(e))
    log("Rendering %s %dx%d on %s with the %s backend" % (fractal_type.value, opt.width, opt.height, DEVICE, opt.backend))

    gif_writer = None
    if output.mode == "gif":
        output.path.parent.mkdir(parents=True, exist_ok=True)
        gif_writer = imageio.get_writer(str(output.path), mode='I', duration=0.1, loop=0)
    digits = max(3, len(str(opt.frames - 1)))

    try:
        for i, frame_zoom in enumerate(zooms):
            print("frame {0} out of {1}".format(i, opt.frames), end='\r')
            frame_config = replace(config, zoom=float(frame_zoom))
            result = render_frame(
                fractal_type,
                frame_config,
                opt.width,
                opt.height,
                julia_constant,
                backend=opt.backend,
                device=DEVICE,
            )

            surface = ImageSurface(opt.width, opt.height)
            blit(surface, result.values, frame_config.color_scheme)
            if gif_writer is not None:
                gif_writer.append_data(surface.to_array())
            elif output.mode == "frames":
                surface.save(output.path / f"frame{i:0{digits}d}.{output.image_format}", output.image_format)
            elif i == opt.frames - 1:
                surface.save(output.path, output.image_format)

            # A single frame keeps the requested center.
            if opt.frames > 1:
                config = recenter(config, result)
                log("frame %d: center=(%.12g, %.12g) zoom=%.6g" % (i, config.offset_x, config.offset_y, frame_zoom))
    finally:
        if gif_writer is not None:
            gif_writer.close()


if __name__ == '__main__':
    main()
