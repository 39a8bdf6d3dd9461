import argparse
import time

import ray
from ExampleSceneDef import EXAMPLES, ExampleSceneDef


def render(scene, output_path="output.png", nx=ray.IMAGE_WIDTH, ny=ray.IMAGE_HEIGHT,
           verbose=True, vectorized=False, exact=False):
    """Render a scene and save it as an image file."""
    start_time = time.time()
    example = scene if isinstance(scene, ExampleSceneDef) else ExampleSceneDef(scene=scene)
    im = example.render(output_shape=[ny, nx], verbose=verbose, vectorized=vectorized, exact=exact)

    if verbose:
        print("3 / 3 | Saving image...")
    im.writeToFile(output_path)
    if verbose:
        print("Done rendering!")
        print(f"Render complete in: {time.time() - start_time:.2f} seconds")
    return im


def build_scene(name, num_spheres=None, seed=None):
    if name not in EXAMPLES:
        raise ValueError(f"unknown scene {name!r}, expected one of {sorted(EXAMPLES)}")
    kwargs = {}
    if name in ('random', 'directional'):
        if num_spheres is not None:
            kwargs['num_spheres'] = num_spheres
        kwargs['seed'] = seed
    return EXAMPLES[name](**kwargs)


def main(argv=None):
    parser = argparse.ArgumentParser(description='Sphere ray caster')
    parser.add_argument('output_image', type=str, nargs='?', default='output.png',
                        help='Name of the output image file')
    parser.add_argument('--width', type=int, default=ray.IMAGE_WIDTH, help='Image width')
    parser.add_argument('--height', type=int, default=ray.IMAGE_HEIGHT, help='Image height')
    parser.add_argument('--scene', choices=sorted(EXAMPLES), default='random',
                        help='Which example scene to render')
    parser.add_argument('--spheres', type=int, default=None,
                        help='Number of spheres in the random scenes')
    parser.add_argument('--seed', type=int, default=None,
                        help='Seed for the random scenes')
    parser.add_argument('--vectorized', action='store_true',
                        help='Render a row at a time with numpy')
    parser.add_argument('--exact', action='store_true',
                        help='Use the standard quadratic formula for sphere hits')
    parser.add_argument('--quiet', action='store_true', help='Do not print progress')
    args = parser.parse_args(argv)

    if args.width <= 0 or args.height <= 0:
        parser.error("--width and --height must be positive")

    example = build_scene(args.scene, args.spheres, args.seed)
    if not args.quiet:
        print(f"Scene loaded: {len(example.scene.spheres)} spheres, {len(example.scene.lights)} lights")
        print(f"Rendering {args.width}x{args.height} image...")
    render(example, args.output_image, args.width, args.height,
           verbose=not args.quiet, vectorized=args.vectorized, exact=args.exact)
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
