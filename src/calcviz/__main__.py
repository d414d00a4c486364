#!/usr/bin/env python3
"""
Command-line front end for calcviz.

Usage:
    python -m calcviz eval EXPR --at VALUE [--var NAME]
    python -m calcviz sample EXPR [--bounds MIN MAX] [--segments N]
    python -m calcviz area EXPR [--bounds MIN MAX] [--partitions N]
    python -m calcviz volume EXPR [--axis {x=0,y=0,x=c}] [--offset C] [-o FILE]
    python -m calcviz physics [VELOCITY FLOW] [--time T] [--tank {rectangular,conical}]

All commands print JSON on stdout.  A formula that does not compile prints
its diagnostic on stderr and exits with status 1.

Examples:
    # Value of a formula at a point
    python -m calcviz eval "sqrt(x) + 1" --at 4

    # Riemann rectangles with 20 partitions
    python -m calcviz area "sin(x)" --bounds 0 3.14159 --partitions 20

    # Export the solid swept around the horizontal axis
    python -m calcviz volume "0.5*x^2 + 1" --axis y=0 -o solid.stl

    # Tank state half way through
    python -m calcviz physics "2*t^2 - 3*t + 10" "5 - 0.1*t" --time 5 --tank conical
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from calcviz.config import load_settings
from calcviz.expr import ParseError, compile_expression, evaluate
from calcviz.io.geometry_json import dump_curve, dump_error, dump_scene, to_json
from calcviz.io.stl import write_stl
from calcviz.logging_config import setup_logging
from calcviz.physics import TankShape
from calcviz.revolution import AxisMode
from calcviz.scene import area_scene, physics_scene, volume_scene
from calcviz.sampling import sample

logger = logging.getLogger(__name__)


def _print_json(doc) -> None:
    print(json.dumps(doc, indent=2))


def _report(error: ParseError) -> int:
    print(error.diagnostic.format(), file=sys.stderr)
    return 1


def cmd_eval(args, settings):
    """Evaluate a formula at one point."""
    expr = compile_expression(args.expr, args.var)
    if isinstance(expr, ParseError):
        return _report(expr)

    result = evaluate(expr, args.at)
    _print_json({
        "expression": expr.source,
        "canonical": expr.canonical,
        "at": args.at,
        "value": result.value,
        "ok": result.ok,
        "error": None if result.ok else dump_error(result.error),
    })
    return 0


def cmd_sample(args, settings):
    """Sample a formula over an interval."""
    expr = compile_expression(args.expr, args.var)
    if isinstance(expr, ParseError):
        return _report(expr)

    bounds = settings.area.bounds if args.bounds is None else args.bounds
    segments = settings.area.curve_segments if args.segments is None else args.segments
    _print_json(dump_curve(sample(expr, bounds, segments)))
    return 0


def cmd_area(args, settings):
    """Area polygon and Riemann rectangles."""
    scene = area_scene(args.expr, args.bounds, args.partitions, settings=settings)
    if scene.error is not None:
        return _report(scene.error)
    _print_json(dump_scene(scene))
    return 0


def cmd_volume(args, settings):
    """Solid of revolution; optionally export it."""
    scene = volume_scene(args.expr, args.bounds, args.axis, args.offset,
                         args.position, settings=settings)
    if scene.error is not None:
        return _report(scene.error)

    if args.output is None:
        _print_json(dump_scene(scene))
        return 0

    output = Path(args.output)
    if output.suffix.lower() == '.stl':
        facets = write_stl(scene.mesh, output, binary=not args.ascii)
    elif output.suffix.lower() == '.json':
        output.write_text(to_json(scene, indent=2), encoding='utf-8')
        facets = scene.mesh.triangle_count
    else:
        print(f"Error: unsupported output format: {output.suffix}", file=sys.stderr)
        return 1

    logger.info("wrote %s", output)
    _print_json({
        "output": str(output),
        "facets": facets,
        "vertices": scene.mesh.vertex_count,
        "method": scene.method,
        "volume": scene.volume.value,
    })
    return 0


def cmd_physics(args, settings):
    """Distance and tank state at a point in time."""
    scene = physics_scene(args.velocity, args.flow, args.bounds, args.time,
                          args.tank, settings=settings)
    if scene.error is not None:
        return _report(scene.error)
    _print_json(dump_scene(scene))
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog='calcviz',
        description='Calculus visualization geometry builder',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split('Examples:')[1] if 'Examples:' in __doc__ else None
    )
    parser.add_argument('--config', help='YAML settings file applied over the defaults')
    parser.add_argument('-v', '--verbose', action='count', default=0,
                        help='Log progress (-vv for debug output)')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    eval_parser = subparsers.add_parser('eval', help='Evaluate a formula at a point')
    eval_parser.add_argument('expr', help='Formula text')
    eval_parser.add_argument('--at', type=float, required=True, help='Value of the variable')
    eval_parser.add_argument('--var', default='x', help='Variable name (default: x)')

    sample_parser = subparsers.add_parser('sample', help='Sample a formula over an interval')
    sample_parser.add_argument('expr', help='Formula text')
    sample_parser.add_argument('--bounds', type=float, nargs=2, metavar=('MIN', 'MAX'))
    sample_parser.add_argument('--segments', type=int)
    sample_parser.add_argument('--var', default='x', help='Variable name (default: x)')

    area_parser = subparsers.add_parser('area', help='Area polygon and Riemann rectangles')
    area_parser.add_argument('expr', nargs='?', help='Formula in x (default from settings)')
    area_parser.add_argument('--bounds', type=float, nargs=2, metavar=('MIN', 'MAX'))
    area_parser.add_argument('--partitions', type=int)

    volume_parser = subparsers.add_parser('volume', help='Solid of revolution')
    volume_parser.add_argument('expr', nargs='?', help='Formula in x (default from settings)')
    volume_parser.add_argument('--bounds', type=float, nargs=2, metavar=('MIN', 'MAX'))
    volume_parser.add_argument('--axis', choices=[m.value for m in AxisMode])
    volume_parser.add_argument('--offset', type=float, help='Axis position for x=c')
    volume_parser.add_argument('--position', type=float, help='Cross-section position')
    volume_parser.add_argument('--output', '-o', help='Write the solid to FILE.stl or FILE.json')
    volume_parser.add_argument('--ascii', action='store_true', help='Write ASCII STL')

    physics_parser = subparsers.add_parser('physics', help='Motion and tank filling')
    physics_parser.add_argument('velocity', nargs='?', help='Velocity formula in t')
    physics_parser.add_argument('flow', nargs='?', help='Flow-rate formula in t')
    physics_parser.add_argument('--bounds', type=float, nargs=2, metavar=('MIN', 'MAX'))
    physics_parser.add_argument('--time', type=float, help='Current time')
    physics_parser.add_argument('--tank', choices=[s.value for s in TankShape],
                                default=TankShape.RECTANGULAR.value)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    if args.verbose:
        setup_logging(logging.DEBUG if args.verbose > 1 else logging.INFO)

    try:
        settings = load_settings(Path(args.config) if args.config else None)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    commands = {
        'eval': cmd_eval,
        'sample': cmd_sample,
        'area': cmd_area,
        'volume': cmd_volume,
        'physics': cmd_physics,
    }
    try:
        return commands[args.command](args, settings)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
