#!/usr/bin/env python3
"""
CLI for the OSL canvas runtime.

Usage:
    python -m oslcanvas.lang tokens FILE.osl
    python -m oslcanvas.lang parse FILE.osl
    python -m oslcanvas.lang run FILE.osl [--headless] [--frames N] [--fps N]
                                         [--storage FILE] [--debug]

Examples:
    # Show the token stream
    python -m oslcanvas.lang tokens examples/hello.osl

    # Show parsed statements and the label index
    python -m oslcanvas.lang parse examples/hello.osl

    # Open a window and run until it is closed
    python -m oslcanvas.lang run examples/hello.osl

    # Run 10 frames without a window and print what was drawn
    python -m oslcanvas.lang run examples/hello.osl --headless --frames 10
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path


def read_source(path: str):
    source_path = Path(path)
    if not source_path.exists():
        print(f"Error: File not found: {source_path}", file=sys.stderr)
        return None
    return source_path.read_text()


def cmd_tokens(args):
    """Print one token per line, grouped by source line."""
    from . import tokenize

    source = read_source(args.file)
    if source is None:
        return 1

    line = []
    for token in tokenize(source):
        if token.kind.name == 'NEWLINE':
            print(f"{token.line:4d}: {' '.join(str(t) for t in line)}".rstrip())
            line = []
        else:
            line.append(token)
    return 0


def cmd_parse(args):
    """Print parsed statements and labels."""
    from . import tokenize, parse, format_statement

    source = read_source(args.file)
    if source is None:
        return 1

    program = parse(tokenize(source))
    print(f"Statements ({len(program)}):")
    for i, stmt in enumerate(program.statements):
        print(f"  {i:3d}  {format_statement(stmt)}")
    if program.labels:
        print(f"Labels ({len(program.labels)}):")
        for name, index in program.labels.items():
            print(f"  {name} -> {index}")
    return 0


async def run_program(runtime, frames, fps):
    """Run until stopped, or for ``frames`` frames when given."""
    runtime.start()
    try:
        while runtime.running:
            if frames is not None and runtime.frame_count >= frames:
                break
            await asyncio.sleep(1.0 / fps)
    finally:
        await runtime.aclose()


def cmd_run(args):
    """Run an OSL program."""
    from . import Runtime, RunnerOptions, SurfaceUnavailableError
    from .runtime import AsyncioFrameTimer, HttpResourceFetcher, JsonFileStorage, MemoryStorage

    source = read_source(args.file)
    if source is None:
        return 1

    base_dir = Path(args.file).resolve().parent
    storage = JsonFileStorage(args.storage) if args.storage else MemoryStorage()
    options = RunnerOptions(debug=args.debug, on_log=print if args.debug else None)

    if args.headless:
        from ..surface import RecordingSurface
        surface = RecordingSurface()
        fetcher = HttpResourceFetcher(surface.decode_image, base_dir=base_dir)
        gamepads = None
    else:
        from ..pyglet_surface import JoystickGamepads, PygletSound, PygletSurface, bind_input
        surface = PygletSurface(caption=Path(args.file).name)
        fetcher = HttpResourceFetcher(surface.decode_image, PygletSound.from_bytes,
                                      base_dir=base_dir)
        gamepads = JoystickGamepads()

    try:
        runtime = Runtime(surface, source, options,
                          timer=AsyncioFrameTimer(args.fps),
                          storage=storage,
                          fetcher=fetcher,
                          gamepads=gamepads)
    except SurfaceUnavailableError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not args.headless:
        bind_input(surface, runtime)

    try:
        asyncio.run(run_program(runtime, args.frames, args.fps))
    except KeyboardInterrupt:
        runtime.stop()
    finally:
        if not args.headless:
            surface.close()

    print(f"Ran {runtime.frame_count} frame(s)")
    if args.headless:
        for op in surface.last_frame:
            print(f"  {op}")
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog='python -m oslcanvas.lang',
        description='OSL canvas runtime',
    )

    subparsers = parser.add_subparsers(dest='action', required=True)

    # tokens command
    tokens_parser = subparsers.add_parser('tokens', help='Print the token stream')
    tokens_parser.add_argument('file', help='OSL source file')

    # parse command
    parse_parser = subparsers.add_parser('parse', help='Print parsed statements')
    parse_parser.add_argument('file', help='OSL source file')

    # run command
    run_parser = subparsers.add_parser('run', help='Run an OSL program')
    run_parser.add_argument('file', help='OSL source file')
    run_parser.add_argument('--headless', action='store_true',
                            help='Draw to an in-memory surface instead of a window')
    run_parser.add_argument('--frames', type=int, metavar='N',
                            help='Stop after N frames')
    run_parser.add_argument('--fps', type=float, default=60.0,
                            help='Frame rate (default: 60)')
    run_parser.add_argument('--storage', metavar='FILE',
                            help='JSON file backing the save command')
    run_parser.add_argument('--debug', action='store_true',
                            help='Print script log messages')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if getattr(args, 'debug', False) else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.action == 'tokens':
        return cmd_tokens(args)
    elif args.action == 'parse':
        return cmd_parse(args)
    elif args.action == 'run':
        return cmd_run(args)
    else:
        parser.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())
