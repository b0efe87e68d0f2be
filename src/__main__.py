#!/usr/bin/env python3
"""
hikidown - Hiki wiki markup to Jekyll Markdown converter

Converts a tree of Hiki wiki documents (.hiki) into Markdown posts for a
Jekyll site, one .md file per source, mirroring the input layout.

As an aside, this codebase leverages the ChRIS "plugin" concept/pattern as
general purpose python app development framework.

Markup overview:
    - First line: document title (front matter)
    - ! headers, * / # lists, :term:definition, ||tables||, ""quotes
    - <<<lang ... >>> code blocks, indented preformatted text
    - [[title|url]] links, '''strong''', ''em'', ==del==, ``tt``
    - {{plugin args}} calls, rendered by the plugin registry

Usage:
    hikidown inputdir/ outputdir/ [--pattern '**/*.hiki']

Examples:
    # Convert every .hiki file below articles/
    hikidown articles/ _posts/

    # Start headings at level 2, verbose output
    hikidown articles/ _posts/ --headerLevel 2 -vv
"""

import sys
from pathlib import Path
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter

from chris_plugin import chris_plugin
from .lib import Compiler, MarkdownRenderer, InvariantError, __version__, LOG, state_connectToLogger
from .config import appsettings
from .models import ProgramState, pipeline


DISPLAY_TITLE = r"""
  _     _ _    _     _
 | |__ (_) | _(_) __| | _____      ___ __
 | '_ \| | |/ / |/ _` |/ _ \ \ /\ / / '_ \
 | | | | |   <| | (_| | (_) \ V  V /| | | |
 |_| |_|_|_|\_\_|\__,_|\___/ \_/\_/ |_| |_|

  Hiki wiki to Jekyll Markdown
"""

# Define CLI arguments
parser = ArgumentParser(
    description="hikidown - convert Hiki wiki markup to Jekyll Markdown",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "--pattern", default="**/*.hiki", type=str, help="Glob selecting source files below inputdir"
)

parser.add_argument(
    "--headerLevel",
    default=None,
    type=int,
    help="Heading level of a single '!' header (default: HIKIDOWN_HEADER_LEVEL or 1)",
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv, -vvv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Validate the input directory and create the output directory.

    Args:
        inputstate: Initial program state with CLI options

    Returns:
        ProgramState with envOK set

    Exits:
        1 if the input directory does not exist or the header level is out of range
    """
    state = inputstate.copy()

    if state.verbosity >= 2:
        LOG(DISPLAY_TITLE, level=2)

    LOG("Checking environment...", level=2)

    if state.inputdir is None or not state.inputdir.is_dir():
        print(f"Error: Input directory not found: {state.inputdir}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    if state.headerLevel is not None and not 1 <= state.headerLevel <= 6:
        print(f"Error: --headerLevel must be between 1 and 6, got {state.headerLevel}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    state.outputdir.mkdir(parents=True, exist_ok=True)
    LOG(f"Output directory: {state.outputdir}", level=2)

    state.envOK = True
    return state


def sources_find(inputstate: ProgramState) -> ProgramState:
    """
    Map every source matching the pattern to its output .md path.

    Args:
        inputstate: Program state with inputdir, outputdir and pattern

    Returns:
        ProgramState with sourceFiles populated

    Exits:
        1 if no source file matches
    """
    state = inputstate.copy()

    state.sourceFiles = [
        (source, state.outputdir / source.relative_to(state.inputdir).with_suffix(".md"))
        for source in sorted(state.inputdir.glob(state.pattern))
        if source.is_file()
    ]

    if not state.sourceFiles:
        print(f"Error: No files match {state.pattern} in {state.inputdir}", file=sys.stderr)
        sys.exit(1)

    LOG(f"Found {len(state.sourceFiles)} source files", level=2)
    return state


def markdown_compile(inputstate: ProgramState) -> ProgramState:
    """
    Convert each source file to Markdown.

    A file that cannot be read is reported and skipped; an internal
    compiler error aborts the run.

    Args:
        inputstate: Program state with sourceFiles

    Returns:
        ProgramState with added field:
            - compileResult: Dict containing:
                - converted: int (files written)
                - failed: list of str (files that could not be read)
                - outputs: list of str (written paths)

    Exits:
        1 on an internal compiler error
    """
    state = inputstate.copy()

    LOG("Converting sources to Markdown...", level=1)

    outputs = []
    failed = []
    for source, target in state.sourceFiles:
        try:
            text = source.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            print(f"Error reading {source}: {e}", file=sys.stderr)
            failed.append(str(source))
            continue

        try:
            compiler = Compiler(MarkdownRenderer(source.name), level=state.headerLevel)
            markdown = compiler.compile(text)
        except InvariantError as e:
            print(f"Compilation error in {source}: {e}", file=sys.stderr)
            if state.verbosity >= 3:
                import traceback

                traceback.print_exc()
            sys.exit(1)

        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(markdown, encoding="utf-8")
        outputs.append(str(target))
        LOG(f"Wrote {target}", level=2)

    state.compileResult = {
        'converted': len(outputs),
        'failed': failed,
        'outputs': outputs,
    }
    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Display conversion results.

    Args:
        inputstate: Program state with compileResult populated

    Returns:
        ProgramState unchanged (terminal pipeline stage)

    Exits:
        1 if compileResult is None or any file failed
    """
    state: ProgramState = inputstate.copy()
    if not state.compileResult:
        print("Error: Conversion failed", file=sys.stderr)
        sys.exit(1)

    LOG("\n✓ Conversion finished", level=1)
    LOG(f"  Converted: {state.compileResult['converted']}", level=1)
    LOG(f"  Output:    {state.outputdir}", level=1)

    if state.compileResult['failed']:
        LOG(f"  Failed:    {len(state.compileResult['failed'])}", level=1)
        sys.exit(1)
    return state


@chris_plugin(
    parser=parser,
    title="hikidown - Hiki wiki to Jekyll Markdown",
    category="Utility",
    min_memory_limit="100Mi",
    min_cpu_limit="500m",
)
def main(options: Namespace, inputdir: Path, outputdir: Path):
    """
    Main entry point - convert a directory of .hiki sources to Markdown.

    Orchestrates the conversion pipeline:
        1. env_check: Validate paths and create the output directory
        2. sources_find: Map sources to output paths
        3. markdown_compile: Convert each source
        4. results_report: Display results to user

    Args:
        options: CLI arguments from argparse
            - pattern: str - Glob selecting sources
            - headerLevel: Optional[int] - Base heading level
            - verbosity: int - Logging verbosity level (1-3)
        inputdir: Directory containing .hiki sources
        outputdir: Directory where Markdown files are written

    Note:
        This function is wrapped by @chris_plugin which handles CLI
        argument parsing and invokes this function with parsed values.
    """

    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=inputdir, outputdir=outputdir
    )

    if appsettings.debug_mode:
        state.verbosity = max(state.verbosity, 3)

    state_connectToLogger(state)

    pipeline(state, env_check, sources_find, markdown_compile, results_report)


if __name__ == "__main__":
    main()  # type: ignore  # @chris_plugin decorator transforms signature
