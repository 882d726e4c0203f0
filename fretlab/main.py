"""Command line entry point for fretlab.

Two subcommands:

* ``render`` projects a scale onto an instrument preset and writes the
  board as SVG.
* ``train`` runs the interval trainer in the terminal, reading answers as
  ``<string> <fret>`` pairs.
"""

import logging
import random
import sys
from argparse import ArgumentParser, Namespace
from typing import Callable, List, Optional

from fretlab.base import FretlabError
from fretlab.config import (
    Instrument,
    InstrumentConfig,
    PositionPreset,
    get_config_for_instrument,
    wide_aspect,
)
from fretlab.model import FretboardModel, FretboardModelBuilder
from fretlab.parser import parse_note, parse_tuning
from fretlab.pos import FretCoord
from fretlab.render import FretboardView
from fretlab.scale import Scale, ScaleType, scale_type_name
from fretlab.trainer import (
    AnswerOutcome,
    Question,
    Trainer,
    describe,
    describe_outcome,
)


def build_model(args: Namespace) -> FretboardModel:
    """Assemble a model from the preset and range options."""
    config: InstrumentConfig = get_config_for_instrument(Instrument[args.instrument])
    if args.wide:
        config = wide_aspect(config)
    if args.position is not None:
        preset = PositionPreset.from_name(args.position)
        if preset is None:
            raise FretlabError(f"Unknown position: {args.position}")
        config = config.with_fret_range(preset.start_fret, preset.end_fret)
    if args.start is not None or args.end is not None:
        config = config.with_fret_range(
            args.start if args.start is not None else config.start_fret,
            args.end if args.end is not None else config.end_fret,
        )
    builder = FretboardModelBuilder.from_config(config)
    if args.tuning is not None:
        builder.tuning(parse_tuning(args.tuning))
    return builder.build()


def run_render(args: Namespace) -> None:
    scale_type = ScaleType.from_name(args.scale)
    if scale_type is None:
        raise FretlabError(f"Unknown scale: {args.scale}")
    scale = Scale(parse_note(args.root), scale_type)
    model = build_model(args)
    view = FretboardView(model)
    changed = model.project_scale(scale)
    logging.info("projected %s onto %d cells", scale, changed)
    svg = view.to_svg()
    view.close()
    if args.output == "-":
        sys.stdout.write(svg + "\n")
    else:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(svg)
        logging.info("wrote %s", args.output)


def parse_answer(line: str) -> Optional[FretCoord]:
    """Read ``<string> <fret>``, strings numbered from 1 like on a chart."""
    parts = line.split()
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        return None
    return FretCoord(int(parts[0]) - 1, int(parts[1]))


def prompt_text(question: Question) -> str:
    ref = question.reference
    return f"{describe(question)} (string {ref.string_index + 1}, fret {ref.fret_index})"


def run_trainer(
    trainer: Trainer,
    read_line: Callable[[str], str],
    write: Callable[[str], None],
    rounds: int,
) -> None:
    """Drive a trainer until `rounds` correct answers or a quit command."""
    write(prompt_text(trainer.start()))
    while trainer.stats().correct < rounds:
        try:
            line = read_line("> ").strip()
        except EOFError:
            break
        if line in ("q", "quit"):
            break
        coord = parse_answer(line)
        if coord is None:
            write("Answer as: <string> <fret>")
            continue
        outcome = trainer.submit(coord)
        message = describe_outcome(outcome)
        if message:
            write(message)
        question = trainer.question
        if (
            outcome == AnswerOutcome.Correct
            and question is not None
            and trainer.stats().correct < rounds
        ):
            write(prompt_text(question))
    stats = trainer.stats()
    write(
        f"{stats.correct} correct, {stats.incorrect} incorrect"
        f" ({stats.success_rate}%)"
    )
    trainer.stop()


def run_train(args: Namespace) -> None:
    model = build_model(args)
    trainer = Trainer(model, random.Random(args.seed))
    run_trainer(trainer, input, print, args.rounds)


def add_board_arguments(parser: ArgumentParser) -> None:
    parser.add_argument(
        "--instrument",
        choices=[i.name for i in Instrument],
        default=Instrument.Guitar.name,
    )
    parser.add_argument("--tuning", help="open strings, highest first")
    parser.add_argument("--wide", action="store_true")
    parser.add_argument(
        "--position", choices=[p.name for p in PositionPreset.all()]
    )
    parser.add_argument("--start", type=int)
    parser.add_argument("--end", type=int)


def make_parser() -> ArgumentParser:
    """Create the command-line argument parser.

    Returns:
        An ArgumentParser with the ``render`` and ``train`` subcommands.
    """
    parser = ArgumentParser(prog="fretlab")
    parser.add_argument("--log-level", default="WARNING")
    subparsers = parser.add_subparsers(dest="command", required=True)

    render = subparsers.add_parser("render", help="write a scale diagram as SVG")
    add_board_arguments(render)
    render.add_argument("--root", default="C")
    render.add_argument(
        "--scale",
        default="Major",
        choices=[scale_type_name(t) for t in ScaleType.all()],
    )
    render.add_argument("--output", "-o", default="-")
    render.set_defaults(func=run_render)

    train = subparsers.add_parser("train", help="practise intervals")
    add_board_arguments(train)
    train.add_argument("--rounds", type=int, default=5)
    train.add_argument("--seed", type=int)
    train.set_defaults(func=run_train)
    return parser


def configure_logging(log_level: str) -> None:
    """Configure the logging system with the specified log level.

    Args:
        log_level: The logging level (e.g., 'DEBUG', 'INFO', 'WARNING').
    """
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(filename)s:%(lineno)d -- %(message)s",
        level=log_level,
    )


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the fretlab command.

    Parses command-line arguments, configures logging and runs the
    selected subcommand. Configuration errors exit with status 2.
    """
    parser = make_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    try:
        args.func(args)
    except FretlabError as e:
        parser.exit(2, f"fretlab: error: {e}\n")
    logging.info("done")


if __name__ == "__main__":
    main()
