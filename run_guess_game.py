#!/usr/bin/env python3
"""
Play one round of "guess the celebrity" in the terminal.

You think of a celebrity, the question generator asks yes/no questions
(answer with y or n), and after the game a reflection step critiques how
the questioning went.

Usage examples:
    # Default game, up to 20 questions
    python3 run_guess_game.py

    # Shorter game without chain-of-thought, transcript saved as JSON
    python3 run_guess_game.py --max-tries 10 --no-chain-of-thought \
        --format json --output session.json

    # Reuse saved predictor state and save it again afterwards
    python3 run_guess_game.py --load-program program.json --save-program program.json

Exit codes:
    0 = Session completed (guessed or not)
    1 = Error
    130 = Interrupted
"""

import argparse
import json
import logging
import sys
from pathlib import Path

import yaml

from guesser.services.agents.setup_predictors import build_question_generator, build_reflector
from guesser.services.game.celebrity_guess import DEFAULT_MAX_TRIES, CelebrityGuess


def _positive_int(value: str) -> int:
    """argparse type for --max-tries"""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"{value!r} is not an integer")
    if number < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return number


#Formats the session transcript in text, json, or yaml format
def format_session_output(session: dict, format_type: str) -> str:
    """Format session results in requested format"""
    if format_type == "json":
        return json.dumps(session, indent=2, ensure_ascii=False)
    elif format_type == "yaml":
        return yaml.dump(session, default_flow_style=False, sort_keys=False, allow_unicode=True)
    else:  #Text format with simple section headers
        sections = ["CELEBRITY", session.get("celebrity", ""), ""]

        sections.append("TRANSCRIPT")
        pairs = zip(session.get("past_questions", []), session.get("past_answers", []))
        lines = [
            f"{index}. {question} -> {'yes' if answer else 'no'}"
            for index, (question, answer) in enumerate(pairs, start=1)
        ]
        sections.append("\n".join(lines) if lines else "(empty)")
        sections.append("")

        sections.append("OUTCOME")
        outcome = "guessed" if session.get("correct") else "not guessed"
        sections.append(f"{outcome} after {session.get('rounds', len(lines))} questions")
        sections.append("")

        sections.append("REFLECTION")
        reflection = session.get("reflection", "")
        sections.append(reflection.strip() if reflection else "(empty)")
        return '\n'.join(sections).strip()


def build_game(args) -> CelebrityGuess:
    """Creates both predictors and the game loop from parsed arguments"""
    chain_of_thought = not args.no_chain_of_thought
    game = CelebrityGuess(
        question_generator=build_question_generator(chain_of_thought=chain_of_thought, model=args.model),
        reflector=build_reflector(chain_of_thought=chain_of_thought, model=args.model),
        max_tries=args.max_tries,
    )
    if args.load_program:
        game.load(args.load_program)
        #Explicit --model and --no-chain-of-thought still win over the saved state
        if args.model:
            game.question_generator.model = args.model
            game.reflector.model = args.model
        if args.no_chain_of_thought:
            game.question_generator.chain_of_thought = False
            game.reflector.chain_of_thought = False
    return game


#Main entry point for playing from the command line
def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Play 'guess the celebrity' against a question generator.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    #Game options
    parser.add_argument(
        "--celebrity",
        help="Celebrity you are thinking of (prompted for when omitted)"
    )
    parser.add_argument(
        "--max-tries",
        type=_positive_int,
        default=DEFAULT_MAX_TRIES,
        help=f"Maximum number of questions (default: {DEFAULT_MAX_TRIES})"
    )

    #Predictor options
    parser.add_argument(
        "--model",
        help="Chat model used by both predictors (default: GUESSER_MODEL or gpt-4o-mini)"
    )
    parser.add_argument(
        "--no-chain-of-thought",
        action="store_true",
        help="Ask for outputs directly, without a reasoning field"
    )
    parser.add_argument(
        "--load-program",
        help="Load predictor state (instructions, demos) from a JSON file"
    )
    parser.add_argument(
        "--save-program",
        help="Save predictor state to a JSON file after the game"
    )

    #Output formatting options
    parser.add_argument(
        "--format",
        choices=["text", "json", "yaml"],
        default="text",
        help="Transcript format (default: text)"
    )
    parser.add_argument(
        "--output",
        help="Write the transcript to file"
    )

    #Logging configuration options
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )
    parser.add_argument(
        "--log-file",
        help="Write logs to file"
    )

    args = parser.parse_args(argv)

    if args.celebrity is not None and not args.celebrity.strip():
        parser.error("Celebrity cannot be empty")

    #Logs go to stderr -> stdout stays the game surface
    log_level = logging.DEBUG if args.verbose else logging.WARNING
    log_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    handlers = [logging.StreamHandler(sys.stderr)]
    if args.log_file:
        handlers.append(logging.FileHandler(args.log_file))

    logging.basicConfig(
        level=log_level,
        format=log_format,
        handlers=handlers
    )

    try:
        game = build_game(args)
        session = game.play(args.celebrity)

        if args.save_program:
            game.save(args.save_program)
            print(f"[INFO] Predictor state written to {args.save_program}", file=sys.stderr)

        output_text = format_session_output(session.to_dict(), args.format)
        if args.output:
            Path(args.output).write_text(output_text, encoding="utf-8")
            print(f"[INFO] Transcript written to {args.output}", file=sys.stderr)
        elif args.format != "text":
            print(output_text)

        return 0

    except KeyboardInterrupt:
        print("\n[INTERRUPTED] Game cancelled", file=sys.stderr)
        return 130

    except Exception as e:
        print(f"\n[ERROR] Game failed: {e}", file=sys.stderr)
        logging.exception("Full error details:")
        return 1


if __name__ == "__main__":
    sys.exit(main())
