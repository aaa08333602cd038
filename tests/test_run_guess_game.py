import io
import json
import sys
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path
from unittest.mock import patch

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import yaml

import run_guess_game
from guesser.schemas.guess.session_model import GuessSession


SESSION = GuessSession(
    celebrity="Ada Lovelace",
    past_questions=["Is it a scientist?", "Is it Ada Lovelace?"],
    past_answers=[True, True],
    correct=True,
    final_guess="Is it Ada Lovelace?",
    reflection="Two questions was quick.",
)


class FakeGame:
    def __init__(self, session=SESSION, error=None):
        self.session = session
        self.error = error
        self.saved_to = None
        self.played_with = "unset"

    def play(self, celebrity=None):
        self.played_with = celebrity
        if self.error:
            raise self.error
        return self.session

    def save(self, path):
        self.saved_to = path
        return Path(path)


class FormatSessionOutputTests(unittest.TestCase):
    def test_text_lists_numbered_transcript(self):
        text = run_guess_game.format_session_output(SESSION.to_dict(), "text")

        self.assertIn("1. Is it a scientist? -> yes", text)
        self.assertIn("guessed after 2 questions", text)
        self.assertTrue(text.endswith("Two questions was quick."))

    def test_json_and_yaml_round_trip_fields(self):
        data = SESSION.to_dict()

        self.assertEqual(json.loads(run_guess_game.format_session_output(data, "json")), data)
        self.assertEqual(yaml.safe_load(run_guess_game.format_session_output(data, "yaml")), data)

    def test_empty_transcript_text(self):
        data = GuessSession(celebrity="Nobody").to_dict()
        text = run_guess_game.format_session_output(data, "text")

        self.assertIn("(empty)", text)
        self.assertIn("not guessed after 0 questions", text)


class MainTests(unittest.TestCase):
    def _run(self, argv, game):
        stdout, stderr = io.StringIO(), io.StringIO()
        with patch.object(run_guess_game, "build_game", return_value=game), \
                redirect_stdout(stdout), redirect_stderr(stderr):
            code = run_guess_game.main(argv)
        return code, stdout.getvalue(), stderr.getvalue()

    def test_writes_transcript_and_program(self):
        game = FakeGame()
        with tempfile.TemporaryDirectory() as tmpdir:
            output = Path(tmpdir) / "session.json"
            program = Path(tmpdir) / "program.json"
            code, stdout, stderr = self._run(
                ["--celebrity", "Ada Lovelace", "--format", "json",
                 "--output", str(output), "--save-program", str(program)],
                game,
            )

            self.assertEqual(code, 0)
            self.assertEqual(json.loads(output.read_text())["celebrity"], "Ada Lovelace")
        self.assertEqual(game.played_with, "Ada Lovelace")
        self.assertEqual(game.saved_to, str(program))
        self.assertIn("Transcript written", stderr)
        self.assertEqual(stdout, "")

    def test_stdout_holds_only_json_when_saving_program(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            program = Path(tmpdir) / "program.json"
            code, stdout, stderr = self._run(
                ["--celebrity", "Ada Lovelace", "--format", "json", "--save-program", str(program)],
                FakeGame(),
            )

        self.assertEqual(code, 0)
        self.assertEqual(json.loads(stdout), SESSION.to_dict())
        self.assertIn("Predictor state written", stderr)

    def test_prompts_for_celebrity_when_flag_missing(self):
        game = FakeGame()
        code, _, _ = self._run([], game)

        self.assertEqual(code, 0)
        self.assertIsNone(game.played_with)

    def test_errors_return_one(self):
        code, _, stderr = self._run(["--celebrity", "Ada"], FakeGame(error=RuntimeError("boom")))

        self.assertEqual(code, 1)
        self.assertIn("[ERROR] Game failed: boom", stderr)

    def test_interrupt_returns_130(self):
        code, _, stderr = self._run(["--celebrity", "Ada"], FakeGame(error=KeyboardInterrupt()))

        self.assertEqual(code, 130)
        self.assertIn("[INTERRUPTED]", stderr)

    def test_rejects_non_positive_max_tries(self):
        with redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                run_guess_game.main(["--max-tries", "0"])


class BuildGameTests(unittest.TestCase):
    def test_builds_predictors_from_arguments(self):
        args = run_guess_game.argparse.Namespace(
            no_chain_of_thought=True, model="gpt-4o", max_tries=5, load_program=None,
        )
        game = run_guess_game.build_game(args)

        self.assertEqual(game.max_tries, 5)
        self.assertEqual(game.question_generator.model, "gpt-4o")
        self.assertFalse(game.reflector.chain_of_thought)

    def test_flags_override_loaded_program(self):
        saved = {
            "generate_question": {"model": "gpt-4o", "chain_of_thought": True},
            "reflection": {"model": "gpt-4o", "chain_of_thought": True},
        }
        with tempfile.TemporaryDirectory() as tmpdir:
            program = Path(tmpdir) / "program.json"
            program.write_text(json.dumps(saved))
            args = run_guess_game.argparse.Namespace(
                no_chain_of_thought=True, model="gpt-4.1", max_tries=5, load_program=str(program),
            )
            game = run_guess_game.build_game(args)

        self.assertFalse(game.question_generator.chain_of_thought)
        self.assertFalse(game.reflector.chain_of_thought)
        self.assertEqual(game.reflector.model, "gpt-4.1")

    def test_loaded_program_keeps_chain_of_thought_without_flag(self):
        saved = {"generate_question": {"chain_of_thought": False}}
        with tempfile.TemporaryDirectory() as tmpdir:
            program = Path(tmpdir) / "program.json"
            program.write_text(json.dumps(saved))
            args = run_guess_game.argparse.Namespace(
                no_chain_of_thought=False, model=None, max_tries=5, load_program=str(program),
            )
            game = run_guess_game.build_game(args)

        self.assertFalse(game.question_generator.chain_of_thought)
        self.assertTrue(game.reflector.chain_of_thought)


if __name__ == "__main__":
    unittest.main()
