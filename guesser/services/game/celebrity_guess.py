#Service file running one game of "guess the celebrity"
#The loop asks generated questions, collects the human's answers, then asks for a reflection
import json
import logging
import os
from pathlib import Path
from typing import Callable, Optional, Union

from guesser.schemas.guess.session_model import GuessSession
from guesser.services.game.oracle import ask_yes_no


DEFAULT_MAX_TRIES = int(os.getenv("GUESSER_MAX_TRIES", "20"))
SUCCESS_MESSAGE = "Yay! I guessed it right."
FAILURE_MESSAGE = "Oh no! I couldn't guess it right."


class CelebrityGuess:
    """
    Drives a guessing session between the question generator and a human.

    Both predictors are treated as pure functions of their keyword arguments:
    the generator only ever sees the question/answer history, and the
    celebrity name is handed to the reflector alone.
    """

    def __init__(
        self,
        question_generator: Callable,
        reflector: Callable,
        max_tries: int = DEFAULT_MAX_TRIES,
        oracle: Optional[Callable[[str], bool]] = None,
        input_fn=input,
        print_fn=print,
    ):
        if max_tries < 1:
            raise ValueError(f"max_tries must be at least 1, got {max_tries}")

        self.question_generator = question_generator
        self.reflector = reflector
        self.max_tries = max_tries
        self.input_fn = input_fn
        self.print_fn = print_fn
        self.oracle = oracle or (lambda question: ask_yes_no(question, input_fn, print_fn))

    def play(self, celebrity: Optional[str] = None) -> GuessSession:
        """Runs the question loop until a confirmed guess or max_tries, then reflects"""
        if celebrity is None:
            celebrity = self.input_fn("Think of a celebrity and enter their name (kept from the guesser): ")
            #Blank names are re-asked, same rule as the --celebrity flag
            while not celebrity.strip():
                self.print_fn("The celebrity name cannot be empty.")
                celebrity = self.input_fn("Think of a celebrity and enter their name (kept from the guesser): ")
        elif not celebrity.strip():
            raise ValueError("Celebrity cannot be empty")

        past_questions = []
        past_answers = []
        final_guess = ""
        correct = False

        for round_number in range(1, self.max_tries + 1):
            #Copies -> each call gets a snapshot of the history, not the live lists
            prediction = self.question_generator(
                past_questions=list(past_questions),
                past_answers=list(past_answers),
            )
            new_question = prediction.new_question
            guess_made = prediction.guess_made

            answer = self.oracle(new_question)
            past_questions.append(new_question)
            past_answers.append(answer)
            final_guess = new_question

            logging.info(
                f"[GUESS] Round {round_number}/{self.max_tries}: {new_question!r} "
                f"guess={guess_made} answer={'y' if answer else 'n'}"
            )

            if guess_made and answer:
                correct = True
                break

        self.print_fn(SUCCESS_MESSAGE if correct else FAILURE_MESSAGE)
        logging.info(f"[GUESS] Session finished after {len(past_questions)} rounds, correct={correct}")

        reflection = self.reflector(
            correct_celebrity_name=celebrity,
            final_guessor_question=final_guess,
            past_questions=list(past_questions),
            past_answers=list(past_answers),
        )
        self.print_fn(reflection.reflection)

        return GuessSession(
            celebrity=celebrity,
            past_questions=past_questions,
            past_answers=past_answers,
            correct=correct,
            final_guess=final_guess,
            reflection=reflection.reflection,
        )

    __call__ = play

    #Persisting predictor state -> instructions, demos and settings for both predictors
    def dump_state(self) -> dict:
        return {
            "generate_question": self.question_generator.dump_state(),
            "reflection": self.reflector.dump_state(),
            "metadata": {"max_tries": self.max_tries},
        }

    def save(self, path: Union[str, Path]) -> Path:
        target_path = Path(path)
        target_path.parent.mkdir(parents=True, exist_ok=True)
        target_path.write_text(json.dumps(self.dump_state(), indent=2, ensure_ascii=False), encoding="utf-8")
        logging.info(f"[GUESS] Saved predictor state to {target_path}")
        return target_path

    def load(self, path: Union[str, Path]) -> "CelebrityGuess":
        source_path = Path(path)
        if not source_path.exists():
            raise FileNotFoundError(f"Program file not found: {path}")

        state = json.loads(source_path.read_text(encoding="utf-8"))
        if not isinstance(state, dict):
            raise ValueError(f"Program file {path} must contain a JSON object")

        if "generate_question" in state:
            self.question_generator.load_state(state["generate_question"])
        if "reflection" in state:
            self.reflector.load_state(state["reflection"])
        logging.info(f"[GUESS] Loaded predictor state from {source_path}")
        return self
