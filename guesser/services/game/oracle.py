#Service file for the human side of the game -> reads yes/no answers from the terminal
import logging

#Allowed raw responses (compared lower-cased) and the answer each one means
VALID_ANSWERS = {"y": True, "n": False}


def ask_yes_no(question: str, input_fn=input, print_fn=print) -> bool:
    """Prompts until the human types y or n (any case) and returns the answer as a bool"""
    while True:
        raw = input_fn(f"{question} (y/n): ")
        answer = (raw or "").lower()
        if answer in VALID_ANSWERS:
            return VALID_ANSWERS[answer]

        #Anything else is re-asked -> no default, no attempt limit
        logging.debug(f"[ORACLE] Rejected answer {raw!r}")
        print_fn("Please answer with 'y' or 'n'.")
