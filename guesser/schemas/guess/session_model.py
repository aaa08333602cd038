#Schematic model for a finished guessing session
from pydantic import BaseModel, Field, model_validator
from typing import List


#Class holding the transcript and outcome of one session
class GuessSession(BaseModel):
    celebrity: str
    past_questions: List[str] = Field(default_factory=list)
    past_answers: List[bool] = Field(default_factory=list)
    correct: bool = False
    final_guess: str = ""
    reflection: str = ""

    @property
    def rounds(self) -> int:
        return len(self.past_questions)

    #Validating the transcript -> every question has exactly one answer
    @model_validator(mode='after')
    def model_check(self):
        if len(self.past_questions) != len(self.past_answers):
            raise ValueError(
                f"Question/answer history misaligned: "
                f"{len(self.past_questions)} questions, {len(self.past_answers)} answers"
            )

        if self.correct and not self.past_answers:
            raise ValueError("A correct session needs at least one answered question")

        return self #returns instance

    def to_dict(self) -> dict:
        data = self.model_dump()
        data["rounds"] = self.rounds
        return data
