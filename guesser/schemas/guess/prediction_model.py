#Schematic models for the structured outputs returned by the predictors
from pydantic import BaseModel, StrictBool, model_validator
from typing import Optional


#Output of the question generator -> next question plus guess flag
class QuestionPrediction(BaseModel):
    new_question: str
    #StrictBool -> a "yes" string or 1 from the model is rejected, not coerced
    guess_made: StrictBool
    reasoning: Optional[str] = None

    @model_validator(mode='after')
    def model_check(self):
        if not self.new_question.strip():
            raise ValueError("new_question cannot be empty")

        return self


#Output of the reflection step -> free-text critique
class ReflectionPrediction(BaseModel):
    reflection: str
    reasoning: Optional[str] = None
