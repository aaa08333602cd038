#Service file to setup the predictors and connect them to the API key
#Creating the question generator and reflection predictors
import copy
import json
import logging
import os
from pathlib import Path
from typing import Iterable, List, Optional, Type

import openai
from pydantic import BaseModel

from .tool_loader import get_tool_name, load_tools
from .agent_prompts import (
    CHAIN_OF_THOUGHT_SUFFIX,
    QUESTION_GENERATOR_PROMPT,
    REASONING_FIELD,
    REFLECTION_PROMPT,
)
from guesser.schemas.guess.prediction_model import QuestionPrediction, ReflectionPrediction


TOOLS_DIR = Path(__file__).resolve().parent / "tools"

DEFAULT_MODEL = os.getenv("GUESSER_MODEL", "gpt-4o-mini")
DEFAULT_MAX_TOKENS = int(os.getenv("GUESSER_MAX_TOKENS", "400"))
DEFAULT_TEMPERATURE = float(os.getenv("GUESSER_TEMPERATURE", "0.7"))

#Shared OpenAI client -> created on first use so importing never needs a key
_AGENT_CLIENT = None


def get_agent_client():
    """Returns the process-wide OpenAI client, creating it on first use"""
    global _AGENT_CLIENT
    if _AGENT_CLIENT is None:
        _AGENT_CLIENT = openai.OpenAI(
            api_key=os.getenv("OPENAI_API_KEY")  #Getting API key from environment variables
        )
    return _AGENT_CLIENT


class PredictionError(RuntimeError):
    """Raised when the model does not return the structured output it was asked for"""


class Predictor:
    """
    A stateless structured call into the chat model.

    The predictor has fixed instructions, a declared list of input fields, and
    a declared output shape given by a single-function tool schema plus a
    pydantic model. Each call sends the instructions, any stored demos, and the
    current inputs, forces the tool call, then validates the tool arguments.
    """

    def __init__(
        self,
        name: str,
        instructions: str,
        input_fields: Iterable[str],
        tool_path: Path,
        output_model: Type[BaseModel],
        chain_of_thought: bool = False,
        model: Optional[str] = None,
        client=None,
        demos: Optional[List[dict]] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ):
        self.name = name
        self.instructions = instructions.strip()
        self.input_fields = list(input_fields)
        self.tool_path = Path(tool_path)
        self.output_model = output_model
        self.chain_of_thought = chain_of_thought
        self.model = model or DEFAULT_MODEL
        self.demos = list(demos or [])
        self.max_tokens = DEFAULT_MAX_TOKENS if max_tokens is None else max_tokens
        self.temperature = DEFAULT_TEMPERATURE if temperature is None else temperature
        self._client = client
        self._base_tools = load_tools(self.tool_path)
        self.tool_name = get_tool_name(self._base_tools)

    @property
    def client(self):
        return self._client or get_agent_client()

    def __call__(self, **inputs) -> BaseModel:
        self._check_inputs(inputs)
        messages = self._build_messages(inputs)
        tools = self._build_tools()

        logging.debug(f"[PREDICT] {self.name} -> {self.model} with {len(messages)} messages")
        response = self.client.chat.completions.create(
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            messages=messages,
            tools=tools,
            #Forcing the single tool -> output always arrives as JSON arguments
            tool_choice={"type": "function", "function": {"name": self.tool_name}},
        )

        prediction = self._parse_response(response)
        logging.debug(f"[PREDICT] {self.name} <- {prediction!r}")
        return prediction

    def _check_inputs(self, inputs: dict):
        missing = [field for field in self.input_fields if field not in inputs]
        unexpected = [field for field in inputs if field not in self.input_fields]
        if missing or unexpected:
            raise TypeError(
                f"{self.name} expects inputs {self.input_fields}; "
                f"missing={missing} unexpected={unexpected}"
            )

    def _format_inputs(self, values: dict) -> str:
        """Renders one field per line, values as JSON so lists and booleans stay unambiguous"""
        lines = []
        for field in self.input_fields:
            lines.append(f"{field}: {json.dumps(values.get(field), ensure_ascii=False)}")
        return "\n".join(lines)

    def _build_messages(self, inputs: dict) -> list:
        instructions = self.instructions
        if self.chain_of_thought:
            instructions = f"{instructions}\n{CHAIN_OF_THOUGHT_SUFFIX.strip()}"

        messages = [{'role': 'system', 'content': instructions}]

        #Demos become few-shot exchanges ahead of the real inputs
        for demo in self.demos:
            outputs = {key: value for key, value in demo.items() if key not in self.input_fields}
            messages.append({'role': 'user', 'content': self._format_inputs(demo)})
            messages.append({'role': 'assistant', 'content': json.dumps(outputs, ensure_ascii=False)})

        messages.append({'role': 'user', 'content': self._format_inputs(inputs)})
        return messages

    def _build_tools(self) -> list:
        tools = copy.deepcopy(self._base_tools)
        if not self.chain_of_thought:
            return tools

        parameters = tools[0]["function"].setdefault("parameters", {"type": "object"})
        properties = parameters.get("properties", {})
        #Reasoning first -> the model writes its thinking before the answer fields
        parameters["properties"] = {"reasoning": dict(REASONING_FIELD), **properties}
        parameters["required"] = ["reasoning"] + [
            field for field in parameters.get("required", []) if field != "reasoning"
        ]
        return tools

    def _parse_response(self, response) -> BaseModel:
        choices = getattr(response, "choices", None)
        if not choices:
            raise PredictionError(f"{self.name}: response contained no choices")

        msg = choices[0].message
        tool_calls = getattr(msg, "tool_calls", None)
        if not tool_calls:
            raise PredictionError(f"{self.name}: model answered without calling {self.tool_name}")

        call = tool_calls[0]
        if call.function.name != self.tool_name:
            raise PredictionError(
                f"{self.name}: expected tool {self.tool_name}, got {call.function.name}"
            )

        try:
            args = json.loads(call.function.arguments)
        except (TypeError, json.JSONDecodeError) as e:
            raise PredictionError(f"{self.name}: tool arguments are not valid JSON: {e}") from e

        return self.output_model.model_validate(args)

    def dump_state(self) -> dict:
        return {
            "model": self.model,
            "chain_of_thought": self.chain_of_thought,
            "instructions": self.instructions,
            "demos": copy.deepcopy(self.demos),
        }

    def load_state(self, state: dict):
        """Restores instructions, demos, chain-of-thought flag and model from a saved dict"""
        if "demos" in state:
            demos = state["demos"]
            if not isinstance(demos, list) or not all(isinstance(demo, dict) for demo in demos):
                raise ValueError(f"{self.name}: demos must be a list of objects")
            self.demos = copy.deepcopy(demos)
        if state.get("instructions"):
            self.instructions = str(state["instructions"]).strip()
        if "chain_of_thought" in state:
            #Only real JSON booleans -> a "false" string must not turn into True
            if not isinstance(state["chain_of_thought"], bool):
                raise ValueError(f"{self.name}: chain_of_thought must be true or false")
            self.chain_of_thought = state["chain_of_thought"]
        if state.get("model"):
            self.model = state["model"]
        return self

    def __repr__(self):
        return (
            f"Predictor(name={self.name!r}, model={self.model!r}, "
            f"chain_of_thought={self.chain_of_thought}, demos={len(self.demos)})"
        )


#Creating the question generator -> (past_questions, past_answers) -> (new_question, guess_made)
def build_question_generator(chain_of_thought: bool = True, model: Optional[str] = None, client=None) -> Predictor:
    return Predictor(
        name="generate_question",
        instructions=QUESTION_GENERATOR_PROMPT,
        input_fields=["past_questions", "past_answers"],
        tool_path=TOOLS_DIR / "question_tool.json",
        output_model=QuestionPrediction,
        chain_of_thought=chain_of_thought,
        model=model,
        client=client,
    )


#Creating the reflection predictor -> critiques the finished session
def build_reflector(chain_of_thought: bool = True, model: Optional[str] = None, client=None) -> Predictor:
    return Predictor(
        name="reflection",
        instructions=REFLECTION_PROMPT,
        input_fields=[
            "correct_celebrity_name",
            "final_guessor_question",
            "past_questions",
            "past_answers",
        ],
        tool_path=TOOLS_DIR / "reflection_tool.json",
        output_model=ReflectionPrediction,
        chain_of_thought=chain_of_thought,
        model=model,
        client=client,
    )
