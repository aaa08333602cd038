import json
from pathlib import Path

def load_tools(tool_json_path: str):
    """Loads a JSON tool schema from /tools folder and normalizes format"""
    tool_path = Path(tool_json_path)
    if not tool_path.exists():
        raise FileNotFoundError(f"Tool file not found: {tool_json_path}")

    with open(tool_path, "r") as f:
        data = json.load(f)

    #Normalize format -> extract array if wrapped in {"tools": [...]}
    if isinstance(data, dict) and "tools" in data:
        data = data["tools"]

    if not isinstance(data, list) or not data:
        raise ValueError(f"Tool file {tool_json_path} must contain a non-empty list of tools")

    return data


def get_tool_name(tools: list) -> str:
    """Returns the function name of a single-tool schema"""
    if len(tools) != 1:
        raise ValueError(f"Expected exactly one tool, got {len(tools)}")
    return tools[0]["function"]["name"]
