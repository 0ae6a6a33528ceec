import json
import re
import shlex

from cli_bridge.models.requests import ChatRequest, CliRequest, SearchRequest


class InvalidCommandError(Exception):
    """Raw command line rejected by the command endpoint."""
    pass


RAW_SEARCH_PROMPT = (
    'Perform a web search for "{query}". Synthesize the findings and provide a list of sources. '
    'Return the entire output as a single, valid JSON object with the following structure: '
    '{{ "summary": "...", "sources": [{{ "url": "...", "title": "...", "snippet": "..." }}] }}.'
)

# Markdown fence the model may wrap a JSON answer in
_JSON_FENCE = re.compile(r"^```json\n|```$")


def build_chat_args(request: ChatRequest) -> list[str]:
    """
    Build CLI arguments for a chat request.

    Args:
        request: Canonical chat request

    Returns:
        Arguments that follow the resolved command's leading arguments
    """
    return _prompt_args(request.prompt, request)


def build_search_args(request: SearchRequest) -> list[str]:
    """
    Build CLI arguments that ask the model to search the web.

    With raw set, the model is told to answer with a JSON object holding a
    summary and a list of sources.
    """
    if request.raw:
        prompt = RAW_SEARCH_PROMPT.format(query=request.query)
        if request.limit:
            prompt += f" Limit to {request.limit} sources."
    else:
        prompt = f"Search for: {request.query}"
        if request.limit:
            prompt += f" (return up to {request.limit} results)"

    return _prompt_args(prompt, request)


def _prompt_args(prompt: str, request: CliRequest) -> list[str]:
    args = ["-p", prompt]

    if request.sandbox:
        args.append("-s")
    if request.yolo:
        args.append("-y")
    if request.model:
        args.extend(["-m", request.model])

    return args


def process_raw_search_result(output: str) -> str:
    """Pretty-print the JSON answer of a raw search, or return output unchanged if it is not JSON."""
    text = _JSON_FENCE.sub("", output).strip()
    try:
        return json.dumps(json.loads(text), indent=2, ensure_ascii=False)
    except ValueError:
        return output


def parse_command(command: str, executable: str) -> list[str]:
    """
    Split a raw command line and check that it invokes the CLI.

    Args:
        command: Command line such as ``gemini -p "hello"``
        executable: Only this program may be invoked

    Returns:
        Arguments after the executable name

    Raises:
        InvalidCommandError: If the line cannot be split or targets another program
    """
    try:
        tokens = shlex.split(command)
    except ValueError as e:
        raise InvalidCommandError(f"Invalid command: {e}") from e

    if len(tokens) < 2 or tokens[0] != executable:
        raise InvalidCommandError(
            f"Invalid command. Only '{executable}' commands are allowed."
        )

    return tokens[1:]
