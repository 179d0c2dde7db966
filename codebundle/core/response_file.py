from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from codebundle.core.languages import LANGUAGE_EXTENSIONS
from codebundle.utils.config import DEFAULT_SORT, RSP_FILE_NAME

BUNDLE_COMMAND = "bundle"


@dataclass
class ResponseAnswers:
    """Answers collected by the create-rsp prompts, in prompt order."""

    output: str = ""
    languages: List[str] = field(default_factory=list)
    remove_empty_lines: bool = False
    author: str = ""
    sort: str = DEFAULT_SORT
    note: bool = False


def _bool_text(value: bool) -> str:
    return "true" if value else "false"


def render_response_lines(answers: ResponseAnswers) -> List[str]:
    """
    Lines of a response file replayable as ``codebundle @bundle.rsp``.

    The command name comes first, then one ``--flag value`` line per option in
    a fixed order. Options whose value is blank are left out.
    """
    pairs = [
        ("--output", answers.output),
        ("--language", ",".join(answers.languages)),
        ("--remove-empty-lines", _bool_text(answers.remove_empty_lines)),
        ("--sort", answers.sort),
        ("--author", answers.author),
        ("--note", _bool_text(answers.note)),
    ]
    lines = [BUNDLE_COMMAND]
    for flag, value in pairs:
        if value is None or not value.strip():
            continue
        lines.append(f"{flag} {value}")
    return lines


def _ask(prompt: Callable[[str], str], text: str) -> str:
    try:
        answer = prompt(text)
    except EOFError:
        return ""
    return answer if answer is not None else ""


def _yes(answer: str) -> bool:
    return answer.strip().lower() == "y"


def ask_answers(
    prompt: Optional[Callable[[str], str]] = None,
    echo: Optional[Callable[[str], None]] = None,
) -> Optional[ResponseAnswers]:
    """Run the prompt sequence; None when no language was given."""
    prompt = prompt or input
    echo = echo or print

    output = _ask(prompt, "Enter output file name (e.g., bundle.txt): ")

    known = ", ".join(LANGUAGE_EXTENSIONS)
    languages_input = _ask(
        prompt,
        f"Enter programming languages (from: ({known}), or 'all'): ",
    )
    if not languages_input.strip():
        echo("You must specify at least one language or 'all'.")
        return None
    languages = [lang.strip().lower() for lang in languages_input.split(",")]

    remove_empty_lines = _yes(_ask(prompt, "Remove empty lines? (y/n): "))
    author = _ask(prompt, "Enter author name (optional): ")
    sort = _ask(prompt, "Sort files by (name/type) [default: name]: ").strip().lower()
    if not sort:
        sort = DEFAULT_SORT
    note = _yes(_ask(prompt, "Include source notes? (y/n): "))

    return ResponseAnswers(
        output=output,
        languages=languages,
        remove_empty_lines=remove_empty_lines,
        author=author,
        sort=sort,
        note=note,
    )


def create_response_file(
    workdir: Path,
    prompt: Optional[Callable[[str], str]] = None,
    echo: Optional[Callable[[str], None]] = None,
) -> Optional[Path]:
    echo = echo or print
    answers = ask_answers(prompt, echo)
    if answers is None:
        return None

    path = Path(workdir) / RSP_FILE_NAME
    with path.open("w", encoding="utf-8") as f:
        for line in render_response_lines(answers):
            f.write(line + "\n")

    echo(f"Response file '{RSP_FILE_NAME}' has been created successfully!")
    echo(f"You can now run the bundling command with: codebundle @{RSP_FILE_NAME}")
    return path
