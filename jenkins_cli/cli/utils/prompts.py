"""Interactive prompts for Jenkins CLI, built on questionary."""

from typing import Any, Callable, List, Optional, Sequence, Tuple, Union

import questionary


SELECT_INSTRUCTION = "(Use arrow keys, type to filter, Enter to select)"
CHECKBOX_INSTRUCTION = "(Use arrow keys, Space to toggle, Enter to confirm)"

ChoiceSpec = Union[str, Tuple[str, Any]]
Validator = Callable[[str], Union[bool, str]]


class PromptCancelled(Exception):
    """The user cancelled an interactive prompt (Ctrl+C / Esc)."""

    def __init__(self, message: str = "Operation cancelled."):
        super().__init__(message)


def _to_choices(choices: Sequence[ChoiceSpec]) -> List[questionary.Choice]:
    result = []
    for choice in choices:
        if isinstance(choice, tuple):
            title, value = choice
            result.append(questionary.Choice(title=title, value=value))
        else:
            result.append(questionary.Choice(title=choice, value=choice))
    return result


def _answered(answer: Any) -> Any:
    # questionary returns None when the prompt is interrupted
    if answer is None:
        raise PromptCancelled()
    return answer


class Prompter:
    """Single-choice, multi-choice, free-text and yes/no prompts.

    Choices are either plain strings or (title, value) pairs; the value is
    what gets returned.
    """

    def select(self, message: str, choices: Sequence[ChoiceSpec], default: Any = None) -> Any:
        question = questionary.select(
            message,
            choices=_to_choices(choices),
            default=default,
            instruction=SELECT_INSTRUCTION,
            use_search_filter=True,
            use_jk_keys=False,
        )
        return _answered(question.ask())

    def multi_select(self, message: str, choices: Sequence[ChoiceSpec]) -> List[Any]:
        question = questionary.checkbox(
            message,
            choices=_to_choices(choices),
            instruction=CHECKBOX_INSTRUCTION,
        )
        return _answered(question.ask())

    def text(
        self,
        message: str,
        default: Optional[str] = None,
        validate: Optional[Validator] = None,
        secret: bool = False,
    ) -> str:
        kwargs: dict = {"default": default or ""}
        if validate is not None:
            kwargs["validate"] = validate
        if secret:
            question = questionary.password(message, **kwargs)
        else:
            question = questionary.text(message, **kwargs)
        return _answered(question.ask())

    def confirm(self, message: str, default: bool = False) -> bool:
        return _answered(questionary.confirm(message, default=default).ask())


def get_prompter() -> Prompter:
    """Prompt provider used by commands."""
    return Prompter()


def not_empty(label: str) -> Validator:
    """Validator rejecting blank input."""

    def _validate(value: str) -> Union[bool, str]:
        if not value or not value.strip():
            return f"{label} cannot be empty"
        return True

    return _validate
