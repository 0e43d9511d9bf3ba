"""Use-case presets: each selector maps to a title and an objective for the system prompt."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from personal_assistant.errors import InvalidUseCase

SYSTEM_PROMPT_TEMPLATE = (
    "To create a {title} experience, greet users warmly and inquire about their "
    "test requirements. Based on their input, {objective}. Keep the output "
    "specific to their requirements."
)


@dataclass(frozen=True)
class UseCase:
    id: str
    title: str
    objective: str

    def system_prompt(self) -> str:
        objective = self.objective[:1].lower() + self.objective[1:]
        return SYSTEM_PROMPT_TEMPLATE.format(title=self.title, objective=objective.rstrip("."))


DEFAULT_USE_CASES: tuple[UseCase, ...] = (
    UseCase(
        id="use-case-1",
        title="User Story Testing",
        objective="Generate user story, derive test specifications and automate them",
    ),
    UseCase(
        id="use-case-2",
        title="API Test Case",
        objective="Generate API test cases and automate them",
    ),
    UseCase(
        id="use-case-3",
        title="Test Strategy",
        objective="Generate test strategy and plan",
    ),
    UseCase(
        id="use-case-4",
        title="Functional Testing",
        objective="Generate functional test cases and analyze Jira user stories",
    ),
)


class UseCaseCatalog:
    """Enumerable selector -> UseCase table."""

    def __init__(self, use_cases: Iterable[UseCase] = DEFAULT_USE_CASES):
        self._use_cases: dict[str, UseCase] = {}
        self.extend(use_cases)

    def extend(self, use_cases: Iterable[UseCase]) -> None:
        """Add or replace entries. Later entries win on duplicate ids."""
        for use_case in use_cases:
            self._use_cases[use_case.id] = use_case

    def get(self, selector: str) -> UseCase:
        try:
            return self._use_cases[selector]
        except KeyError:
            raise InvalidUseCase(selector) from None

    def describe(self, selector: str) -> str:
        """Human-readable objective for display; unknown selectors are shown as-is."""
        use_case = self._use_cases.get(selector)
        return use_case.objective if use_case else selector

    def __contains__(self, selector: object) -> bool:
        return selector in self._use_cases

    def __iter__(self) -> Iterator[UseCase]:
        return iter(self._use_cases.values())

    def __len__(self) -> int:
        return len(self._use_cases)
