from __future__ import annotations

import io
from collections.abc import Iterable

import pytest

from solanize.cli.branding import themed_console
from solanize.cli.menu import InteractiveMenu
from solanize.cli.types import CommandRouter, Faucet, History, Outcome, Services, Swap
from solanize.core.config import SolanizeConfig


class ScriptedPrompt:
    """Feeds canned answers; raises EOFError once exhausted."""

    def __init__(self, answers: Iterable[str | type[BaseException]]) -> None:
        self._answers = iter(answers)
        self.prompts: list[str] = []

    def __call__(self, message: str) -> str:
        self.prompts.append(message)
        try:
            answer = next(self._answers)
        except StopIteration:
            raise EOFError from None
        if isinstance(answer, type) and issubclass(answer, BaseException):
            raise answer
        return answer


class RecordingRouter(CommandRouter):
    def __init__(self) -> None:
        super().__init__()
        self.commands: list[object] = []

    def dispatch(self, command: object, services: Services) -> Outcome:
        self.commands.append(command)
        return Outcome.success([f"ran {type(command).__name__}"])


@pytest.fixture(autouse=True)
def no_banner(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SOLANIZE_DISABLE_BANNER", "1")


def make_menu(config: SolanizeConfig, answers: Iterable, router: CommandRouter | None = None):
    output = io.StringIO()
    console = themed_console(file=output, width=100)
    prompt = ScriptedPrompt(answers)
    menu = InteractiveMenu(config, Services.from_config(config), console, prompt, router=router)
    return menu, prompt, output


def test_failed_command_does_not_end_the_loop(config: SolanizeConfig) -> None:
    menu, _, output = make_menu(config, ["3", "q"])

    menu.run()

    text = output.getvalue()
    assert "Wallet not found" in text
    assert "Goodbye!" in text


def test_invalid_selection_is_reported(config: SolanizeConfig) -> None:
    menu, _, output = make_menu(config, ["99", "abc", "exit"])

    menu.run()

    text = output.getvalue()
    assert "Invalid selection '99'" in text
    assert "Invalid selection 'abc'" in text


def test_exit_item_ends_loop(config: SolanizeConfig) -> None:
    router = RecordingRouter()
    menu, prompt, output = make_menu(config, ["15", "3"], router=router)

    menu.run()

    assert router.commands == []
    assert len(prompt.prompts) == 1
    assert "Goodbye!" in output.getvalue()


def test_keyboard_interrupt_at_prompt_continues(config: SolanizeConfig) -> None:
    router = RecordingRouter()
    menu, _, output = make_menu(config, [KeyboardInterrupt, "13", "q"], router=router)

    menu.run()

    assert "Cancelled." in output.getvalue()
    assert [type(command).__name__ for command in router.commands] == ["ShowConfig"]


def test_end_of_input_exits(config: SolanizeConfig) -> None:
    menu, _, output = make_menu(config, [])

    menu.run()

    assert "Goodbye!" in output.getvalue()


def test_faucet_uses_default_amount_on_blank_answer(config: SolanizeConfig) -> None:
    router = RecordingRouter()
    menu, prompt, _ = make_menu(config, ["4", "", "q"], router=router)

    menu.run()

    assert router.commands == [Faucet(amount=1.0)]
    assert "Amount (SOL) [1.0]: " in prompt.prompts


def test_bad_number_is_prompted_again(config: SolanizeConfig) -> None:
    router = RecordingRouter()
    menu, _, output = make_menu(config, ["11", "lots", "5", "q"], router=router)

    menu.run()

    assert "'lots' is not a valid number" in output.getvalue()
    assert router.commands == [History(limit=5)]


def test_swap_requires_confirmation(config: SolanizeConfig) -> None:
    router = RecordingRouter()
    menu, _, output = make_menu(config, ["7", "", "", "0.5", "n", "7", "", "bonk", "2", "y", "q"], router=router)

    menu.run()

    assert "Cancelled." in output.getvalue()
    assert router.commands == [Swap(from_token="SOL", to_token="bonk", amount=2.0)]


def test_declined_overwrite_keeps_existing_wallet(config: SolanizeConfig) -> None:
    menu, _, output = make_menu(config, ["1", "n", "q"])
    existing = menu.services.wallet_store.generate()

    menu.run()

    assert "Cancelled." in output.getvalue()
    assert menu.services.wallet_store.load().address == existing.address


def test_generate_from_menu_shows_recovery_phrase(config: SolanizeConfig) -> None:
    menu, _, output = make_menu(config, ["1", "q"])

    menu.run()

    assert menu.services.wallet_store.exists()
    assert "Recovery phrase" in output.getvalue()


@pytest.mark.parametrize("answer", ["nan", "inf"])
def test_non_finite_amount_is_reported_and_loop_continues(config: SolanizeConfig, answer: str) -> None:
    menu, prompt, output = make_menu(config, ["4", answer, "q"])

    menu.run()

    text = output.getvalue()
    assert "Amount must be a positive number." in text
    assert "Goodbye!" in text
    assert prompt.prompts[-1] == "Select an option: "
