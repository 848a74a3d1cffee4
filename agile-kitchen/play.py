import argparse
import logging
from typing import List, Optional

from engine.combo import ComboTracker
from engine.episodes import EpisodePhase
from game_context import configure_logging, create_session, load_settings
from ui.cli_provider import CLIProvider
from ui.ui import UI

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Nekonohige Kitchen: an agile cooking story.")
    parser.add_argument("--seed", type=int, default=None, help="Seed the random source for a replayable run.")
    parser.add_argument("--typing-speed", type=int, default=None, help="Milliseconds per revealed character (0 = instant).")
    parser.add_argument("--auto", action="store_true", help="Auto-advance dialogue.")
    parser.add_argument("--skip-intro", action="store_true", help="Start straight at day one.")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ...")
    return parser


def combo_hint(session) -> Optional[str]:
    history = session.state.action_history
    if ComboTracker.is_perfect_cycle(history):
        return "Perfect cycle!"
    missing = ComboTracker.missing_actions(history)
    if len(history) >= 2 and len(missing) == 1:
        return f"Next, \"{missing[0].display_name}\" for a perfect cycle!"
    return None


def game_step(session, ui: UI) -> bool:
    """
    Let queued timers run, render what happened, then prompt for the one
    input that makes sense right now. Returns False to quit.
    """
    session.run_until_idle()
    ui.render(session.drain_events())

    if session.graph.awaiting_choice:
        options = session.graph.pending_options()
        idx = ui.choice("How do you answer?", [o["label"] for o in options])
        session.select_choice(options[idx]["id"])
        return True

    if session.sequencer.is_active:
        if session.auto_mode:
            session.tick(session.balance.auto_advance_ms)
            return True
        raw = ui.text_input("[Enter] next  [s] skip >")
        if raw.lower() == "s":
            session.skip()
        else:
            session.advance()
        return True

    phase = session.episodes.phase
    if phase.terminal or session.resolver.is_terminal():
        again = ui.text_input("Play again? [y/N] >")
        if again.lower() == "y":
            session.restart()
            return True
        return False

    if phase == EpisodePhase.EPISODE_1_CLEAR:
        ui.text_input("[Enter] continue to Episode 2 >")
        session.advance()
        return True

    ui.system(session.episodes.goal_progress())
    choice = ui.choose_action(combo_hint(session))
    if choice == "quit":
        return False
    if choice == "tip":
        session.request_tip()
    elif choice == "auto":
        session.toggle_auto_mode()
    elif choice == "restart":
        session.restart()
    else:
        session.perform_action(choice)
    return True


def main(argv: Optional[List[str]] = None):
    args = build_parser().parse_args(argv)

    settings = load_settings()
    if args.seed is not None:
        settings.seed = args.seed
    if args.typing_speed is not None:
        settings.typing_speed_ms = args.typing_speed
    if args.log_level:
        settings.log_level = args.log_level.upper()
    configure_logging(settings)

    ui = UI(CLIProvider())
    session = create_session(settings)
    if args.auto:
        session.toggle_auto_mode()
    session.start(skip_intro=args.skip_intro)

    while True:
        keep_going = game_step(session, ui)
        if keep_going is False:
            break


if __name__ == "__main__":
    main()
