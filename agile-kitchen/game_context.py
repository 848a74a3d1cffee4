"""
Central place for process-wide settings: where game data lives, how logging is
wired, and how a ready-to-play GameSession is built.
"""
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from engine.balance import Balance, load_balance
from engine.dice import Dice

logger = logging.getLogger(__name__)

DATA_ROOT = Path(__file__).resolve().parent / "game-data"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass
class Settings:
    data_root: Path = DATA_ROOT
    typing_speed_ms: Optional[int] = None
    seed: Optional[int] = None
    log_level: str = "WARNING"
    log_file: Optional[Path] = None


def _int_or_none(raw: Optional[str], name: str) -> Optional[int]:
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r", name, raw)
        return None


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    KITCHEN_DATA_ROOT, KITCHEN_TYPING_SPEED_MS, KITCHEN_SEED,
    KITCHEN_LOG_LEVEL, KITCHEN_LOG_FILE
    """
    env = os.environ if env is None else env
    data_root = env.get("KITCHEN_DATA_ROOT")
    log_file = env.get("KITCHEN_LOG_FILE")
    return Settings(
        data_root=Path(data_root) if data_root else DATA_ROOT,
        typing_speed_ms=_int_or_none(env.get("KITCHEN_TYPING_SPEED_MS"), "KITCHEN_TYPING_SPEED_MS"),
        seed=_int_or_none(env.get("KITCHEN_SEED"), "KITCHEN_SEED"),
        log_level=(env.get("KITCHEN_LOG_LEVEL") or "WARNING").upper(),
        log_file=Path(log_file) if log_file else None,
    )


def configure_logging(settings: Settings) -> None:
    root = logging.getLogger()
    root.setLevel(getattr(logging, settings.log_level, logging.WARNING))
    kinds = {getattr(h, "_kitchen", None) for h in root.handlers}
    if "stream" not in kinds:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._kitchen = "stream"
        root.addHandler(handler)
    if settings.log_file and "file" not in kinds:
        settings.log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(settings.log_file, encoding="utf-8")
        fh.setFormatter(logging.Formatter(LOG_FORMAT))
        fh._kitchen = "file"
        root.addHandler(fh)


def balance_for(settings: Settings) -> Balance:
    balance = load_balance(settings.data_root / "balance.json")
    if settings.typing_speed_ms is not None:
        balance = balance.with_overrides(typing_speed_ms=settings.typing_speed_ms)
    return balance


def create_session(settings: Optional[Settings] = None, **overrides):
    """
    Build a GameSession from settings. Keyword overrides (dice, balance,
    scheduler, ...) are passed straight through for tests.
    """
    # Import lazily to avoid circular imports
    from game_session import GameSession

    settings = settings or load_settings()
    seed = settings.seed
    kwargs = {
        "data_root": settings.data_root,
        "balance": balance_for(settings),
        "dice": Dice(seed),
        "flavor_dice": Dice(None if seed is None else seed + 1),
    }
    kwargs.update(overrides)
    return GameSession(**kwargs)
