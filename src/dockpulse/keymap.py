"""Key name -> Intent mapping built from the configured key bindings."""

import logging
from typing import Dict, Optional

from .config import KeyBindings
from .messages import Intent

logger = logging.getLogger(__name__)

BINDING_INTENTS = {
    "up": Intent.UP,
    "down": Intent.DOWN,
    "open": Intent.OPEN,
    "back": Intent.BACK,
    "start": Intent.START,
    "stop": Intent.STOP,
    "help": Intent.HELP,
    "quit": Intent.QUIT,
}


def build_keymap(bindings: KeyBindings) -> Dict[str, Intent]:
    keymap: Dict[str, Intent] = {}
    for attr, intent in BINDING_INTENTS.items():
        for key in getattr(bindings, attr):
            if key in keymap and keymap[key] is not intent:
                logger.warning(f"Key {key!r} bound twice, keeping {keymap[key].value}")
                continue
            keymap[key] = intent

    keymap.update(r_key_intents(bindings))
    return keymap


def r_key_intents(bindings: KeyBindings) -> Dict[str, Intent]:
    """What `r` and `R` trigger, leaving out either one claimed by another binding."""
    if bindings.r_action == "restart":
        pairs = {"r": Intent.RESTART, "R": Intent.REFRESH}
    else:
        pairs = {"r": Intent.REFRESH, "R": Intent.RESTART}
    taken = {key for attr in BINDING_INTENTS for key in getattr(bindings, attr)}
    return {key: intent for key, intent in pairs.items() if key not in taken}


def resolve_key(keymap: Dict[str, Intent], key: str, character: Optional[str] = None) -> Optional[Intent]:
    intent = keymap.get(key)
    if intent is None and character:
        intent = keymap.get(character)
    return intent
