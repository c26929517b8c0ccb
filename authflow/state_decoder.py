"""
Decoding of the OAuth2 ``state`` envelope.

The authorization request resolver builds ``state`` as comma separated
``key=value`` fragments, appended left to right, e.g.
``nonce=abc123,origin=https://app.example.com/home``. Only recognized keys
are kept; unknown keys and fragments without ``=`` are skipped so that new
fragments (CSRF nonces and the like) never break sign-in.
"""

from __future__ import annotations

from collections.abc import Iterable

from .constants import RECOGNIZED_STATE_KEYS, STATE_PARAMETER_ORIGIN


def decode_state(
    state: str | None, recognized: Iterable[str] = RECOGNIZED_STATE_KEYS
) -> dict[str, str]:
    """
    Parse ``state`` into a mapping of recognized keys to values.

    A key repeated across fragments keeps its last value. Values are taken
    verbatim after the first ``=``, so values that themselves contain ``=``
    (URLs with query strings) are preserved.

    Args:
        state: Raw ``state`` query parameter, may be None or empty
        recognized: Keys to retain

    Returns:
        Mapping of recognized keys to their values; empty when none match
    """
    if not state:
        return {}

    keys = frozenset(recognized)
    decoded: dict[str, str] = {}
    for fragment in state.split(","):
        key, sep, value = fragment.partition("=")
        if not sep:
            continue
        key = key.strip()
        if key in keys:
            decoded[key] = value
    return decoded


class StateDecoder:
    def __init__(self, recognized: Iterable[str] = RECOGNIZED_STATE_KEYS) -> None:
        self.recognized = frozenset(recognized)

    def decode(self, state: str | None) -> dict[str, str]:
        return decode_state(state, self.recognized)

    def origin(self, state: str | None) -> str | None:
        """Return the last ``origin`` value in ``state``, if any."""
        return self.decode(state).get(STATE_PARAMETER_ORIGIN)
