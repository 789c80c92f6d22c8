"""Errors raised while building an automaton."""

import sys


class AutomatonError(Exception):
    """Base class for failures during automaton construction."""

    description = "automaton construction failed"


class StateIDOverflowError(AutomatonError):
    """Building the automaton needed more states than the ID range allows."""

    description = "state id representation too small"

    def __init__(self, max_id):
        self.max_id = max_id
        super().__init__(
            "building the automaton failed because it required building "
            "more states that can be identified, where the maximum ID for "
            f"the chosen representation is {max_id}"
        )


class PremultiplyOverflowError(AutomatonError):
    """Premultiplied state IDs would not fit in the chosen ID range.

    When ``max_id == requested_max`` the IDs would not fit in the
    platform's native integer size at all.
    """

    description = "state id representation too small for premultiplication"

    def __init__(self, max_id, requested_max):
        self.max_id = max_id
        self.requested_max = requested_max
        if max_id == requested_max:
            message = (
                "premultiplication of states requires the ability to "
                "represent a state ID greater than what can fit on this "
                f"platform's usize, which is {sys.maxsize}"
            )
        else:
            message = (
                "premultiplication of states requires the ability to "
                f"represent at least a state ID of {requested_max}, but the "
                "chosen representation only permits a maximum state ID of "
                f"{max_id}"
            )
        super().__init__(message)