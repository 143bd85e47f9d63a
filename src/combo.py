"""
combo multiplier and the decaying combo timer
"""
import logging
import math

from config import COMBO_WINDOW

logger = logging.getLogger(__name__)


# (highest combo count, multiplier), checked in order
MULTIPLIER_STEPS = (
    (1, 1.0),
    (3, 1.5),
    (5, 2.0),
    (10, 3.0),
)
MAX_MULTIPLIER = 4.0


def combo_multiplier(combo_count):
    for limit, multiplier in MULTIPLIER_STEPS:
        if combo_count <= limit:
            return multiplier
    return MAX_MULTIPLIER


def combo_score(raw_score, combo_count):
    """merge score of one move after the combo multiplier, floored"""
    return math.floor(raw_score * combo_multiplier(combo_count))


def next_combo_count(combo_count, merge_count):
    """combo after a move: merges extend the streak, a merge-less move keeps it"""
    if merge_count > 0:
        return combo_count + merge_count
    return combo_count


class ComboTimer:
    """
    resets the combo when no merge happens within the decay window

    wraps one pending event on a sched.scheduler. every new merge replaces
    the pending reset, and cancel() drops it when the session goes away.
    """

    def __init__(self, scheduler, on_decay, window=COMBO_WINDOW):
        self.scheduler = scheduler
        self.on_decay = on_decay
        self.window = window
        self._event = None

    @property
    def pending(self):
        return self._event is not None

    def restart(self):
        self.cancel()
        self._event = self.scheduler.enter(self.window, 0, self._fire)

    def cancel(self):
        if self._event is None:
            return
        try:
            self.scheduler.cancel(self._event)
        except ValueError:
            # already ran or was dropped with the queue
            pass
        self._event = None

    def _fire(self):
        self._event = None
        logger.debug("combo window elapsed, resetting combo")
        self.on_decay()
