"""
Reasons an event gets skipped.

Every condition here is local to one event: the driver logs it and moves on
to the next entry without writing anything for the rejected event.
"""


class EventSkipped(RuntimeError):
    """Base class for all event-level rejections."""

    reason = "skipped"


class EmptyInput(EventSkipped):
    """The event has no sampled channels at all."""

    reason = "empty_input"


class NoGoodModule(EventSkipped):
    """No candidate module to choose from."""

    reason = "no_good_module"


class NoROI(EventSkipped):
    """A plane has no sample above the ADC cut."""

    reason = "no_roi"

    def __init__(self, module, plane):
        super().__init__(f"No sample above threshold in module {module}, plane {plane}")
        self.module = module
        self.plane = plane


class UnsatisfiableConstraint(EventSkipped):
    """Parity or tick alignment cannot be met inside the channel/tick bounds."""

    reason = "unsatisfiable_constraint"
