"""
Comptoir Event Layer — Errors
===============================
Raised at wiring time (bad subscriber registration) or by a reducer
handed an event it cannot apply. Subscriber failures at dispatch time
are reported, never raised.
"""


class EventBusError(Exception):
    pass


class InvalidEventTypeFormat(EventBusError):
    def __init__(self, event_type: str):
        self.event_type = event_type
        super().__init__(
            f"Event type '{event_type}' is not of the form engine.aggregate.action.vN."
        )


class DuplicateSubscriberError(EventBusError):
    def __init__(self, event_type: str, handler_name: str):
        self.event_type = event_type
        self.handler_name = handler_name
        super().__init__(f"'{handler_name}' is already subscribed to '{event_type}'.")


class UnknownEventTypeError(EventBusError):
    """The reducer has no handler for this event type."""

    def __init__(self, event_type: str):
        self.event_type = event_type
        super().__init__(f"Unknown event type '{event_type}'.")
