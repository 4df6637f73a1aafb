class WorkshopError(Exception):
    """Base class for workshop domain errors."""


class InvalidPayload(WorkshopError, ValueError):
    """A client event could not be turned into a workshop event.

    Reported back to the originating connection only.
    """

    def __init__(self, message: str, event: str = None):
        super().__init__(message)
        self.event = event

    def to_dict(self):
        return {'event': self.event, 'message': str(self)}


class UnknownEvent(InvalidPayload):
    pass
