"""Error taxonomy shared by the itinerary engine and the HTTP layer."""


class WanderlustError(Exception):
    """Base class for every error raised by the itinerary engine."""


class InvalidRangeError(WanderlustError, ValueError):
    """A date range ends before it starts."""


class IncompleteItemError(WanderlustError, ValueError):
    """A manual save is missing its required title or date."""


class NoSegmentsError(WanderlustError):
    """A flight save has nothing staged and nothing usable in the draft."""


class InvalidFormatError(WanderlustError, ValueError):
    """An import payload does not have the expected shape."""


class PersistenceError(WanderlustError):
    """The underlying store transaction failed and was rolled back."""


class TripNotFoundError(WanderlustError, LookupError):
    def __init__(self, trip_id):
        super().__init__(f"Trip {trip_id} not found")
        self.trip_id = trip_id


class ItemNotFoundError(WanderlustError, LookupError):
    def __init__(self, item_id):
        super().__init__(f"Item {item_id} not found")
        self.item_id = item_id


class ItineraryGenerationError(WanderlustError):
    """The external suggestion provider failed; nothing was written."""

    def __init__(self, message: str = "Could not generate itinerary"):
        super().__init__(message)
