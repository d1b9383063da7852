"""Learning engine exceptions."""


class MemoryModelError(Exception):
    """
    The memory model failed or produced an invalid state.

    Raised before anything is written, so a rejected review leaves the card,
    its review log and every health aggregate untouched.
    """

    def __init__(self, message: str, card_id=None):
        super().__init__(message)
        self.message = message
        self.card_id = card_id
