class InvalidBeatmapData(ValueError):
    """Raised when a beatmap contains data that cannot be used.

    Parameters
    ----------
    message : str
        What is wrong with the data.
    beatmap : str, optional
        The name of the beatmap the data belongs to, if it is known yet.

    Notes
    -----
    This subclasses :class:`ValueError` so code which parses beatmaps can
    keep catching the same type it would for any malformed field.
    """
    def __init__(self, message, beatmap=None):
        super().__init__(message)
        self.message = message
        self.beatmap = beatmap

    def __str__(self):
        if self.beatmap is None:
            return self.message
        return f'{self.beatmap}: {self.message}'


class CalculationCancelled(Exception):
    """Raised when a difficulty calculation observes its cancellation flag.
    """
