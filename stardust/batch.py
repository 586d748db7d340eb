from contextlib import contextmanager
import logging

import click

from .beatmap import Beatmap
from .errors import CalculationCancelled, InvalidBeatmapData

logger = logging.getLogger(__name__)


def maybe_show_progress(it, show_progress, **kwargs):
    """Optionally show a progress bar for the given iterator.

    Parameters
    ----------
    it : iterable
        The underlying iterator.
    show_progress : bool
        Should progress be shown.
    **kwargs
        Forwarded to the click progress bar.

    Returns
    -------
    itercontext : context manager
        A context manager whose enter is the actual iterator to use.

    Examples
    --------
    .. code-block:: python

       with maybe_show_progress([1, 2, 3], True) as ns:
            for n in ns:
                ...
    """
    if show_progress:
        return click.progressbar(it, **kwargs)

    @contextmanager
    def ctx():
        yield it

    return ctx()


def _name(beatmap):
    if isinstance(beatmap, Beatmap):
        return beatmap.display_name

    metadata = beatmap.get('Metadata', {})
    return (
        f'{metadata.get("Artist", "")} - {metadata.get("Title", "")}'
        f' [{metadata.get("Version", "")}]'
    )


def calculate_all(beatmaps,
                  *,
                  skip_exceptions=False,
                  show_progress=False,
                  cancel=None):
    """Compute the difficulty of many beatmaps.

    Parameters
    ----------
    beatmaps : iterable[Beatmap or mapping]
        The beatmaps, either built or as the tokenized sections accepted by
        :meth:`~stardust.beatmap.Beatmap.from_sections`.
    skip_exceptions : bool, optional
        Log and skip beatmaps which fail rather than stopping at the first
        failure.
    show_progress : bool, optional
        Display a progress bar?
    cancel : threading.Event or callable, optional
        A cooperative cancellation flag shared by every calculation.

    Returns
    -------
    results : list[tuple[Beatmap, DifficultyAttributes]]
        Each beatmap which was rated with its attributes, in input order.

    Raises
    ------
    InvalidBeatmapData
        Raised when a beatmap fails and ``skip_exceptions`` is False. The
        error names the failing beatmap.
    CalculationCancelled
        Raised when ``cancel`` is set. Cancellation is never skipped.
    """
    results = []
    progress = maybe_show_progress(
        beatmaps,
        show_progress,
        label='Calculating difficulty: ',
        item_show_func=lambda b: 'Done!' if b is None else _name(b),
    )
    with progress as it:
        for beatmap in it:
            try:
                if not isinstance(beatmap, Beatmap):
                    beatmap = Beatmap.from_sections(beatmap)
                attributes = beatmap.calculate_difficulty(cancel=cancel)
            except CalculationCancelled:
                raise
            except Exception as e:
                name = _name(beatmap)
                if skip_exceptions:
                    logger.exception(f'Failed to calculate "{name}"')
                    continue
                raise InvalidBeatmapData(
                    'failed to calculate difficulty. Use skip_exceptions=True'
                    ' to skip this beatmap and continue.',
                    name,
                ) from e

            results.append((beatmap, attributes))

    return results
