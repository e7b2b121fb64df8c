"""
Magnetometer Sample Store

Ordered collection of raw samples collected while the vehicle is rotated.
Insertion order is kept for display; the fit itself is order-independent.

File format (one sample per line, no header):
    load: three numeric tokens separated by any run of whitespace
    save: x<TAB>y<TAB>z
"""

import logging
import math
from pathlib import Path
from typing import Iterable, Iterator, List, Sequence, Union

import numpy as np

from .config import FILE_ENCODING, SAVE_SEPARATOR
from .errors import FormatError, IoError
from .schema import Sample

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def parse_sample_line(line: str, line_number: int) -> Sample:
    """
    Parse one line of a sample file.

    Raises:
        FormatError: wrong token count, non-numeric or non-finite token
    """
    tokens = line.split()
    if len(tokens) != 3:
        raise FormatError(f"expected 3 values, found {len(tokens)}", line_number)

    values = []
    for token in tokens:
        try:
            value = float(token)
        except ValueError:
            raise FormatError(f"not a number: {token!r}", line_number) from None
        if not math.isfinite(value):
            raise FormatError(f"not a finite number: {token!r}", line_number)
        values.append(value)

    return Sample(*values)


def parse_samples(text: str) -> List[Sample]:
    """Parse a whole sample file; fails on the first malformed line."""
    return [parse_sample_line(line, n) for n, line in enumerate(text.splitlines(), start=1)]


def format_sample(sample: Sample) -> str:
    # repr() is the shortest string that parses back to the same float
    return SAVE_SEPARATOR.join(repr(float(v)) for v in sample)


class SampleStore:
    """
    Ordered, unbounded list of raw magnetometer samples.

    Mutated only through its methods; there is no internal locking.
    """

    def __init__(self, samples: Iterable[Sequence[float]] = ()):
        self._samples: List[Sample] = [Sample.from_sequence(s) for s in samples]

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[Sample]:
        return iter(self._samples)

    def __getitem__(self, index):
        return self._samples[index]

    def __repr__(self) -> str:
        return f"SampleStore({len(self._samples)} samples)"

    @property
    def samples(self) -> List[Sample]:
        """Copy of the current samples, in insertion order."""
        return list(self._samples)

    def add(self, sample: Sequence[float]) -> Sample:
        """Append a sample (no deduplication)."""
        s = Sample.from_sequence(sample)
        self._samples.append(s)
        return s

    def extend(self, samples: Iterable[Sequence[float]]):
        """Append several samples at once."""
        new = [Sample.from_sequence(s) for s in samples]
        self._samples.extend(new)

    def clear(self):
        self._samples = []

    def replace(self, samples: Iterable[Sequence[float]]):
        """Replace the whole contents in one step."""
        self._samples = [Sample.from_sequence(s) for s in samples]

    def as_array(self) -> np.ndarray:
        """Samples as an [N, 3] array."""
        if not self._samples:
            return np.empty((0, 3))
        return np.array(self._samples, dtype=float)

    def load_from_text(self, path: PathLike) -> int:
        """
        Replace the store contents with the samples in a text file.

        All lines are parsed before anything is committed, so a malformed
        file leaves the store exactly as it was.

        Args:
            path: Sample file to read

        Returns:
            Number of samples loaded

        Raises:
            IoError: file could not be read
            FormatError: a line does not hold exactly three numbers
        """
        path = Path(path)
        try:
            text = path.read_text(encoding=FILE_ENCODING)
        except (OSError, UnicodeDecodeError) as e:
            raise IoError(f"Could not read sample file {path}: {e}") from e

        try:
            parsed = parse_samples(text)
        except FormatError as e:
            logger.warning("Rejected sample file %s (%s); keeping %d samples", path, e, len(self))
            raise

        self._samples = parsed
        logger.info("Loaded %d samples from %s", len(parsed), path)
        return len(parsed)

    def save_to_text(self, path: PathLike):
        """
        Write the samples to a text file, one tab-separated line each.

        Raises:
            IoError: destination could not be written
        """
        path = Path(path)
        lines = [format_sample(s) + '\n' for s in self._samples]
        try:
            with open(path, 'w', encoding=FILE_ENCODING) as f:
                f.writelines(lines)
        except OSError as e:
            raise IoError(f"Could not write sample file {path}: {e}") from e

        logger.info("Saved %d samples to %s", len(lines), path)
