"""WAV export for reconstructed conversation audio."""
from __future__ import annotations

from pathlib import Path

import numpy as np
import soundfile as sf

from constants import REALTIME_SAMPLE_RATE_HZ


def write_wav(
    path: str | Path,
    samples: np.ndarray,
    sample_rate_hz: int = REALTIME_SAMPLE_RATE_HZ,
) -> Path:
    """
    Write mono int16 samples as a PCM_16 WAV file.

    Returns the resolved output path.
    """
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    sf.write(str(out), np.asarray(samples, dtype=np.int16), sample_rate_hz, subtype="PCM_16")
    return out
