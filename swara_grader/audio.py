"""Recording loader for chant takes and reference recitations."""

from pathlib import Path

import numpy as np

# Rate every analysis stage assumes
ANALYSIS_SR = 16000


def load_audio(path: Path | str, target_sr: int = ANALYSIS_SR) -> np.ndarray:
    """Decode a recording to mono samples at the analysis rate.

    Args:
        path: Recording file (WAV, FLAC, MP3 or anything librosa decodes).
        target_sr: Sample rate to resample to.

    Returns:
        Mono float32 samples in [-1, 1].

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the target rate is not positive or the file decodes
            to no samples.
    """
    import librosa

    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"No recording at {path}")
    if target_sr <= 0:
        raise ValueError(f"Sample rate must be positive, got {target_sr}")

    samples, _ = librosa.load(str(path), sr=target_sr, mono=True)
    if samples.size == 0:
        raise ValueError(f"Recording {path} contains no audio")
    return np.clip(samples, -1.0, 1.0).astype(np.float32)
