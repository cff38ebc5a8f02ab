from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass
class PCMBuffer:
    samples: np.ndarray  # float32 mono, [-1, 1]
    sample_rate: int

    @property
    def num_samples(self) -> int:
        return int(self.samples.size)

    @property
    def duration_sec(self) -> float:
        if self.sample_rate <= 0:
            return 0.0
        return float(self.samples.size) / float(self.sample_rate)
