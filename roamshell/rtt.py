"""Smoothed round-trip time estimation and retransmission timeout."""

import math
from dataclasses import dataclass


@dataclass
class RttEstimator:
    """Keeps SRTT and RTTVAR from round-trip samples in milliseconds."""

    MIN_RTO = 50
    MAX_RTO = 1000
    SAMPLE_LIMIT = 5000
    ALPHA = 1.0 / 8.0
    BETA = 1.0 / 4.0

    srtt: float = 1000.0
    rttvar: float = 500.0
    hit: bool = False

    def update(self, sample):
        """Fold in one sample; samples of SAMPLE_LIMIT ms or more are ignored."""
        if sample >= self.SAMPLE_LIMIT:
            return
        if not self.hit:
            self.srtt = float(sample)
            self.rttvar = sample / 2
            self.hit = True
        else:
            self.rttvar = (1 - self.BETA) * self.rttvar + self.BETA * abs(
                self.srtt - sample
            )
            self.srtt = (1 - self.ALPHA) * self.srtt + self.ALPHA * sample

    def timeout(self):
        """Return the retransmission timeout in ms, clamped to [MIN_RTO, MAX_RTO]."""
        rto = math.ceil(self.srtt + 4 * self.rttvar)
        return max(self.MIN_RTO, min(self.MAX_RTO, rto))