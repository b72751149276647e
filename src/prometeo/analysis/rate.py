from __future__ import annotations

from typing import Iterable, Optional

from ..core.models import LinkStats
from ..core.ringbuffer import RingBuffer

COUNTER_MODULO = 256


class RateWindow:
    """
    Estimate an event rate from a bounded window of arrival timestamps.

    Notes
    -----
    - Timestamps are integer milliseconds (monotonic increasing).
    - ``max_age_ms`` additionally drops entries older than that span relative
      to the newest timestamp; ``None`` keeps entries until the ring evicts them.
    - The rate is ``(count - 1) / span_seconds``; it is unavailable (``None``)
      below two timestamps or when the span is zero.
    """

    def __init__(self, max_entries: int, max_age_ms: Optional[int] = None) -> None:
        if max_entries <= 1:
            raise ValueError("max_entries must be > 1")
        self._times: RingBuffer[int] = RingBuffer(max_entries)
        self._max_age_ms = None if max_age_ms is None else max(0, int(max_age_ms))

    def add(self, timestamp_ms: int) -> None:
        now = int(timestamp_ms)
        self._times.append(now)
        if self._max_age_ms is None:
            return
        while len(self._times) > 1 and now - self._times[0] > self._max_age_ms:
            self._times.popleft()

    def feed(self, timestamps: Iterable[int]) -> None:
        """Convenience method to bulk-add timestamps."""
        for t in timestamps:
            self.add(t)

    @property
    def rate_hz(self) -> Optional[float]:
        if len(self._times) < 2:
            return None
        span_s = (self._times[-1] - self._times[0]) / 1000.0
        if span_s <= 0:
            return None
        return (len(self._times) - 1) / span_s

    @property
    def span_ms(self) -> int:
        """Time span covered by the current timestamp window."""
        if len(self._times) < 2:
            return 0
        return self._times[-1] - self._times[0]

    def timestamps(self) -> tuple[int, ...]:
        return tuple(self._times)

    def __len__(self) -> int:
        return len(self._times)

    def reset(self) -> None:
        self._times.clear()


class LinkTracker:
    """
    Track the 8-bit packet counter for loss accounting and the arrival times
    for packet-rate and sample-rate estimates.

    Loss is counted as the forward distance between the expected and the
    observed counter modulo 256, so multi-packet gaps and wraparound are both
    handled. More than 256 consecutive drops are undercounted.
    """

    def __init__(
        self,
        *,
        packet_window_ms: int = 5000,
        packet_window_max: int = 60,
        sample_window_max: int = 600,
        min_packets_for_loss: int = 10,
    ) -> None:
        self._packet_times = RateWindow(packet_window_max, max_age_ms=packet_window_ms)
        self._sample_times = RateWindow(sample_window_max)
        self._min_packets_for_loss = max(1, int(min_packets_for_loss))
        self.total_packets = 0
        self.lost_packets = 0
        self.last_counter: Optional[int] = None

    def on_packet(self, counter: int, now_ms: int) -> int:
        """Record one sample packet; returns the number of packets newly counted as lost."""
        counter = int(counter) % COUNTER_MODULO
        self.total_packets += 1

        lost = 0
        if self.last_counter is not None:
            expected = (self.last_counter + 1) % COUNTER_MODULO
            if counter != expected:
                lost = (counter - expected + COUNTER_MODULO) % COUNTER_MODULO
                self.lost_packets += lost
        self.last_counter = counter

        self._packet_times.add(now_ms)
        self._sample_times.add(now_ms)
        return lost

    def packet_rate(self) -> Optional[float]:
        return self._packet_times.rate_hz

    def sample_rate(self) -> Optional[float]:
        return self._sample_times.rate_hz

    def loss_ratio(self) -> Optional[float]:
        if self.total_packets < self._min_packets_for_loss:
            return None
        return self.lost_packets / self.total_packets

    def stats(self) -> LinkStats:
        return LinkStats(
            total_packets=self.total_packets,
            lost_packets=self.lost_packets,
            last_counter=self.last_counter,
            packet_rate_hz=self.packet_rate(),
            sample_rate_hz=self.sample_rate(),
            loss_ratio=self.loss_ratio(),
            recent_packet_timestamps=self._packet_times.timestamps(),
            recent_sample_timestamps=self._sample_times.timestamps(),
        )

    def reset(self) -> None:
        self._packet_times.reset()
        self._sample_times.reset()
        self.total_packets = 0
        self.lost_packets = 0
        self.last_counter = None
