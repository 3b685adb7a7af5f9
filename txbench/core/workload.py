"""Synthetic transaction payload generation."""

import json
import random
import time
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple, Any

from .errors import GenerationError


class ValueDistribution:
    """Source of values for one measured field of a record."""

    def sample(self, rng: random.Random) -> Any:
        raise NotImplementedError


@dataclass(frozen=True)
class UniformRange(ValueDistribution):
    """Uniformly sampled float in [low, high], rounded to `digits` places."""

    low: float
    high: float
    digits: int = 2

    def __post_init__(self) -> None:
        if self.high < self.low:
            raise GenerationError(
                f"Invalid range: high ({self.high}) is below low ({self.low})"
            )

    def sample(self, rng: random.Random) -> float:
        return round(rng.uniform(self.low, self.high), self.digits)


@dataclass(frozen=True)
class RecordSchema:
    """
    Shape of a single synthetic record.

    Each record gets an identifier field followed by one entry per measured
    field, sampled from that field's distribution.
    """

    id_field: str
    id_prefix: str
    fields: Dict[str, ValueDistribution] = field(default_factory=dict)

    def make_id(self, worker_index: int, transaction_index: int, record_index: int) -> str:
        return f"{self.id_prefix}-{worker_index}-{transaction_index}-{record_index}"


# Water-quality sensor readings used by the reference workload
SENSOR_READING_SCHEMA = RecordSchema(
    id_field="SensorID",
    id_prefix="sensor",
    fields={
        "Temp": UniformRange(20, 35),  # degrees C
        "Salinity": UniformRange(30, 40),  # ppt
        "PH": UniformRange(6, 8),
        "NH4": UniformRange(0, 0.5),  # mg/L
        "DO": UniformRange(5, 10),  # mg/L
        "CA": UniformRange(100, 200),  # mg/L
    },
)


@dataclass(frozen=True)
class Payload:
    """A batch of records bundled into one transaction."""

    worker_index: int
    transaction_index: int
    records: Tuple[Dict[str, Any], ...]
    timestamp: str
    id_field: str = "SensorID"

    @property
    def record_ids(self) -> Tuple[str, ...]:
        return tuple(str(r[self.id_field]) for r in self.records)

    def serialize(self) -> str:
        """Records as a JSON array, the form submitted to the contract."""
        return json.dumps(list(self.records))


def current_timestamp() -> str:
    """Milliseconds since the epoch, as a string."""
    return str(int(time.time() * 1000))


class WorkloadGenerator:
    """
    Generates transaction payloads from a record schema.

    The generator keeps no transaction counter of its own: the caller passes
    the transaction index in. Identifiers are derived from
    (worker_index, transaction_index, record_index), so concurrent workers
    never produce the same identifier.

    When a seed is given, sampling is reseeded per transaction so a payload
    depends only on (seed, worker_index, transaction_index).
    """

    def __init__(
        self,
        schema: RecordSchema = SENSOR_READING_SCHEMA,
        seed: Optional[int] = None,
    ):
        self.schema = schema
        self.seed = seed
        self._rng = random.Random()

    def _rng_for(self, worker_index: int, transaction_index: int) -> random.Random:
        if self.seed is None:
            return self._rng
        return random.Random(f"{self.seed}-{worker_index}-{transaction_index}")

    def generate_batch(
        self,
        worker_index: int,
        transaction_index: int,
        batch_size: int,
        timestamp: Optional[str] = None,
    ) -> Payload:
        """
        Build the payload for one transaction.

        Args:
            worker_index: 0-based worker identity
            transaction_index: 1-based index of the transaction within the run
            batch_size: Number of records in the batch
            timestamp: Shared batch timestamp (defaults to now, in ms)

        Returns:
            Payload holding `batch_size` records

        Raises:
            GenerationError: If any argument is out of range
        """
        if isinstance(batch_size, bool) or not isinstance(batch_size, int) or batch_size < 1:
            raise GenerationError(f"batch_size must be a positive integer, got {batch_size!r}")
        if transaction_index < 1:
            raise GenerationError(
                f"transaction_index must be 1-based, got {transaction_index!r}"
            )
        if worker_index < 0:
            raise GenerationError(f"worker_index must be >= 0, got {worker_index!r}")

        rng = self._rng_for(worker_index, transaction_index)
        records = []
        for record_index in range(batch_size):
            record: Dict[str, Any] = {
                self.schema.id_field: self.schema.make_id(
                    worker_index, transaction_index, record_index
                )
            }
            for name, distribution in self.schema.fields.items():
                record[name] = distribution.sample(rng)
            records.append(record)

        return Payload(
            worker_index=worker_index,
            transaction_index=transaction_index,
            records=tuple(records),
            timestamp=timestamp if timestamp is not None else current_timestamp(),
            id_field=self.schema.id_field,
        )
