"""Sampling reader façade.

This module orchestrates discovery, selection, per-file-group merge and
sampling into the public read operations. Each read is independent:
the layout is rediscovered and nothing is carried between calls.
"""

from __future__ import annotations

from typing import Callable, Iterator

from core.config import LakeSampleConfig
from core.errors import DecodeError, EmptyDatasetError, ResolutionError, SampleCancelledError
from core.logging_config import bound_read_context, get_logger
from core.types import (
    DatasetLayout,
    FileGroupFailure,
    FileGroupRef,
    MergedRecord,
    SampleRequest,
    SampleResult,
)
from reader.file_group_resolver import FileGroupResolver
from reader.layout_discovery import LayoutDiscoverer
from reader.merge_materializer import MergeMaterializer
from reader.parallel import CancellationToken, TaskOutcome, run_tasks
from reader.sampling import (
    build_count_request,
    build_fraction_request,
    file_group_rng,
    split_evenly,
    take_count,
    take_fraction,
)
from reader.selection import select_file_groups
from store.record_schema import RecordSchema
from store.storage_client import StorageClient, create_storage_client

_LOGGER = get_logger(__name__)

FileGroupTask = Callable[[CancellationToken], list[MergedRecord]]


class DatasetReader:
    """Sample merged records from a partitioned log-structured dataset."""

    def __init__(
        self,
        dataset_root: str,
        record_schema: RecordSchema,
        config: LakeSampleConfig | None = None,
        storage: StorageClient | None = None,
    ) -> None:
        """Create a reader.

        Args:
            dataset_root: Local path or ``s3://`` URI of the dataset root.
            record_schema: Schema of the dataset's records.
            config: Optional runtime configuration.
            storage: Optional storage client; chosen from the root when omitted.
        """
        self._dataset_root = dataset_root
        self._schema = record_schema
        self._config = config or LakeSampleConfig.from_env()
        self._storage = storage or create_storage_client(dataset_root, self._config)

    def describe_layout(self) -> DatasetLayout:
        """Discover partitions and committed file groups without reading records."""
        return self._discoverer().discover()

    def read(
        self,
        partition_count: int,
        file_group_count: int,
        amount: int | float,
    ) -> SampleResult:
        """Read with the count policy for ``int`` amounts, fraction policy for ``float``."""
        if isinstance(amount, float):
            return self.read_fraction(partition_count, file_group_count, amount)
        return self.read_count(partition_count, file_group_count, amount)

    def read_count(
        self,
        partition_count: int,
        file_group_count: int,
        total_records: int,
        timeout: float | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> SampleResult:
        """Sample at most ``total_records`` records spread evenly over selected groups.

        Args:
            partition_count: Partitions to sample from.
            file_group_count: File groups per partition to sample from.
            total_records: Upper bound on returned records.
            timeout: Optional wall-clock limit in seconds; defaults to config.
            cancel_token: Optional token to cancel the read from another thread.

        Returns:
            Sample result with at most ``total_records`` records.

        Raises:
            SampleRequestError: If arguments are invalid.
            LayoutError: If the dataset layout cannot be discovered.
            EmptyDatasetError: If no selected file group could be read.
            SampleCancelledError: If the read is cancelled or times out.
        """
        request = build_count_request(partition_count, file_group_count, total_records)
        return self._execute(request, timeout, cancel_token)

    def read_fraction(
        self,
        partition_count: int,
        file_group_count: int,
        fraction: float,
        seed: int | None = None,
        randomize_selection: bool = False,
        timeout: float | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> SampleResult:
        """Keep each record of the selected groups with probability ``fraction``.

        Args:
            partition_count: Partitions to sample from.
            file_group_count: File groups per partition to sample from.
            fraction: Retention probability in (0, 1].
            seed: Sampling seed; defaults to the configured random seed.
            randomize_selection: Shuffle partitions and groups with the seed.
            timeout: Optional wall-clock limit in seconds; defaults to config.
            cancel_token: Optional token to cancel the read from another thread.

        Returns:
            Reproducible Bernoulli sample for the given seed.
        """
        request = build_fraction_request(
            partition_count,
            file_group_count,
            fraction,
            seed=self._config.random_seed if seed is None else seed,
            randomize_selection=randomize_selection,
        )
        return self._execute(request, timeout, cancel_token)

    def _execute(
        self,
        request: SampleRequest,
        timeout: float | None,
        cancel_token: CancellationToken | None,
    ) -> SampleResult:
        token = cancel_token or CancellationToken(
            timeout if timeout is not None else self._config.read_timeout_seconds
        )
        with bound_read_context(dataset_root=self._dataset_root, policy=request.policy):
            try:
                return self._sample(request, token)
            except SampleCancelledError:
                _LOGGER.warning("sample_cancelled")
                raise

    def _sample(self, request: SampleRequest, token: CancellationToken) -> SampleResult:
        layout = self._discoverer().discover()
        token.raise_if_cancelled()
        selection_seed = request.seed if request.randomize_selection else None
        selected = select_file_groups(
            layout, request.partition_count, request.file_group_count, selection_seed
        )
        if not selected:
            raise EmptyDatasetError(
                f"No data available to sample from {self._dataset_root}: selection of "
                f"{request.partition_count} partition(s) x "
                f"{request.file_group_count} file group(s) matched no committed file groups."
            )
        tasks = self._build_tasks(request, selected)
        outcomes = run_tasks(
            tasks,
            max_workers=self._config.max_workers,
            token=token,
            recoverable=(ResolutionError, DecodeError),
        )
        return self._assemble(request, selected, outcomes)

    def _build_tasks(
        self,
        request: SampleRequest,
        selected: tuple[FileGroupRef, ...],
    ) -> list[tuple[FileGroupRef, FileGroupTask]]:
        if request.total_records is not None:
            quotas = split_evenly(request.total_records, len(selected))
            return [
                (file_group, self._count_task(file_group, quota))
                for file_group, quota in zip(selected, quotas)
            ]
        return [(file_group, self._fraction_task(file_group, request)) for file_group in selected]

    def _count_task(self, file_group: FileGroupRef, quota: int) -> FileGroupTask:
        def run(token: CancellationToken) -> list[MergedRecord]:
            if quota == 0:
                return []
            return take_count(self._materialize(file_group, token), quota, token)

        return run

    def _fraction_task(self, file_group: FileGroupRef, request: SampleRequest) -> FileGroupTask:
        fraction = request.fraction if request.fraction is not None else 1.0
        seed = request.seed if request.seed is not None else self._config.random_seed

        def run(token: CancellationToken) -> list[MergedRecord]:
            rng = file_group_rng(seed, file_group.partition_path, file_group.file_group_id)
            return take_fraction(self._materialize(file_group, token), fraction, rng, token)

        return run

    def _materialize(
        self,
        file_group: FileGroupRef,
        token: CancellationToken,
    ) -> Iterator[MergedRecord]:
        resolved = FileGroupResolver(self._storage).resolve(file_group)
        return MergeMaterializer(self._storage, self._schema).materialize(resolved, token)

    def _assemble(
        self,
        request: SampleRequest,
        selected: tuple[FileGroupRef, ...],
        outcomes: list[TaskOutcome[FileGroupRef, list[MergedRecord]]],
    ) -> SampleResult:
        records: list[MergedRecord] = []
        failures: list[FileGroupFailure] = []
        for outcome in outcomes:
            if outcome.error is not None:
                failures.append(_failure_from_outcome(outcome))
                continue
            records.extend(outcome.result or [])
        if len(failures) == len(selected):
            raise EmptyDatasetError(
                f"No data available to sample from {self._dataset_root}: all "
                f"{len(selected)} selected file group(s) failed to read. "
                f"First failure: {failures[0].error_type}: {failures[0].message}"
            )
        result = SampleResult(
            records=tuple(records),
            request=request,
            selected_partitions=len({file_group.partition_path for file_group in selected}),
            selected_file_groups=len(selected),
            failures=tuple(failures),
        )
        _log_result(result)
        return result

    def _discoverer(self) -> LayoutDiscoverer:
        return LayoutDiscoverer(self._dataset_root, self._storage, self._config.max_workers)


def _failure_from_outcome(
    outcome: TaskOutcome[FileGroupRef, list[MergedRecord]],
) -> FileGroupFailure:
    file_group = outcome.key
    error = outcome.error
    failure = FileGroupFailure(
        partition_path=file_group.partition_path,
        file_group_id=file_group.file_group_id,
        error_type=type(error).__name__,
        message=str(error),
    )
    _LOGGER.warning(
        "file_group_skipped",
        partition_path=failure.partition_path,
        file_group_id=failure.file_group_id,
        error_type=failure.error_type,
        error=failure.message,
    )
    return failure


def _log_result(result: SampleResult) -> None:
    _LOGGER.info(
        "sample_completed",
        record_count=len(result),
        selected_partitions=result.selected_partitions,
        selected_file_groups=result.selected_file_groups,
        distinct_partitions=len(result.partition_paths),
        distinct_file_groups=len(result.file_group_ids),
        failed_file_groups=len(result.failures),
    )
    unmet = result.unmet_targets()
    if unmet:
        _LOGGER.warning(
            "sample_targets_unmet",
            **{f"{name}_target_achieved": list(pair) for name, pair in unmet.items()},
        )
