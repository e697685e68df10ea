"""Bulk Assign use case.

This use case assigns devices (by MAC) to sites from one of three sources:

SINGLE-TARGET (inline MACs, or a newline-delimited MAC file)
├── Read and parse the input (any problem is fatal)
├── Resolve the one target site (failure is fatal and raised)
└── Assign every MAC in ONE batch call
    └── On failure, every MAC fails with the same AssignmentError,
        which is also returned as the report's error

MULTI-TARGET (MAC,SiteName file)
├── Read and parse the input (any problem is fatal)
└── For each distinct site, in first-appearance order:
    ├── Resolve the site (failure is recorded for its entries, run continues)
    └── Assign the site's MACs in ONE batch call (success or uniform failure)

The assignment API is atomic per call and never reports per-device status,
so a failed batch fails all of its devices. There is no partial success.

Concurrency:
- Up to ``max_concurrent_sites`` sites are processed at once (default 1,
  which processes sites strictly one after another)
- At most one batch is in flight per canonical site ID, even when two
  spellings of a site resolve to the same ID
- Setting ``cancel_event`` stops new sites from being started; batches
  already in flight finish, and sites never started fail with
  OperationCancelledError
- Report detail is ordered by input position, never by completion order
"""

import asyncio
import logging
from typing import Optional

from ...api.exceptions import (
    AssignmentError,
    OperationCancelledError,
    SiteLookupError,
    WifiMgrError,
)
from ..adapters.input_parsers import PlainTextInputParser, parse_inline_macs, read_input_file
from ..domain.entities import (
    AssignmentMode,
    AssignmentRequest,
    AssignmentSource,
    BulkAssignmentReport,
    CsvFileSource,
    DeviceKind,
    SourceKind,
)
from ..domain.ports import IInputParser, IInventoryPort, ISiteResolver
from .aggregator import ResultAggregator

logger = logging.getLogger(__name__)


class BulkAssignUseCase:
    """Use case for assigning devices to sites in bulk.

    Usage:
        use_case = BulkAssignUseCase(inventory, resolver, org_id)
        report = await use_case.execute(CsvFileSource("aps.csv"))
    """

    def __init__(
        self,
        inventory: IInventoryPort,
        resolver: ISiteResolver,
        org_id: str,
        parser: Optional[IInputParser] = None,
        device_kind: DeviceKind = DeviceKind.AP,
        max_concurrent_sites: int = 1,
    ):
        """Initialize the use case.

        Args:
            inventory: Inventory port used for assignment calls
            resolver: Resolver turning site identifiers into canonical IDs
            org_id: Organization owning the inventory
            parser: Input file parser (default: PlainTextInputParser)
            device_kind: Kind of device being assigned (report wording only)
            max_concurrent_sites: Upper bound on sites processed at once
        """
        if max_concurrent_sites < 1:
            raise ValueError("max_concurrent_sites must be at least 1")

        self.inventory = inventory
        self.resolver = resolver
        self.org_id = org_id
        self.parser = parser or PlainTextInputParser()
        self.device_kind = device_kind
        self.max_concurrent_sites = max_concurrent_sites

    async def execute(
        self,
        source: AssignmentSource,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> BulkAssignmentReport:
        """Run a bulk assignment.

        Args:
            source: Where the MACs (and sites) come from
            cancel_event: When set, no further sites are started

        Returns:
            BulkAssignmentReport with one outcome per input entry

        Raises:
            FormatError / InputFileError: If the input cannot be read or parsed
            SiteNotFoundError / SiteLookupError: Single-target mode only, if
                the target site cannot be resolved
        """
        cancel_event = cancel_event or asyncio.Event()

        match source.kind:
            case SourceKind.CSV_FILE:
                return await self._execute_multi(source, cancel_event)
            case SourceKind.INLINE | SourceKind.MAC_FILE:
                return await self._execute_single(source, cancel_event)
            case _:
                raise TypeError(f"Unsupported assignment source: {source.kind}")

    async def assign_batch(
        self,
        org_id: str,
        site_id: str,
        macs: list[str],
        site: Optional[str] = None,
    ) -> None:
        """Assign one batch of MACs to a resolved site in a single call.

        Args:
            org_id: Organization owning the inventory
            site_id: Canonical site ID
            macs: Device MACs for this batch
            site: Identifier the user gave for the site, used in messages

        Raises:
            AssignmentError: If the call failed for any reason; applies to the
                whole batch
        """
        logger.info(f"Assigning {len(macs)} {self.device_kind.plural} to site {site_id}")
        try:
            await self.inventory.assign_devices(org_id, site_id, macs)
        except Exception as e:
            if isinstance(e, WifiMgrError):
                logger.warning(f"Batch of {len(macs)} devices for site {site or site_id} failed: {e}")
            else:
                logger.exception(f"Unexpected error assigning batch for site {site or site_id}")
            raise AssignmentError(
                site=site or site_id,
                site_id=site_id,
                device_count=len(macs),
                cause=e,
            )

    # ----------------------------------------
    # Single-target mode
    # ----------------------------------------

    def _read_single(self, source) -> list[str]:
        match source.kind:
            case SourceKind.INLINE:
                return parse_inline_macs(source.macs)
            case SourceKind.MAC_FILE:
                content = read_input_file(source.path)
                return self.parser.parse_mac_list(content, source.path)
            case _:
                raise TypeError(f"Not a single-target source: {source.kind}")

    async def _execute_single(
        self,
        source,
        cancel_event: asyncio.Event,
    ) -> BulkAssignmentReport:
        aggregator = ResultAggregator(AssignmentMode.SINGLE_TARGET, self.device_kind)
        aggregator.start()

        macs = self._read_single(source)
        requests = [
            AssignmentRequest(index=i, mac=mac, site=source.site)
            for i, mac in enumerate(macs, start=1)
        ]

        # Resolution failure is fatal here
        site_id = await self.resolver.resolve(source.site)

        aggregator.register(requests)
        aggregator.mark_resolved(requests, site_id)

        if cancel_event.is_set():
            error = OperationCancelledError(source.site)
            aggregator.mark_failed(requests, error)
            return aggregator.build_report(error=error)

        aggregator.mark_dispatched(requests)
        try:
            await self.assign_batch(self.org_id, site_id, macs, site=source.site)
        except AssignmentError as e:
            aggregator.mark_failed(requests, e)
            return aggregator.build_report(error=e)

        aggregator.mark_succeeded(requests)
        return aggregator.build_report()

    # ----------------------------------------
    # Multi-target mode
    # ----------------------------------------

    async def _execute_multi(
        self,
        source: CsvFileSource,
        cancel_event: asyncio.Event,
    ) -> BulkAssignmentReport:
        aggregator = ResultAggregator(AssignmentMode.MULTI_TARGET, self.device_kind)
        aggregator.start()

        content = read_input_file(source.path)
        parsed = self.parser.parse_mac_site_csv(content, source.path)
        aggregator.register(parsed.requests)

        logger.info(
            f"Found {len(parsed.sites)} different sites with {self.device_kind.plural} "
            f"to assign in file {source.path}"
        )

        semaphore = asyncio.Semaphore(self.max_concurrent_sites)
        site_locks: dict[str, asyncio.Lock] = {}
        tasks: list[asyncio.Task] = []
        launched = 0

        async def run_site(site: str, requests: list[AssignmentRequest]) -> None:
            try:
                await self._process_site(site, requests, aggregator, site_locks)
            finally:
                semaphore.release()

        for site in parsed.sites:
            await semaphore.acquire()
            if cancel_event.is_set():
                semaphore.release()
                break
            tasks.append(asyncio.create_task(run_site(site, parsed.requests_by_site[site])))
            launched += 1

        if tasks:
            await asyncio.gather(*tasks)

        skipped = parsed.sites[launched:]
        if skipped:
            logger.warning(f"Operation cancelled; {len(skipped)} sites not processed")
        for site in skipped:
            aggregator.mark_failed(parsed.requests_by_site[site], OperationCancelledError(site))

        return aggregator.build_report()

    async def _process_site(
        self,
        site: str,
        requests: list[AssignmentRequest],
        aggregator: ResultAggregator,
        site_locks: dict[str, asyncio.Lock],
    ) -> None:
        """Resolve one site and assign its batch.

        Every failure is recorded against the site's requests so that one
        site never aborts the run.
        """
        try:
            site_id = await self.resolver.resolve(site)
        except WifiMgrError as e:
            logger.warning(f"Could not resolve site ID for site '{site}': {e}")
            aggregator.mark_failed(requests, e)
            return
        except Exception as e:
            logger.exception(f"Unexpected error resolving site '{site}'")
            aggregator.mark_failed(requests, SiteLookupError(site, cause=e))
            return

        aggregator.mark_resolved(requests, site_id)
        macs = [request.mac for request in requests]

        lock = site_locks.setdefault(site_id, asyncio.Lock())
        async with lock:
            aggregator.mark_dispatched(requests)
            try:
                await self.assign_batch(self.org_id, site_id, macs, site=site)
            except AssignmentError as e:
                aggregator.mark_failed(requests, e)
                return

        aggregator.mark_succeeded(requests)
