# src/filestages/plugins/base.py
"""Base classes for stage implementations.

Stages MUST subclass one of BaseSource, BaseTransform or BaseExpansion.
Stage discovery uses issubclass() checks against these classes.

Every stage follows the same stream lifecycle:

- A stage never pushes after its writer has ended (emit() checks first).
- When the writer is closed by its consumer, a transform or expansion
  closes its reader exactly once, so the stop request travels upstream.
- When the reader ends, a transform or expansion ends its writer exactly
  once, unless the writer has already ended.

Lifecycle per role:

    source:     __init__ -> await prepare() -> [host wiring] -> await start()
    transform:  __init__ -> await run()     (returns once the reader is drained)
    expansion:  __init__ -> await run()
"""

from abc import ABC, abstractmethod
from collections.abc import Generator
from contextlib import AbstractContextManager
from typing import Any, ClassVar

import structlog

from filestages.contracts import ChannelClosedError, Record, StageKind, StartAction
from filestages.core.channel import Channel
from filestages.core.logging import get_logger, stage_context


class BaseStage(ABC):
    """Shared plumbing for every stage.

    Subclasses set the class attributes below. ``name`` is the registry
    name hosts use to look the stage up.
    """

    name: ClassVar[str]
    kind: ClassVar[StageKind]
    plugin_version: ClassVar[str] = "0.0.0"

    def __init__(self, config: dict[str, Any], *, writer: Channel[Record]) -> None:
        """Initialize with configuration.

        Args:
            config: Stage options as passed by the host
            writer: Output channel
        """
        self.config = config
        self._writer = writer
        self._logger: structlog.stdlib.BoundLogger = get_logger(type(self).__module__).bind(stage=self.name)

    @property
    def writer(self) -> Channel[Record]:
        return self._writer

    def log_context(self) -> AbstractContextManager[None]:
        """Bind this stage and its channel names to events logged while it runs."""
        return stage_context(self.name, writer=self._writer.name)

    async def emit(self, record: Record) -> bool:
        """Push a record downstream unless the writer has ended.

        Returns:
            True if the consumer took the record, False if the writer has
            ended or the consumer closed it while the push was pending.
        """
        if self._writer.ended:
            return False
        try:
            return await self._writer.push(record)
        except ChannelClosedError:
            # end() was requested by a sibling producer sharing the writer
            return False


class BaseSource(BaseStage):
    """Base class for stages with no upstream channel.

    Sources are first in their pipeline, so they must not push until the
    host has finished wiring the downstream stages. prepare() does all the
    eager work and hands back the start action; nothing is emitted until
    the host awaits it.
    """

    kind = StageKind.SOURCE

    @abstractmethod
    async def prepare(self) -> StartAction:
        """Resolve inputs and return the deferred start action.

        Raises:
            Precondition failures (e.g. an inaccessible directory)
        """
        ...


class BaseTransform(BaseStage):
    """Base class for one-in, one-out record transforms.

    Subclasses implement process(); the base class owns draining the
    reader, emitting results, and end/close propagation.

        class Upper(BaseTransform):
            name = "upper"

            def process(self, record: Record) -> Record:
                return record.upper()
    """

    kind = StageKind.TRANSFORM

    def __init__(
        self,
        config: dict[str, Any],
        *,
        reader: Channel[Record],
        writer: Channel[Record],
    ) -> None:
        super().__init__(config, writer=writer)
        self._reader = reader
        writer.on_end(self._on_writer_end)

    @property
    def reader(self) -> Channel[Record]:
        return self._reader

    def log_context(self) -> AbstractContextManager[None]:
        return stage_context(self.name, reader=self._reader.name, writer=self._writer.name)

    def process(self, record: Record) -> Record:
        """Transform a single record.

        Single-record transforms must override this method. Exceptions
        raised here are fatal for the stage.
        """
        raise NotImplementedError(f"{self.__class__.__name__} must implement process(record) -> Record.")

    async def handle(self, record: Record) -> None:
        """Handle one input record. Expansions override this."""
        await self.emit(self.process(record))

    async def run(self) -> None:
        """Drain the reader until it ends, then end the writer.

        Raises:
            Whatever process() raised. Before re-raising, the reader is
            closed and the writer ended so neighbouring stages stop.
        """
        with self.log_context():
            try:
                async for record in self._reader:
                    if self._writer.ended:
                        break
                    await self.handle(record)
            except Exception as exc:
                self._logger.error("Stage failed, stopping", error=str(exc), error_type=type(exc).__name__)
                self._reader.close()
                await self._writer.end()
                raise

            if not self._writer.ended:
                await self._writer.end()

    def _on_writer_end(self, writer: Channel[Record]) -> None:
        if writer.closed:
            self._logger.info("Writer closed, so closing reader as well")
            self._reader.close()


class BaseExpansion(BaseTransform):
    """Base class for one-in, many-out stages with per-record isolation.

    expand() yields zero or more outputs for one input. Errors listed in
    ``malformed_errors`` raised while parsing or iterating a record are
    logged and the rest of that record is dropped; the stream carries on
    with the next record. Anything else is fatal, as for transforms.

    All outputs of one input are emitted, in order, before the next input
    is taken from the reader.
    """

    kind = StageKind.EXPANSION

    malformed_errors: ClassVar[tuple[type[BaseException], ...]] = ()
    malformed_message: ClassVar[str] = "Ignoring invalid input received"

    @abstractmethod
    def expand(self, record: Record) -> Generator[Record, None, None]:
        """Yield the outputs for one input record."""
        ...

    def process(self, record: Record) -> Record:
        raise NotImplementedError(f"{self.__class__.__name__} is an expansion stage; use expand().")

    async def handle(self, record: Record) -> None:
        outputs = self.expand(record)
        try:
            while True:
                try:
                    output = next(outputs)
                except StopIteration:
                    return
                except self.malformed_errors as exc:
                    self._logger.error(self.malformed_message, error=str(exc), error_type=type(exc).__name__)
                    self._logger.debug("Malformed input details", exc_info=exc)
                    return

                if not await self.emit(output):
                    return
        finally:
            # Runs on cancellation too, so expand() can release open archives
            outputs.close()
