"""Round trips against the endpoint and the table refresh that follows them."""

import logging
import time
from collections.abc import Awaitable
from dataclasses import dataclass, field
from typing import Any

from ..errors import PadronError, TransportFailure, ValidationFailure
from ..logging import JSONLLogger, get_logger
from ..modal import QUICK_ENTRY_MESSAGE, ModalController, ModalMode, Submission, build_quick_create
from ..rows import RowStore
from .client import PersonaClient
from .notifier import Notifier

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    """Outcome of a coordinator operation."""

    success: bool
    message: str = ""
    errors: list[str] = field(default_factory=list)


class SyncCoordinator:
    """Runs list/create/update/delete and keeps RowStore on server truth.

    Mutations are single-flight: while one is in flight any other is
    rejected. Every successful mutation is followed by a full reload.
    """

    BUSY_MESSAGE = "Ya hay una operación en curso. Espera a que termine."

    def __init__(
        self,
        client: PersonaClient,
        store: RowStore,
        modal: ModalController,
        notifier: Notifier,
        event_logger: JSONLLogger | None = None,
    ) -> None:
        self.client = client
        self.store = store
        self.modal = modal
        self.notifier = notifier
        self.event_logger = event_logger or get_logger()
        self._busy = False
        self._load_generation = 0

    @property
    def busy(self) -> bool:
        """Whether a mutation is in flight."""
        return self._busy

    def _acquire(self) -> bool:
        if self._busy:
            return False
        self._busy = True
        return True

    def _release(self) -> None:
        self._busy = False

    def _rejected(self) -> SyncResult:
        self.event_logger.log("rejected_busy")
        self.notifier.toast(self.BUSY_MESSAGE, "error")
        return SyncResult(success=False, message=self.BUSY_MESSAGE)

    async def _timed(self, operation: str, call: Awaitable[Any], identifier: str | None = None) -> Any:
        """Await one remote call and record it in the event log."""
        start_time = time.time()
        try:
            result = await call
        except PadronError as e:
            self.event_logger.log_operation(
                operation,
                False,
                duration_ms=(time.time() - start_time) * 1000,
                identifier=identifier,
                status_code=getattr(e, "status_code", None),
                error=str(e),
            )
            raise

        self.event_logger.log_operation(
            operation,
            True,
            duration_ms=(time.time() - start_time) * 1000,
            identifier=identifier,
            records=len(result) if isinstance(result, list) else None,
        )
        return result

    async def reload(self) -> SyncResult:
        """Fetch the collection and rebuild the table.

        A completion that is older than the newest reload is discarded.
        """
        self._load_generation += 1
        generation = self._load_generation

        self.notifier.set_status("Cargando datos...")
        self.store.show_loading()
        try:
            records = await self._timed("list", self.client.list())
        except PadronError as e:
            if generation != self._load_generation:
                logger.debug("Discarding stale list failure: %s", e)
                return SyncResult(success=False, message=str(e))
            self.notifier.set_status(None)
            self.store.show_error(str(e))
            self.notifier.toast("Error al cargar. Intenta nuevamente.", "error")
            return SyncResult(success=False, message=str(e))

        if generation != self._load_generation:
            logger.debug("Discarding stale list response (generation %d)", generation)
            return SyncResult(success=False, message="Respuesta descartada")

        self.notifier.set_status(None)
        self.store.refresh(records)
        return SyncResult(success=True, message=f"{len(self.store)} registro(s)")

    async def _send(self, submission: Submission) -> None:
        if submission.mode is ModalMode.EDIT:
            await self._timed(
                "update",
                self.client.update(submission.identifier, submission.fields),
                identifier=submission.identifier,
            )
        else:
            await self._timed("create", self.client.create(submission.payload))

    async def submit_modal(self) -> SyncResult:
        """Validate the modal form and save it.

        Validation failures make no network call and leave the modal open
        with its error list filled in.
        """
        if not self.modal.is_open:
            return SyncResult(success=False, message="El formulario está cerrado.")

        try:
            submission = self.modal.validate_and_build_payload()
        except ValidationFailure as e:
            return SyncResult(success=False, message="Formulario incompleto.", errors=e.messages)

        if not self._acquire():
            return self._rejected()

        try:
            self.notifier.set_status("Guardando...")
            await self._send(submission)
            done = "Actualizado" if submission.mode is ModalMode.EDIT else "Creado"
            self.notifier.toast(done, "success")
            self.modal.close()
            await self.reload()
            return SyncResult(success=True, message=done)
        except TransportFailure as e:
            if submission.mode is ModalMode.EDIT:
                logger.error("Update of %s failed: %s", submission.identifier, e)
            self.notifier.toast("Error al guardar", "error")
            self.notifier.alert(f"Error al guardar: {e}")
            return SyncResult(success=False, message=str(e))
        finally:
            self.notifier.set_status(None)
            self._release()

    async def submit_quick_entry(self, text: str) -> SyncResult:
        """Create a person from a one-line ``nombre;apellido;sexo;fecha;rol[;nota]`` entry."""
        try:
            submission = build_quick_create(text)
        except ValidationFailure as e:
            self.notifier.alert(QUICK_ENTRY_MESSAGE)
            return SyncResult(success=False, message=QUICK_ENTRY_MESSAGE, errors=e.messages)

        if not self._acquire():
            return self._rejected()

        try:
            self.notifier.set_status("Procesando...")
            await self._timed("create", self.client.create(submission.payload))
            self.notifier.toast("Creado", "success")
            await self.reload()
            return SyncResult(success=True, message="Creado")
        except TransportFailure as e:
            self.notifier.toast("Error al crear", "error")
            self.notifier.alert(f"Error al crear: {e}")
            return SyncResult(success=False, message=str(e))
        finally:
            self.notifier.set_status(None)
            self._release()

    async def delete_row(self, handle: int) -> SyncResult:
        """Delete the person rendered at handle after a yes/no confirmation."""
        try:
            row = self.store.row_at(handle)
        except LookupError as e:
            return SyncResult(success=False, message=str(e))

        if not row.editable:
            return SyncResult(success=False, message="El registro no tiene identificador.")

        if self._busy:
            return self._rejected()

        if not self.notifier.confirm(f"¿Eliminar a {row.nombre} {row.apellido}?"):
            return SyncResult(success=False, message="Cancelado")

        if not self._acquire():
            return self._rejected()

        try:
            self.notifier.set_status("Eliminando...")
            await self._timed("delete", self.client.delete(row.identifier), identifier=row.identifier)
            self.notifier.toast("Eliminado", "success")
            await self.reload()
            return SyncResult(success=True, message="Eliminado")
        except TransportFailure as e:
            self.notifier.toast("Error al eliminar", "error")
            self.notifier.alert(f"Error al eliminar: {e}")
            return SyncResult(success=False, message=str(e))
        finally:
            self.notifier.set_status(None)
            self._release()
