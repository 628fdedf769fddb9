"""Tests for SyncCoordinator round trips."""

import asyncio
import json
from pathlib import Path

import httpx
import pytest

from padron.logging import JSONLLogger
from padron.modal import ModalController
from padron.rows import PlaceholderKind, RowStore
from padron.sync import Notifier, PersonaClient, SyncCoordinator

BASE = "https://api.test/persona"

ANA = {
    "nombre": "Ana",
    "apellido": "Ruiz",
    "sexo": "h",
    "fh_nac": "2001-05-02",
    "id_rol": 2,
    "calificacion": 9,
    "id": 7,
}


class FakeNotifier(Notifier):
    """Records everything the coordinator reports."""

    def __init__(self, answer: bool = True) -> None:
        self.answer = answer
        self.statuses: list[str | None] = []
        self.toasts: list[tuple[str, str]] = []
        self.alerts: list[str] = []
        self.questions: list[str] = []

    def set_status(self, message: str | None) -> None:
        self.statuses.append(message)

    def toast(self, message: str, kind: str = "info") -> None:
        self.toasts.append((message, kind))

    def alert(self, message: str) -> None:
        self.alerts.append(message)

    def confirm(self, message: str) -> bool:
        self.questions.append(message)
        return self.answer


class FakeEndpoint:
    """In-memory collection endpoint speaking the wire format."""

    def __init__(self, records: list | None = None) -> None:
        self.records = list(records or [])
        self.requests: list[httpx.Request] = []
        self.fail: dict[str, httpx.Response] = {}
        self.gate: asyncio.Event | None = None
        self._next_id = 100

    def bodies(self, method: str) -> list[dict]:
        return [json.loads(r.content) for r in self.requests if r.method == method]

    def methods(self) -> list[str]:
        return [r.method for r in self.requests]

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.gate is not None and request.method != "GET":
            await self.gate.wait()

        if request.method in self.fail:
            return self.fail[request.method]

        if request.method == "GET":
            return httpx.Response(200, json=self.records)

        body = json.loads(request.content)
        if request.method == "POST":
            self._next_id += 1
            self.records.append({**body, "id": self._next_id})
            return httpx.Response(201, json={"id": self._next_id})
        if request.method == "PATCH":
            for record in self.records:
                if str(record.get("id")) == str(body["id_persona"]):
                    record.update({k: v for k, v in body.items() if k != "id_persona"})
            return httpx.Response(200, json={})
        if request.method == "DELETE":
            self.records = [r for r in self.records if str(r.get("id")) != str(body["id_persona"])]
            return httpx.Response(200, json={})
        return httpx.Response(405)


@pytest.fixture
def endpoint() -> FakeEndpoint:
    return FakeEndpoint([dict(ANA)])


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def event_logger(tmp_path: Path) -> JSONLLogger:
    return JSONLLogger(log_dir=tmp_path)


@pytest.fixture
def coordinator(endpoint: FakeEndpoint, notifier: FakeNotifier, event_logger: JSONLLogger) -> SyncCoordinator:
    client = PersonaClient(BASE, transport=httpx.MockTransport(endpoint))
    return SyncCoordinator(client, RowStore(), ModalController(), notifier, event_logger=event_logger)


def read_events(event_logger: JSONLLogger) -> list[dict]:
    with open(event_logger.log_path) as f:
        return [json.loads(line) for line in f]


@pytest.mark.asyncio
class TestReload:
    async def test_renders_rows(self, coordinator: SyncCoordinator, notifier: FakeNotifier):
        result = await coordinator.reload()

        assert result.success is True
        row = coordinator.store.row_at(0)
        assert row.cells == ["Ana", "Ruiz", "Masculino", "02/05/2001", "Profesor", "9"]
        assert row.identifier == "7"
        assert notifier.statuses == ["Cargando datos...", None]

    async def test_empty_list_is_not_an_error(self, coordinator: SyncCoordinator, endpoint, notifier):
        endpoint.records = []

        result = await coordinator.reload()

        assert result.success is True
        assert len(coordinator.store) == 0
        assert coordinator.store.placeholder.kind is PlaceholderKind.EMPTY
        assert notifier.alerts == []
        assert notifier.toasts == []

    async def test_failure_shows_error_row(self, coordinator: SyncCoordinator, endpoint, notifier):
        endpoint.fail["GET"] = httpx.Response(500)

        result = await coordinator.reload()

        assert result.success is False
        placeholder = coordinator.store.placeholder
        assert placeholder.kind is PlaceholderKind.ERROR
        assert "HTTP 500" in placeholder.message
        assert notifier.statuses[-1] is None
        assert ("Error al cargar. Intenta nuevamente.", "error") in notifier.toasts

    async def test_invalid_json_shows_error_row(self, coordinator: SyncCoordinator, endpoint):
        endpoint.fail["GET"] = httpx.Response(200, text="not json")

        await coordinator.reload()

        assert coordinator.store.placeholder.kind is PlaceholderKind.ERROR

    async def test_logs_list_event(self, coordinator: SyncCoordinator, event_logger):
        await coordinator.reload()

        events = read_events(event_logger)
        assert events[-1]["event"] == "list"
        assert events[-1]["success"] is True
        assert events[-1]["records"] == 1

    async def test_stale_response_is_discarded(self, notifier, event_logger):
        first_gate = asyncio.Event()
        calls = []

        async def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            if len(calls) == 1:
                await first_gate.wait()
                return httpx.Response(200, json=[{"nombre": "Viejo", "id": 1}])
            return httpx.Response(200, json=[{"nombre": "Nuevo", "id": 2}])

        client = PersonaClient(BASE, transport=httpx.MockTransport(handler))
        coordinator = SyncCoordinator(client, RowStore(), ModalController(), notifier, event_logger)

        slow = asyncio.create_task(coordinator.reload())
        await asyncio.sleep(0.01)
        await coordinator.reload()
        first_gate.set()
        stale_result = await slow

        assert stale_result.success is False
        assert [row.nombre for row in coordinator.store.rows] == ["Nuevo"]


@pytest.mark.asyncio
class TestSubmitModal:
    async def test_create(self, coordinator: SyncCoordinator, endpoint, notifier):
        coordinator.modal.open_create()
        coordinator.modal.update_form(
            nombre="Luis", apellido="Paz", sexo="O", fh_nac="1990-01-15", id_rol="1"
        )

        result = await coordinator.submit_modal()

        assert result.success is True
        assert endpoint.methods() == ["POST", "GET"]
        assert endpoint.bodies("POST") == [{
            "nombre": "Luis",
            "apellido": "Paz",
            "sexo": "o",
            "fh_nac": "1990-01-15",
            "id_rol": 1,
            "calificacion": None,
        }]
        assert coordinator.modal.is_open is False
        assert ("Creado", "success") in notifier.toasts
        assert [row.nombre for row in coordinator.store.rows] == ["Ana", "Luis"]
        assert notifier.statuses[0] == "Guardando..."
        assert notifier.statuses[-1] is None

    async def test_missing_date_blocks_submit(self, coordinator: SyncCoordinator, endpoint):
        coordinator.modal.open_create()
        coordinator.modal.update_form(nombre="Luis", apellido="Paz", sexo="h", id_rol="1")

        result = await coordinator.submit_modal()

        assert result.success is False
        assert "Fecha de nacimiento es requerida" in result.errors
        assert "Fecha de nacimiento es requerida" in coordinator.modal.errors
        assert endpoint.requests == []
        assert coordinator.modal.is_open is True

    async def test_update_without_score_omits_it(self, coordinator: SyncCoordinator, endpoint, notifier):
        endpoint.records = [{k: v for k, v in ANA.items() if k != "calificacion"}]
        await coordinator.reload()

        coordinator.modal.open_edit(coordinator.store.row_at(0))
        result = await coordinator.submit_modal()

        assert result.success is True
        assert endpoint.bodies("PATCH") == [{
            "id_persona": "7",
            "nombre": "Ana",
            "apellido": "Ruiz",
            "sexo": "h",
            "fh_nac": "2001-05-02",
            "id_rol": 2,
        }]
        assert endpoint.methods()[-2:] == ["PATCH", "GET"]
        assert ("Actualizado", "success") in notifier.toasts

    async def test_update_refreshes_table(self, coordinator: SyncCoordinator):
        await coordinator.reload()

        coordinator.modal.open_edit(coordinator.store.row_at(0))
        coordinator.modal.update_form(fh_nac="2001-06-03", id_rol="3")
        await coordinator.submit_modal()

        row = coordinator.store.row_at(0)
        assert row.fecha == "03/06/2001"
        assert row.rol == "Administrativo"

    async def test_update_failure(self, coordinator: SyncCoordinator, endpoint, notifier, caplog):
        await coordinator.reload()
        endpoint.fail["PATCH"] = httpx.Response(400, text="id_persona requerido")
        before = coordinator.store.rows

        coordinator.modal.open_edit(coordinator.store.row_at(0))
        with caplog.at_level("ERROR"):
            result = await coordinator.submit_modal()

        assert result.success is False
        assert notifier.alerts == ["Error al guardar: HTTP 400 - id_persona requerido"]
        assert ("Error al guardar", "error") in notifier.toasts
        assert coordinator.modal.is_open is True
        assert coordinator.store.rows == before
        assert endpoint.methods()[-1] == "PATCH"
        assert notifier.statuses[-1] is None
        assert coordinator.busy is False
        assert "Update of 7 failed" in caplog.text

    async def test_closed_modal(self, coordinator: SyncCoordinator, endpoint):
        result = await coordinator.submit_modal()

        assert result.success is False
        assert endpoint.requests == []


@pytest.mark.asyncio
class TestDelete:
    async def test_confirmed_delete_then_reload(self, coordinator: SyncCoordinator, endpoint, notifier):
        await coordinator.reload()

        result = await coordinator.delete_row(0)

        assert result.success is True
        assert notifier.questions == ["¿Eliminar a Ana Ruiz?"]
        assert endpoint.bodies("DELETE") == [{"id_persona": "7"}]
        assert endpoint.methods() == ["GET", "DELETE", "GET"]
        assert coordinator.store.placeholder.kind is PlaceholderKind.EMPTY
        assert ("Eliminado", "success") in notifier.toasts
        assert "Eliminando..." in notifier.statuses
        assert notifier.statuses[-1] is None

    async def test_declined_delete_does_nothing(self, coordinator: SyncCoordinator, endpoint, notifier):
        await coordinator.reload()
        notifier.answer = False
        statuses_before = list(notifier.statuses)

        result = await coordinator.delete_row(0)

        assert result.success is False
        assert endpoint.methods() == ["GET"]
        assert len(coordinator.store) == 1
        assert notifier.statuses == statuses_before

    async def test_delete_failure(self, coordinator: SyncCoordinator, endpoint, notifier):
        await coordinator.reload()
        endpoint.fail["DELETE"] = httpx.Response(500, text="boom")

        result = await coordinator.delete_row(0)

        assert result.success is False
        assert notifier.alerts == ["Error al eliminar: HTTP 500"]
        assert endpoint.methods() == ["GET", "DELETE"]
        assert len(coordinator.store) == 1
        assert "Eliminando..." in notifier.statuses
        assert notifier.statuses[-1] is None
        assert coordinator.busy is False

    async def test_row_without_identifier(self, coordinator: SyncCoordinator, endpoint, notifier):
        endpoint.records = [{"nombre": "Sin id"}]
        await coordinator.reload()

        result = await coordinator.delete_row(0)

        assert result.success is False
        assert notifier.questions == []
        assert endpoint.methods() == ["GET"]

    async def test_bad_handle(self, coordinator: SyncCoordinator, endpoint):
        await coordinator.reload()

        result = await coordinator.delete_row(5)

        assert result.success is False
        assert endpoint.methods() == ["GET"]


@pytest.mark.asyncio
class TestQuickEntry:
    async def test_creates_and_reloads(self, coordinator: SyncCoordinator, endpoint, notifier):
        result = await coordinator.submit_quick_entry("Luis;Paz;h;1990-01-15;2;7")

        assert result.success is True
        assert endpoint.methods() == ["POST", "GET"]
        assert endpoint.bodies("POST")[0]["calificacion"] == 7
        assert notifier.statuses[0] == "Procesando..."

    async def test_incomplete_alerts(self, coordinator: SyncCoordinator, endpoint, notifier):
        result = await coordinator.submit_quick_entry("Luis;Paz")

        assert result.success is False
        assert notifier.alerts == ["Completa todos los campos."]
        assert endpoint.requests == []

    async def test_failure(self, coordinator: SyncCoordinator, endpoint, notifier):
        endpoint.fail["POST"] = httpx.Response(503)

        result = await coordinator.submit_quick_entry("Luis;Paz;h;1990-01-15;2")

        assert result.success is False
        assert notifier.alerts == ["Error al crear: HTTP 503"]
        assert ("Error al crear", "error") in notifier.toasts
        assert notifier.statuses == ["Procesando...", None]
        assert coordinator.busy is False


@pytest.mark.asyncio
class TestSingleFlight:
    async def test_overlapping_mutation_rejected(self, coordinator: SyncCoordinator, endpoint, notifier):
        await coordinator.reload()
        endpoint.gate = asyncio.Event()

        coordinator.modal.open_edit(coordinator.store.row_at(0))
        in_flight = asyncio.create_task(coordinator.submit_modal())
        await asyncio.sleep(0.01)
        assert coordinator.busy is True

        second = await coordinator.delete_row(0)
        third = await coordinator.submit_quick_entry("Luis;Paz;h;1990-01-15;2")

        assert second.success is False
        assert second.message == SyncCoordinator.BUSY_MESSAGE
        assert third.message == SyncCoordinator.BUSY_MESSAGE
        assert notifier.questions == []

        endpoint.gate.set()
        first = await in_flight

        assert first.success is True
        assert endpoint.methods() == ["GET", "PATCH", "GET"]
        assert coordinator.busy is False

    async def test_double_submit_rejected(self, coordinator: SyncCoordinator, endpoint):
        endpoint.gate = asyncio.Event()
        coordinator.modal.open_create()
        coordinator.modal.update_form(
            nombre="Luis", apellido="Paz", sexo="h", fh_nac="1990-01-15", id_rol="2"
        )

        first = asyncio.create_task(coordinator.submit_modal())
        await asyncio.sleep(0.01)
        second = await coordinator.submit_modal()
        endpoint.gate.set()
        await first

        assert second.message == SyncCoordinator.BUSY_MESSAGE
        assert endpoint.methods().count("POST") == 1

    async def test_rejection_is_logged(self, coordinator: SyncCoordinator, endpoint, event_logger):
        await coordinator.reload()
        endpoint.gate = asyncio.Event()
        coordinator.modal.open_edit(coordinator.store.row_at(0))
        in_flight = asyncio.create_task(coordinator.submit_modal())
        await asyncio.sleep(0.01)

        await coordinator.delete_row(0)
        endpoint.gate.set()
        await in_flight

        events = [e["event"] for e in read_events(event_logger)]
        assert "rejected_busy" in events
        assert events.count("update") == 1
