"""Interactive terminal front end for padron."""

import uuid
from collections.abc import Callable

from .codec import ROLES, encode_date_from_display
from .config import PadronConfig, config_from_env
from .logging import JSONLLogger, configure_logger, get_logger
from .modal import ModalController
from .rows import RowStore, TableRenderer
from .sync import Notifier, PersonaClient, SyncCoordinator, SyncResult

BANNER = """
╔══════════════════════════════════════════╗
║           📋 Padrón de personas          ║
╚══════════════════════════════════════════╝

Comandos:
  /list             - Recargar la tabla
  /new              - Nueva persona
  /edit N           - Editar la fila N
  /delete N         - Eliminar la fila N
  /add n;a;s;f;r[;c] - Alta rápida (nombre;apellido;sexo;fecha;rol;calificación)
  /help             - Mostrar esta ayuda
  /exit, /quit      - Salir
"""

_ROLE_HINT = ", ".join(f"{k}={v}" for k, v in ROLES.items())

FORM_PROMPTS = [
    ("nombre", "Nombre"),
    ("apellido", "Apellido"),
    ("sexo", "Sexo (H/M/O)"),
    ("fh_nac", "Fecha de nacimiento (AAAA-MM-DD o DD/MM/AAAA)"),
    ("id_rol", f"Rol ({_ROLE_HINT})"),
    ("calificacion", "Calificación (opcional)"),
]

CLEAR_TOKEN = "-"

YES_ANSWERS = ("s", "si", "sí", "y", "yes")

_TOAST_ICONS = {"success": "✓", "error": "❌", "info": "ℹ"}


class TerminalNotifier(Notifier):
    """Notifier that prints to the terminal and reads answers from input()."""

    def __init__(
        self,
        output: Callable[[str], None] = print,
        ask: Callable[[str], str] = input,
    ) -> None:
        self._output = output
        self._ask = ask
        self.status: str | None = None

    def set_status(self, message: str | None) -> None:
        self.status = message
        if message:
            self._output(f"⏳ {message}")

    def toast(self, message: str, kind: str = "info") -> None:
        self._output(f"{_TOAST_ICONS.get(kind, '•')} {message}")

    def alert(self, message: str) -> None:
        self._output(f"\n❌ {message}")

    def confirm(self, message: str) -> bool:
        try:
            answer = self._ask(f"{message} (s/n): ")
        except EOFError:
            return False
        return answer.strip().lower() in YES_ANSWERS


class CLI:
    """Command loop wiring RowStore, ModalController and SyncCoordinator."""

    def __init__(
        self,
        config: PadronConfig | None = None,
        client: PersonaClient | None = None,
        notifier: Notifier | None = None,
        event_logger: JSONLLogger | None = None,
        output: Callable[[str], None] = print,
        ask: Callable[[str], str] = input,
    ) -> None:
        self.config = config or config_from_env()
        self._output = output
        self._ask = ask

        self.store = RowStore()
        self.modal = ModalController()
        self.notifier = notifier or TerminalNotifier(output=output, ask=ask)
        self.logger = event_logger or get_logger()

        if client is None:
            client = PersonaClient(self.config.api_base, timeout=self.config.timeout)
        self.coordinator = SyncCoordinator(
            client, self.store, self.modal, self.notifier, event_logger=self.logger
        )

        self.renderer = TableRenderer(output=output)
        self.renderer.attach(self.store)
        self.session_id = f"cli-{uuid.uuid4().hex[:8]}"

    def _row_handle(self, arg: str) -> int | None:
        """Convert a 1-based row number typed by the user to a store handle."""
        try:
            number = int(arg.strip())
        except ValueError:
            return None
        return number - 1 if number >= 1 else None

    def _prompt_form(self) -> None:
        """Ask for each field. Enter keeps the current value, CLEAR_TOKEN empties it."""
        self._output(f"\n— {self.modal.title} —")
        self._output(f"(Enter conserva el valor, '{CLEAR_TOKEN}' lo borra)")
        changes = {}
        for name, label in FORM_PROMPTS:
            current = getattr(self.modal.form, name)
            value = self._ask(f"{label} [{current}]: ").strip()
            if not value:
                continue
            if value == CLEAR_TOKEN:
                value = ""
            elif name == "fh_nac":
                value = encode_date_from_display(value)
            changes[name] = value
        if changes:
            self.modal.update_form(**changes)

    async def _run_modal(self) -> SyncResult:
        """Prompt and submit until saved or the user gives up."""
        while True:
            self._prompt_form()
            result = await self.coordinator.submit_modal()
            if result.success or not self.modal.is_open:
                return result

            if result.errors:
                for error in result.errors:
                    self._output(f"  • {error}")

            answer = self._ask("¿Corregir y reintentar? (s/n): ").strip().lower()
            if answer not in YES_ANSWERS:
                self.modal.close()
                return result

    async def _new(self) -> SyncResult:
        self.modal.open_create()
        return await self._run_modal()

    async def _edit(self, arg: str) -> SyncResult:
        handle = self._row_handle(arg)
        if handle is None:
            self._output("Uso: /edit N")
            return SyncResult(success=False, message="Fila inválida")
        try:
            self.modal.open_edit(self.store.row_at(handle))
        except LookupError as e:
            self._output(f"No se puede editar: {e}")
            return SyncResult(success=False, message=str(e))
        return await self._run_modal()

    async def _delete(self, arg: str) -> SyncResult:
        handle = self._row_handle(arg)
        if handle is None:
            self._output("Uso: /delete N")
            return SyncResult(success=False, message="Fila inválida")
        result = await self.coordinator.delete_row(handle)
        if not result.success and result.message:
            self._output(result.message)
        return result

    async def _handle_command(self, command: str) -> bool:
        """Handle a command. Returns True if should continue, False to exit."""
        cmd, _, arg = command.strip().partition(" ")
        cmd = cmd.lower()

        if cmd in ("/exit", "/quit", "exit", "quit"):
            self._output("\n👋 Hasta luego")
            self.logger.log("session_end")
            return False

        if cmd == "/help":
            self._output(BANNER)
        elif cmd == "/list":
            await self.coordinator.reload()
        elif cmd == "/new":
            await self._new()
        elif cmd == "/edit":
            await self._edit(arg)
        elif cmd == "/delete":
            await self._delete(arg)
        elif cmd == "/add":
            await self.coordinator.submit_quick_entry(arg)
        else:
            self._output(f"Comando desconocido: {cmd}. Usa /help.")

        return True

    async def run(self) -> None:
        """Run the interactive loop."""
        self._output(BANNER)
        self.logger.set_session_id(self.session_id)
        self.logger.log("session_start")

        await self.coordinator.reload()

        while True:
            try:
                user_input = self._ask("padron> ").strip()
                if not user_input:
                    continue

                if not await self._handle_command(user_input):
                    break

            except (KeyboardInterrupt, EOFError):
                # Ctrl-D or Ctrl-C at any prompt, including inside the form
                self.modal.close()
                self._output("\n👋 Hasta luego")
                self.logger.log("session_end")
                break


async def run_cli() -> None:
    """Run the CLI with configuration from the environment."""
    config = config_from_env()
    event_logger = configure_logger(config.log_dir, max_size_mb=config.log_max_size_mb)
    cli = CLI(config=config, event_logger=event_logger)
    await cli.run()
