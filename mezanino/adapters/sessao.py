# mezanino/adapters/sessao.py
"""
Sessão interativa do estoque do mezanino usando Rich.

Mantém um único ``InventorySynchronizer`` do início ao fim: itens
adicionados, atualizados ou importados sem conexão continuam visíveis
nas operações seguintes (listar, dashboard, exportar) até o usuário sair.
Ao sair, avisa sobre o que não chegou ao servidor.
"""

from __future__ import annotations

import os
import re

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm, Prompt

from mezanino.config import STATUS_EM_ESTOQUE
from mezanino.domain.models import CATEGORY_TITLES, LOCATION_FIELDS, has_location
from mezanino.domain.query import SortSpec, run_query
from mezanino.adapters.cli import (
    _display_records,
    _parse_categoria,
    _parse_filtros,
    _report_outcome,
    _show_dashboard,
)
from mezanino.adapters.planilha import export_file_name, export_inventory_to_xlsx, load_inventory_from_xlsx
from mezanino.infra.logger import log_system_event
from mezanino.usecases.sincronizador import UPDATABLE_FIELDS, InventorySynchronizer, SyncOutcome


# (campo, rótulo) opcionais perguntados ao adicionar
OPTIONAL_PROMPTS = (
    ("code", "Código"),
    ("responsible", "Responsável"),
    ("exit_date", "Data de saída"),
    ("service_order", "SM"),
)
LOCATION_PROMPTS = (
    ("lot", "Lote"),
    ("room", "Rua/Sala"),
    ("shelf", "Prateleira"),
    ("row", "Posição"),
    ("supplied_machine", "Máquina"),
)

MENU_CHOICES = ["0", "1", "2", "3", "4", "5", "6", "7", "8"]


class MezaninoSessao:
    """Menu interativo sobre uma coleção em memória que dura a sessão toda."""

    def __init__(self, sync: InventorySynchronizer, console: Console):
        self.sync = sync
        self.console = console
        self.local_changes = 0  # escritas que não chegaram ao servidor

    def run(self) -> None:
        """Loop principal; termina em "0" ou fim da entrada."""
        self.show_banner()
        while True:
            try:
                choice = self.show_main_menu()
                if choice == "0":
                    if self.confirmar_saida():
                        self.console.print("\n[green]Saindo da sessão...[/green]")
                        break
                elif choice == "1":
                    self.listar()
                elif choice == "2":
                    _show_dashboard(self.sync.items)
                elif choice == "3":
                    self.adicionar()
                elif choice == "4":
                    self.atualizar()
                elif choice == "5":
                    self.excluir()
                elif choice == "6":
                    self.importar()
                elif choice == "7":
                    self.exportar()
                elif choice == "8":
                    self.recarregar()
            except (KeyboardInterrupt, EOFError):
                self.console.print("\n[red]Saindo...[/red]")
                self._avisar_pendentes()
                break
            except Exception as e:
                log_system_event("session_error", {"error": str(e)}, level="error")
                self.console.print(f"[red]Erro: {escape(str(e))}[/red]")

    def show_banner(self) -> None:
        self.console.print(Panel.fit(
            "[bold blue]ESTOQUE DO MEZANINO[/bold blue]\n"
            "[cyan]Sessão interativa[/cyan]",
            border_style="blue",
        ))

    def show_main_menu(self) -> str:
        status = "[red]offline[/red]" if self.sync.offline else "[green]online[/green]"
        pendentes = ""
        if self.local_changes:
            pendentes = f"\n[yellow]{self.local_changes} alteração(ões) só nesta sessão[/yellow]"
        menu = Panel(
            f"[bold]MENU PRINCIPAL[/bold] ({status}, {len(self.sync.items)} itens){pendentes}\n\n"
            "[yellow]1.[/yellow] Listar itens\n"
            "[yellow]2.[/yellow] Dashboard\n"
            "[yellow]3.[/yellow] Adicionar item\n"
            "[yellow]4.[/yellow] Atualizar item\n"
            "[yellow]5.[/yellow] Excluir item(ns)\n"
            "[yellow]6.[/yellow] Importar planilha\n"
            "[yellow]7.[/yellow] Exportar planilha\n"
            "[yellow]8.[/yellow] Recarregar do servidor\n"
            "[yellow]0.[/yellow] Sair\n",
            title="Opções",
            border_style="green",
        )
        self.console.print(menu)
        return Prompt.ask("Escolha uma opção", choices=MENU_CHOICES, console=self.console)

    # -----------------------
    # util
    # -----------------------

    def _ask(self, label: str, default: str = "") -> str:
        return Prompt.ask(label, default=default, show_default=bool(default), console=self.console)

    def _ask_categoria(self, allow_all: bool = False):
        label = "Categoria (INK/FIBER/PACKAGING" + (", vazio = todas)" if allow_all else ")")
        value = self._ask(label).strip()
        if not value and allow_all:
            return None
        return _parse_categoria(value)

    def _registrar(self, outcome: str, action: str) -> None:
        if outcome == SyncOutcome.LOCAL:
            self.local_changes += 1
        _report_outcome(outcome, action, transient=False)

    def _avisar_pendentes(self) -> bool:
        locais = self.sync.local_only()
        if not self.local_changes and not locais:
            return False
        self.console.print(f"[yellow]{self.local_changes} alteração(ões) não gravada(s) no servidor.[/yellow]")
        self.console.print(f"[yellow]{len(locais)} item(ns) só nesta sessão: serão perdidos ao sair.[/yellow]")
        self.console.print("[yellow]Use a opção 7 (exportar) para guardá-los em planilha.[/yellow]")
        return True

    # -----------------------
    # operações
    # -----------------------

    def listar(self) -> None:
        cat = self._ask_categoria(allow_all=True)
        busca = self._ask("Busca")
        filtros = self._ask("Filtros (campo=v1,v2; separados por ';')")
        ordenar = self._ask("Ordenar por (campo)").strip()
        sort = None
        if ordenar:
            desc = Confirm.ask("Ordem decrescente?", default=False, console=self.console)
            sort = SortSpec(ordenar, "desc" if desc else "asc")
        collection = self.sync.by_category(cat) if cat else list(self.sync.items)
        column_filters = _parse_filtros([f for f in filtros.split(";") if f.strip()])
        rows = run_query(collection, busca, column_filters, sort)
        _display_records(rows, cat, CATEGORY_TITLES.get(cat, "ESTOQUE COMPLETO"))

    def adicionar(self) -> None:
        cat = self._ask_categoria()
        partial = {
            "category": cat,
            "material": self._ask("Material"),
            "quantity": self._ask("Qtd", "0"),
            "status": self._ask("Status", STATUS_EM_ESTOQUE),
        }
        prompts = OPTIONAL_PROMPTS + (LOCATION_PROMPTS if has_location(cat) else ())
        for field, label in prompts:
            value = self._ask(label)
            if value:
                partial[field] = value
        outcome = self.sync.add(partial)
        self._registrar(outcome, "Item adicionado")
        if outcome == SyncOutcome.LOCAL:
            self.console.print(f"[dim]id local: {self.sync.items[0].id}[/dim]")

    def atualizar(self) -> None:
        record_id = self._ask("Id do item").strip()
        record = self.sync.get(record_id)
        if record is None:
            self.console.print(f"[red]Item não encontrado: {escape(record_id)}[/red]")
            return
        fields = [f for f in UPDATABLE_FIELDS if has_location(record.category) or f not in LOCATION_FIELDS]
        campo = Prompt.ask("Campo", choices=fields, console=self.console)
        atual = getattr(record, campo)
        valor = self._ask("Novo valor", "" if atual is None else str(atual))
        outcome = self.sync.update(record_id, {campo: valor})
        self._registrar(outcome, f"Item {escape(record_id)} atualizado")

    def excluir(self) -> None:
        ids = [i for i in re.split(r"[\s,]+", self._ask("Ids (separados por espaço ou vírgula)")) if i]
        if not ids:
            return
        if not Confirm.ask(f"Tem certeza que deseja excluir {len(ids)} item(ns)?", default=False, console=self.console):
            return
        outcome = self.sync.delete(ids[0]) if len(ids) == 1 else self.sync.bulk_delete(ids)
        self._registrar(outcome, f"{len(ids)} item(ns) excluído(s)")

    def importar(self) -> None:
        arquivo = self._ask("Caminho do arquivo XLSX")
        if not os.path.exists(arquivo):
            self.console.print(f"[red]Arquivo não encontrado: {escape(arquivo)}[/red]")
            return
        cat = self._ask_categoria()
        rows = load_inventory_from_xlsx(arquivo, cat)
        if not rows:
            self.console.print(Panel("Nenhuma linha encontrada na planilha", title="Importação", border_style="yellow"))
            return
        if not Confirm.ask(f"Deseja importar {len(rows)} itens?", default=True, console=self.console):
            return
        outcome = self.sync.import_records(rows)
        self._registrar(outcome, f"{len(rows)} itens importados")

    def exportar(self) -> None:
        cat = self._ask_categoria()
        path = self._ask("Destino", export_file_name(CATEGORY_TITLES[cat]))
        export_inventory_to_xlsx(self.sync.by_category(cat), path, cat)
        self.console.print(f"[green]>> Planilha gerada: {escape(path)}[/green]")

    def recarregar(self) -> None:
        if self._avisar_pendentes():
            self.console.print("[yellow]Se o servidor responder, a coleção local será substituída.[/yellow]")
            if not Confirm.ask("Recarregar mesmo assim?", default=False, console=self.console):
                return
        if self.sync.reload():
            self.local_changes = 0
            self.console.print(f"[green]>> Coleção recarregada: {len(self.sync.items)} itens.[/green]")
        else:
            self.console.print("[yellow]Sem conexão com o banco remoto; mantendo os dados locais.[/yellow]")

    def confirmar_saida(self) -> bool:
        if not self._avisar_pendentes():
            return True
        return Confirm.ask("Sair mesmo assim?", default=False, console=self.console)
