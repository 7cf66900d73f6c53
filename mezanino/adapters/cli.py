# mezanino/adapters/cli.py
"""
CLI do estoque do mezanino (Typer).

Cada comando carrega a coleção do banco remoto e trabalha sobre ela em
memória; sem conexão, os dados locais da sessão continuam utilizáveis.

Comandos principais:
- listar                  -> tabela de uma categoria (busca, filtros, ordenação)
- valores <campo>         -> valores únicos de uma coluna (menu de filtro)
- dashboard               -> indicadores agregados
- adicionar               -> novo item
- atualizar <id>          -> atualização parcial
- excluir <id>...         -> exclusão (um ou vários)
- importar <xlsx>         -> importação em lote de planilha
- exportar [xlsx]         -> exportação da categoria para planilha
- sessao                  -> sessão interativa (a coleção vive até o fim dela)

Cada comando avulso termina com o processo: o que ficou só em memória
(fallback local) se perde. Para trabalhar sem conexão use ``sessao``.
"""

from __future__ import annotations

import json
import sys
from dataclasses import asdict
from typing import Any, Dict, List, Optional, Set

import typer
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from mezanino.config import HARD_FETCH_LIMIT, STATUS_EM_ESTOQUE, STATUS_PAGO, load_settings
from mezanino.domain.models import CATEGORIES, CATEGORY_TITLES, FIBER, INK, PACKAGING, RECORD_FIELDS, has_location
from mezanino.domain.policies import InvalidRecordError, normalize_status
from mezanino.domain.query import SortSpec, display_value, run_query, unique_values
from mezanino.adapters.planilha import export_file_name, export_inventory_to_xlsx, load_inventory_from_xlsx
from mezanino.infra.logger import log_system_event
from mezanino.infra.remote import InventoryStore, SupabaseInventoryStore
from mezanino.usecases.dashboard import build_dashboard
from mezanino.usecases.sincronizador import InventorySynchronizer, SyncOutcome


app = typer.Typer(help="Estoque do Mezanino — CLI", pretty_exceptions_enable=False)
console = Console()

CATEGORY_ALIASES = {
    "ink": INK, "tinta": INK, "tintas": INK,
    "fiber": FIBER, "fibra": FIBER, "fibras": FIBER,
    "packaging": PACKAGING, "embalagem": PACKAGING, "embalagens": PACKAGING,
}

# (campo, cabeçalho) da tabela
TABLE_COLUMNS = (
    ("id", "ID"),
    ("code", "Código"),
    ("material", "Material"),
    ("quantity", "Qtd"),
    ("status", "Status"),
    ("responsible", "Responsável"),
    ("exit_date", "Data Saída"),
    ("service_order", "SM"),
)
TABLE_LOCATION_COLUMNS = (
    ("lot", "Lote"),
    ("room", "Rua"),
    ("shelf", "Prateleira"),
    ("row", "Posição"),
    ("supplied_machine", "Máquina"),
)


def make_store(settings) -> InventoryStore:
    return SupabaseInventoryStore(settings)


# -----------------------
# util
# -----------------------

def _parse_categoria(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    key = value.strip().lower()
    if key in CATEGORY_ALIASES:
        return CATEGORY_ALIASES[key]
    raise typer.BadParameter(f"categoria inválida: {value} (use {', '.join(CATEGORIES)})")


def _parse_filtros(filtros: Optional[List[str]]) -> Dict[str, Set[str]]:
    """Converte ``campo=v1,v2`` em filtros por coluna; entradas malformadas são ignoradas."""
    out: Dict[str, Set[str]] = {}
    for raw in filtros or []:
        if "=" not in raw:
            console.print(f"[yellow]Filtro ignorado (use campo=valor): {escape(raw)}[/yellow]")
            continue
        field, values = raw.split("=", 1)
        field = field.strip()
        if field not in RECORD_FIELDS:
            console.print(f"[yellow]Filtro ignorado (campo desconhecido): {escape(field)}[/yellow]")
            continue
        out.setdefault(field, set()).update(v.strip() for v in values.split(","))
    return out


def _open_session(limite: Optional[int]) -> InventorySynchronizer:
    settings = load_settings()
    fetch_limit = limite if limite is not None else settings.fetch_limit
    sync = InventorySynchronizer(make_store(settings), fetch_limit=fetch_limit)
    sync.reload()
    if sync.offline:
        console.print("[yellow]Sem conexão com o banco remoto; exibindo apenas dados locais.[/yellow]")
    return sync


def _report_outcome(outcome: str, action: str, transient: bool = True) -> None:
    """Mensagem do resultado de uma escrita.

    ``transient``: a coleção morre com o processo (comandos avulsos).
    """
    if outcome == SyncOutcome.LOCAL:
        console.print(f"[yellow]{action}: salvo apenas localmente; NÃO foi gravado no servidor (banco remoto indisponível).[/yellow]")
        if transient:
            console.print("[yellow]A alteração será perdida quando o comando terminar. Use `mezanino sessao` para trabalhar sem conexão.[/yellow]")
    else:
        console.print(f"[green]>> {action}: concluído.[/green]")


def _status_markup(status: str) -> str:
    s = normalize_status(status)
    if s == STATUS_EM_ESTOQUE:
        return f"[green]{escape(status)}[/]"
    if s == STATUS_PAGO:
        return f"[blue]{escape(status)}[/]"
    return escape(status) if status else "-"


def _display_records(records, category: Optional[str], title: str) -> None:
    if not records:
        console.print(Panel("Nenhum item encontrado", title=title, border_style="yellow"))
        return
    columns = list(TABLE_COLUMNS)
    if category is None or has_location(category):
        columns += list(TABLE_LOCATION_COLUMNS)

    table = Table(title=title, box=box.ROUNDED)
    for field, header in columns:
        table.add_column(header, justify="right" if field == "quantity" else "left")
    for r in records:
        values = []
        for field, _ in columns:
            if field == "status":
                values.append(_status_markup(r.status))
            else:
                values.append(escape(display_value(r, field)))
        table.add_row(*values)
    console.print(table)
    console.print(f"[dim]{len(records)} item(ns)[/dim]")


def _print_json(obj) -> None:
    typer.echo(json.dumps(obj, ensure_ascii=False, indent=2))


def _fields_from_options(**options: Any) -> Dict[str, Any]:
    return {k: v for k, v in options.items() if v is not None}


# -----------------------
# consulta
# -----------------------

@app.command("listar")
def cmd_listar(
    categoria: Optional[str] = typer.Option(None, "--categoria", "-c", help="INK | FIBER | PACKAGING"),
    busca: str = typer.Option("", "--busca", "-b", help="Texto buscado em todas as colunas"),
    filtro: Optional[List[str]] = typer.Option(None, "--filtro", "-f", help="campo=valor1,valor2 (repetível)"),
    ordenar: Optional[str] = typer.Option(None, "--ordenar", "-o", help="Campo de ordenação"),
    desc: bool = typer.Option(False, "--desc", help="Ordem decrescente"),
    limite: Optional[int] = typer.Option(None, "--limite", help=f"Máximo de linhas carregadas (ex.: {HARD_FETCH_LIMIT})"),
    as_json: bool = typer.Option(False, "--json", help="Saída em JSON"),
):
    """Lista os itens com busca, filtros por coluna e ordenação."""
    cat = _parse_categoria(categoria)
    sync = _open_session(limite)
    collection = sync.by_category(cat) if cat else list(sync.items)
    sort = SortSpec(ordenar, "desc" if desc else "asc") if ordenar else None
    rows = run_query(collection, busca, _parse_filtros(filtro), sort)
    if as_json:
        _print_json([asdict(r) for r in rows])
        return
    _display_records(rows, cat, CATEGORY_TITLES.get(cat, "ESTOQUE COMPLETO"))


@app.command("valores")
def cmd_valores(
    campo: str = typer.Argument(..., help="Ex.: status | room | material"),
    categoria: Optional[str] = typer.Option(None, "--categoria", "-c", help="INK | FIBER | PACKAGING"),
    limite: Optional[int] = typer.Option(None, "--limite", help="Máximo de linhas carregadas"),
):
    """Mostra os valores únicos de uma coluna (opções do menu de filtro)."""
    if campo not in RECORD_FIELDS:
        raise typer.BadParameter(f"campo desconhecido: {campo}")
    cat = _parse_categoria(categoria)
    sync = _open_session(limite)
    collection = sync.by_category(cat) if cat else list(sync.items)
    for value in unique_values(collection, campo):
        typer.echo(value)


@app.command("dashboard")
def cmd_dashboard(
    limite: Optional[int] = typer.Option(None, "--limite", help="Máximo de linhas carregadas"),
):
    """Exibe os indicadores do dashboard integrado."""
    sync = _open_session(limite)
    _show_dashboard(sync.items)


def _show_dashboard(items) -> None:
    summary = build_dashboard(items)

    console.print(Panel(
        "\n".join([
            f"Linhas de fibra em estoque: {summary.fiber_in_stock}",
            f"Linhas de tinta em estoque: {summary.ink_in_stock}",
            f"Linhas de embalagem em estoque: {summary.packaging_in_stock}",
            f"Saídas de fibras (QTD paga): {summary.fiber_output}",
        ]),
        title="Dashboard Integrado",
    ))

    rooms = Table(title="Quantidade por Sala (Fibras)", box=box.ROUNDED)
    rooms.add_column("Sala")
    rooms.add_column("Qtd", justify="right")
    for name, value in summary.rooms:
        rooms.add_row(escape(name), str(value))
    console.print(rooms)

    materials = Table(title=f"Materiais Pagos (total {summary.paid_materials_total})", box=box.ROUNDED)
    materials.add_column("Material")
    materials.add_column("Vezes", justify="right")
    for name, value in summary.paid_materials:
        materials.add_row(escape(name), str(value))
    console.print(materials)

    machines = Table(title="Top Máquinas (Fibras pagas)", box=box.ROUNDED)
    machines.add_column("Máquina")
    machines.add_column("Vezes", justify="right")
    machines.add_column("Escala", justify="right")
    for name, value in summary.machines:
        machines.add_row(escape(name), str(value), f"{value}/{summary.machines_max}")
    console.print(machines)


# -----------------------
# escrita
# -----------------------

@app.command("adicionar")
def cmd_adicionar(
    categoria: str = typer.Option(..., "--categoria", "-c", help="INK | FIBER | PACKAGING"),
    material: str = typer.Option(..., "--material", "-m", help="Descrição do material"),
    qtd: Optional[str] = typer.Option(None, "--qtd", help="Quantidade"),
    status: str = typer.Option(STATUS_EM_ESTOQUE, "--status", help="EM ESTOQUE | PAGO | livre"),
    codigo: Optional[str] = typer.Option(None, "--codigo"),
    responsavel: Optional[str] = typer.Option(None, "--responsavel"),
    data_saida: Optional[str] = typer.Option(None, "--data-saida"),
    sm: Optional[str] = typer.Option(None, "--sm"),
    lote: Optional[str] = typer.Option(None, "--lote"),
    sala: Optional[str] = typer.Option(None, "--sala", help="Rua"),
    prateleira: Optional[str] = typer.Option(None, "--prateleira"),
    fileira: Optional[str] = typer.Option(None, "--fileira", help="Posição"),
    maquina: Optional[str] = typer.Option(None, "--maquina", help="Máquina fornecida"),
):
    """Adiciona um novo item ao estoque."""
    partial = _fields_from_options(
        category=_parse_categoria(categoria), material=material, quantity=qtd, status=status,
        code=codigo, responsible=responsavel, exit_date=data_saida, service_order=sm,
        lot=lote, room=sala, shelf=prateleira, row=fileira, supplied_machine=maquina,
    )
    sync = _open_session(None)
    try:
        outcome = sync.add(partial)
    except InvalidRecordError as e:
        console.print(f"[red]Erro ao adicionar item: {e}[/red]")
        raise typer.Exit(code=1)
    _report_outcome(outcome, "Item adicionado")
    if outcome == SyncOutcome.LOCAL:
        console.print(f"[dim]id local: {sync.items[0].id}[/dim]")


@app.command("atualizar")
def cmd_atualizar(
    record_id: str = typer.Argument(..., help="Id do item"),
    material: Optional[str] = typer.Option(None, "--material", "-m"),
    qtd: Optional[str] = typer.Option(None, "--qtd"),
    status: Optional[str] = typer.Option(None, "--status"),
    codigo: Optional[str] = typer.Option(None, "--codigo"),
    responsavel: Optional[str] = typer.Option(None, "--responsavel"),
    data_saida: Optional[str] = typer.Option(None, "--data-saida"),
    sm: Optional[str] = typer.Option(None, "--sm"),
    lote: Optional[str] = typer.Option(None, "--lote"),
    sala: Optional[str] = typer.Option(None, "--sala"),
    prateleira: Optional[str] = typer.Option(None, "--prateleira"),
    fileira: Optional[str] = typer.Option(None, "--fileira"),
    maquina: Optional[str] = typer.Option(None, "--maquina"),
):
    """Atualiza apenas os campos informados de um item."""
    partial = _fields_from_options(
        material=material, quantity=qtd, status=status, code=codigo, responsible=responsavel,
        exit_date=data_saida, service_order=sm, lot=lote, room=sala, shelf=prateleira,
        row=fileira, supplied_machine=maquina,
    )
    sync = _open_session(None)
    try:
        outcome = sync.update(record_id, partial)
    except InvalidRecordError as e:
        console.print(f"[red]Nada a atualizar: {e}[/red]")
        raise typer.Exit(code=1)
    _report_outcome(outcome, f"Item {record_id} atualizado")


@app.command("excluir")
def cmd_excluir(
    ids: List[str] = typer.Argument(..., help="Um ou mais ids"),
    sim: bool = typer.Option(False, "--sim", "-y", help="Não pedir confirmação"),
):
    """Exclui um ou vários itens."""
    if not sim and not typer.confirm(f"Tem certeza que deseja excluir {len(ids)} item(ns)?"):
        raise typer.Exit(code=0)
    sync = _open_session(None)
    outcome = sync.delete(ids[0]) if len(ids) == 1 else sync.bulk_delete(ids)
    _report_outcome(outcome, f"{len(ids)} item(ns) excluído(s)")


# -----------------------
# planilhas
# -----------------------

@app.command("importar")
def cmd_importar(
    arquivo: str = typer.Argument(..., help="Caminho do XLSX"),
    categoria: str = typer.Option(..., "--categoria", "-c", help="INK | FIBER | PACKAGING"),
    sim: bool = typer.Option(False, "--sim", "-y", help="Não pedir confirmação"),
):
    """Importa itens de uma planilha (primeira aba) para a categoria."""
    cat = _parse_categoria(categoria)
    rows = load_inventory_from_xlsx(arquivo, cat)
    if not rows:
        console.print(Panel("Nenhuma linha encontrada na planilha", title="Importação", border_style="yellow"))
        return
    if not sim and not typer.confirm(f"Deseja importar {len(rows)} itens?"):
        raise typer.Exit(code=0)
    sync = _open_session(None)
    outcome = sync.import_records(rows)
    _report_outcome(outcome, f"{len(rows)} itens importados")


@app.command("exportar")
def cmd_exportar(
    arquivo: Optional[str] = typer.Argument(None, help="Destino (padrão: <titulo>_<data>.xlsx)"),
    categoria: str = typer.Option(..., "--categoria", "-c", help="INK | FIBER | PACKAGING"),
    limite: Optional[int] = typer.Option(None, "--limite", help="Máximo de linhas carregadas"),
):
    """Exporta os itens da categoria para uma planilha com a aba "Estoque"."""
    cat = _parse_categoria(categoria)
    sync = _open_session(limite)
    path = arquivo or export_file_name(CATEGORY_TITLES[cat])
    export_inventory_to_xlsx(sync.by_category(cat), path, cat)
    console.print(f"[green]>> Planilha gerada: {path}[/green]")


# -----------------------
# sessão interativa
# -----------------------

@app.command("sessao")
def cmd_sessao(
    limite: Optional[int] = typer.Option(None, "--limite", help="Máximo de linhas carregadas"),
):
    """Sessão interativa: uma só coleção em memória entre as operações."""
    from mezanino.adapters.sessao import MezaninoSessao
    sync = _open_session(limite)
    MezaninoSessao(sync, console).run()


# Entry point com barreira de falhas: nunca termina em tela "quebrada"
def main():
    try:
        app()
    except Exception as e:
        log_system_event("fatal_error", {"error": str(e)}, level="error")
        console.print(Panel(
            f"A aplicação encontrou um erro crítico e não pôde continuar.\n\n{escape(str(e))}",
            title="Ops! Algo deu errado.",
            border_style="red",
        ))
        console.print("[dim]Execute o comando novamente para tentar de novo.[/dim]")
        sys.exit(1)


if __name__ == "__main__":
    main()
