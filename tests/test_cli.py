import json
import sys
from pathlib import Path

import pandas as pd
import pytest
from typer.testing import CliRunner

from mezanino.adapters import cli
from mezanino.adapters.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def fake_store(monkeypatch, store):
    monkeypatch.setattr(cli, "make_store", lambda settings: store)
    return store


def test_listar_json_with_search(fake_store):
    result = runner.invoke(app, ["listar", "--categoria", "tinta", "--busca", "azul", "--json"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert [r["id"] for r in data] == ["1"]
    assert data[0]["room"] == "S1"


def test_listar_sort_and_filter(fake_store):
    result = runner.invoke(app, ["listar", "--ordenar", "quantity", "--desc", "--json",
                                 "--filtro", "status=EM ESTOQUE"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert [r["quantity"] for r in data] == [5000, 50]


def test_listar_table(fake_store):
    result = runner.invoke(app, ["listar", "--categoria", "PACKAGING"])
    assert result.exit_code == 0, result.output
    assert "ESTOQUE DE EMBALAGEM" in result.output
    assert "1 item(ns)" in result.output


def test_listar_offline_notice(fake_store):
    fake_store.fail.add("*")
    result = runner.invoke(app, ["listar"])
    assert result.exit_code == 0, result.output
    assert "Sem conexão" in result.output


def test_invalid_category(fake_store):
    result = runner.invoke(app, ["listar", "--categoria", "papel"])
    assert result.exit_code != 0


def test_valores(fake_store):
    result = runner.invoke(app, ["valores", "status"])
    assert result.exit_code == 0, result.output
    assert result.stdout.split("\n")[:2] == ["EM ESTOQUE", "PAGO"]


def test_dashboard(fake_store):
    result = runner.invoke(app, ["dashboard"])
    assert result.exit_code == 0, result.output
    assert "Dashboard Integrado" in result.output
    assert "Saídas de fibras (QTD paga): 1246" in result.output


def test_adicionar_confirmed(fake_store):
    result = runner.invoke(app, ["adicionar", "-c", "INK", "-m", "Tinta Vermelha", "--qtd", "12"])
    assert result.exit_code == 0, result.output
    assert "concluído" in result.output
    assert fake_store.rows[-1]["material"] == "Tinta Vermelha"
    assert fake_store.rows[-1]["qtd"] == 12


def test_adicionar_local_fallback(fake_store):
    fake_store.fail.add("insert")
    result = runner.invoke(app, ["adicionar", "-c", "FIBER", "-m", "Kevlar 49"])
    assert result.exit_code == 0, result.output
    assert "salvo apenas localmente" in result.output
    assert "NÃO foi gravado no servidor" in result.output
    assert "será perdida quando o comando terminar" in result.output
    assert "local-" in result.output


def test_adicionar_blank_material(fake_store):
    result = runner.invoke(app, ["adicionar", "-c", "FIBER", "-m", " "])
    assert result.exit_code == 1


def test_atualizar(fake_store):
    result = runner.invoke(app, ["atualizar", "2", "--status", "EM ESTOQUE", "--qtd", "10"])
    assert result.exit_code == 0, result.output
    row = next(r for r in fake_store.rows if r["id"] == "2")
    assert row["status"] == "EM ESTOQUE"
    assert row["qtd"] == 10


def test_atualizar_nothing(fake_store):
    result = runner.invoke(app, ["atualizar", "2"])
    assert result.exit_code == 1


def test_excluir_varios(fake_store):
    result = runner.invoke(app, ["excluir", "1", "3", "--sim"])
    assert result.exit_code == 0, result.output
    assert [r["id"] for r in fake_store.rows] == ["2"]
    assert "delete_many" in fake_store.calls


def test_excluir_cancelado(fake_store):
    result = runner.invoke(app, ["excluir", "1"], input="n\n")
    assert result.exit_code == 0
    assert len(fake_store.rows) == 3


def test_importar(fake_store, tmp_path):
    path = tmp_path / "fibras.xlsx"
    pd.DataFrame({"Material": ["Fibra A", "Fibra B"], "Qtd": [1, 2]}).to_excel(path, index=False)
    result = runner.invoke(app, ["importar", str(path), "-c", "FIBER", "--sim"])
    assert result.exit_code == 0, result.output
    assert [r["material"] for r in fake_store.rows[-2:]] == ["Fibra A", "Fibra B"]
    assert fake_store.rows[-1]["category"] == "FIBER"
    assert fake_store.rows[-1]["lote"] == "-"


def test_exportar(fake_store, tmp_path):
    path = tmp_path / "tintas.xlsx"
    result = runner.invoke(app, ["exportar", str(path), "-c", "INK"])
    assert result.exit_code == 0, result.output
    df = pd.read_excel(path, sheet_name="Estoque")
    assert list(df["Material"]) == ["Tinta Azul Royal"]


def test_sessao_keeps_local_add_until_exit(fake_store):
    fake_store.fail.add("insert")
    lines = ["3", "FIBER", "Kevlar 49", "", ""] + [""] * 9 + ["0", "y"]
    result = runner.invoke(app, ["sessao"], input="\n".join(lines) + "\n")
    assert result.exit_code == 0, result.output
    assert "MENU PRINCIPAL" in result.output
    assert "serão perdidos ao sair" in result.output


def test_sessao_exit_right_away(fake_store):
    result = runner.invoke(app, ["sessao"], input="0\n")
    assert result.exit_code == 0, result.output
    assert "Saindo da sessão" in result.output


def test_main_fault_barrier(monkeypatch, capsys):
    def _boom(settings):
        raise RuntimeError("mount point missing")

    monkeypatch.setattr(cli, "make_store", _boom)
    monkeypatch.setattr(sys, "argv", ["mezanino", "listar"])
    with pytest.raises(SystemExit) as exc:
        cli.main()
    assert exc.value.code == 1
    out = capsys.readouterr().out
    assert "Ops! Algo deu errado." in out
    assert "mount point missing" in out
