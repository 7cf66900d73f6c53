from mezanino.infra.wire import COLUMN_TO_FIELD, FIELD_TO_COLUMN, fields_to_row, row_to_record


def test_mapping_is_bijective():
    assert len(FIELD_TO_COLUMN) == len(COLUMN_TO_FIELD)
    assert FIELD_TO_COLUMN["exit_date"] == "data_saida"
    assert FIELD_TO_COLUMN["supplied_machine"] == "maquina_fornecida"
    assert FIELD_TO_COLUMN["code"] == "codigo"
    assert FIELD_TO_COLUMN["quantity"] == "qtd"


def test_row_to_record():
    rec = row_to_record({
        "id": 42,
        "created_at": "2024-01-10T10:00:00",
        "category": "FIBER",
        "codigo": "M6010480",
        "material": "Fibra de Carbono T300",
        "qtd": "1246",
        "status": "EM ESTOQUE",
        "responsavel": "Ana Souza",
        "data_saida": "2024-01-15",
        "sm": "SM-201",
        "lote": "F-998",
        "sala": "S2",
        "prateleira": "C",
        "fileira": "5",
        "maquina_fornecida": "Ext 2/4",
    })
    assert rec.id == "42"
    assert rec.code == "M6010480"
    assert rec.quantity == 1246
    assert rec.exit_date == "2024-01-15"
    assert rec.service_order == "SM-201"
    assert rec.row == "5"
    assert rec.supplied_machine == "Ext 2/4"


def test_row_to_record_missing_columns():
    rec = row_to_record({"id": "1", "category": "PACKAGING", "material": "Caixa", "qtd": None})
    assert rec.quantity == 0
    assert rec.status == ""
    assert rec.lot is None


def test_fields_to_row_is_partial():
    row = fields_to_row({"status": "PAGO", "exit_date": "2024-01-12", "unknown": 1})
    assert row == {"status": "PAGO", "data_saida": "2024-01-12"}


def test_fields_to_row_id_only_on_request():
    assert fields_to_row({"id": "x", "material": "M"}) == {"material": "M"}
    assert fields_to_row({"id": "x"}, include_id=True) == {"id": "x"}
