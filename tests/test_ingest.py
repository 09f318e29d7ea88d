import uuid

import pytest

from src import ingest
from src.bitrix_logs import LEAD, NEGOCIO
from src.bitrix_report import BitrixReport, UniqueRow


class FakeCursor:
    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class FakeConn:
    def __init__(self):
        self.rolled_back = False

    def cursor(self):
        return FakeCursor()

    def rollback(self):
        self.rolled_back = True


@pytest.fixture
def report():
    return BitrixReport(unique_summary=[
        UniqueRow("Maria Silva", NEGOCIO, 3, 1),
        UniqueRow("Maria Silva", LEAD, 0, 2),
        UniqueRow("Novo Comercial", LEAD, 1, 0),
    ])


@pytest.fixture
def existing():
    return [
        {"id": "1", "category": "empresas", "name": "MARIA SILVA", "morning": 9, "afternoon": 9},
        {"id": "l9", "category": "leads", "name": "Maria  Sílva", "morning": 0, "afternoon": 0},
    ]


def test_report_to_team_rows_matches_existing(report, existing):
    rows = ingest.report_to_team_rows(report, existing)

    assert rows[0] == {"id": "1", "category": "empresas", "name": "MARIA SILVA", "morning": 3, "afternoon": 1}
    assert rows[1] == {"id": "l9", "category": "leads", "name": "Maria  Sílva", "morning": 0, "afternoon": 2}


def test_report_to_team_rows_new_owner_gets_uuid(report, existing):
    new = ingest.report_to_team_rows(report, existing)[2]
    assert new["category"] == "leads"
    assert new["name"] == "Novo Comercial"
    assert (new["morning"], new["afternoon"]) == (1, 0)
    uuid.UUID(new["id"])


def test_upsert_team_rows(monkeypatch, report, existing):
    calls = []
    monkeypatch.setattr(ingest, "get_conn", lambda: FakeConn())
    monkeypatch.setattr(ingest, "execute_values", lambda cur, sql, values, page_size: calls.append((sql, values)))

    rows = ingest.report_to_team_rows(report, existing)
    assert ingest.upsert_team_rows(rows) == 3

    [(sql, values)] = calls
    assert "ON CONFLICT (id) DO UPDATE" in sql
    assert values[0] == ("1", "empresas", "MARIA SILVA", 3, 1)


def test_upsert_team_rows_empty_does_not_connect(monkeypatch):
    def boom():
        raise AssertionError("não deveria conectar")

    monkeypatch.setattr(ingest, "get_conn", boom)
    assert ingest.upsert_team_rows([]) == 0


def test_upsert_team_rows_rolls_back_and_reraises(monkeypatch):
    conn = FakeConn()

    def fail(*args, **kwargs):
        raise RuntimeError("conexão perdida")

    monkeypatch.setattr(ingest, "get_conn", lambda: conn)
    monkeypatch.setattr(ingest, "execute_values", fail)

    row = {"id": "1", "category": "leads", "name": "Ana", "morning": 1, "afternoon": 0}
    with pytest.raises(RuntimeError, match="conexão perdida"):
        ingest.upsert_team_rows([row])
    assert conn.rolled_back


def test_apply_report_to_team(monkeypatch, report, existing):
    written = []
    monkeypatch.setattr(
        ingest, "list_team_members",
        lambda category: [m for m in existing if m["category"] == category],
    )
    monkeypatch.setattr(ingest, "upsert_team_rows", lambda rows: written.extend(rows) or len(rows))

    assert ingest.apply_report_to_team(report) == 3
    assert [r["id"] for r in written[:2]] == ["1", "l9"]
