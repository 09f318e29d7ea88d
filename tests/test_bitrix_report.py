import random

import pytest

from src.bitrix_logs import ACTION_CATEGORIES, LEAD, NEGOCIO
from src.bitrix_report import (
    HOURLY_TITLE,
    build_report,
    format_report,
    parse_and_build_report,
    report_frames,
)
from src.bitrix_time import InvalidAnchorError
from src.ignored import IgnoreList

NO_IGNORE = IgnoreList()


def test_scenario_single_block(block):
    text = block("hoje, 10:00", "negócio", "Acme Ltda", "Maria Silva", "Etapa alterada")
    res = parse_and_build_report("15:45", text, "", ignored=NO_IGNORE)

    assert res.events_count == 1
    assert res.anchor == "15:45"
    assert res.report.hourly_counts == {10: 1}

    [u] = res.report.unique_summary
    assert (u.owner, u.entity_type, u.morning, u.afternoon) == ("Maria Silva", NEGOCIO, 1, 0)

    [a] = res.report.action_summary
    assert a.owner == "Maria Silva"
    assert a.counts == {
        "ETAPA_ALTERADA": 1,
        "ATIVIDADE_CRIADA": 0,
        "STATUS_ATIVIDADE_ALTERADA": 0,
        "CHAMADA_TELEFONICA": 0,
        "OUTROS": 0,
    }


def test_scenario_text_layout(block):
    text = block("hoje, 10:00", "negócio", "Acme Ltda", "Maria Silva", "Etapa alterada")
    res = parse_and_build_report("15:45", text, "", ignored=NO_IGNORE)

    assert res.text == "\n".join([
        "Acionamentos por hora (total geral)",
        "",
        "10: 1",
        "",
        "",
        "Maria Silva — NEGÓCIO",
        "Manhã: 1 empresas únicas",
        "Tarde: 0 empresas únicas",
        "",
        "",
        "Maria Silva",
        "ETAPA_ALTERADA: 1",
        "ATIVIDADE_CRIADA: 0",
        "STATUS_ATIVIDADE_ALTERADA: 0",
        "CHAMADA_TELEFONICA: 0",
        "OUTROS: 0",
    ])


def test_empty_report_text():
    res = parse_and_build_report("10:00", "nada aqui", "", ignored=NO_IGNORE)
    assert res.events_count == 0
    assert res.text == HOURLY_TITLE


def test_invalid_anchor_is_rejected(block):
    with pytest.raises(InvalidAnchorError):
        parse_and_build_report("25:99", block("hoje, 10:00", "lead", "A", "B"), "", ignored=NO_IGNORE)


def test_leads_batch_continues_index(block):
    negocios = "\n".join([
        block("hoje, 08:00", "negócio", "Acme", "Maria"),
        block("hoje, 09:00", "negócio", "Beta", "Maria"),
    ])
    leads = block("hoje, 09:00", "lead", "Gamma", "Maria")
    res = parse_and_build_report("12:00", negocios, leads, ignored=NO_IGNORE)

    assert res.events_count == 3
    assert [(r.entity_type, r.morning) for r in res.report.unique_summary] == [(NEGOCIO, 2), (LEAD, 1)]


def test_dedup_keeps_oldest_event(block):
    a = block("hoje, 08:00", "negócio", "Acme", "Maria")
    b = block("hoje, 09:00", "negócio", "Acme", "Maria")
    for text in (a + "\n" + b, b + "\n" + a):
        res = parse_and_build_report("12:00", text, "", ignored=NO_IGNORE)
        [u] = res.report.unique_summary
        assert (u.morning, u.afternoon) == (1, 0)


def test_dedup_representative_decides_bucket(block):
    morning = block("hoje, 11:30", "lead", "Acme", "Maria")
    afternoon = block("hoje, 13:00", "lead", "Acme", "Maria")
    for text in (morning + "\n" + afternoon, afternoon + "\n" + morning):
        [u] = parse_and_build_report("14:00", text, "", ignored=NO_IGNORE).report.unique_summary
        assert (u.morning, u.afternoon) == (1, 0)


def test_dedup_tie_breaks_on_smaller_index(event):
    first = event("Maria", "Acme", hour=13, age=100, index=5)
    second = event("Maria", "Acme", hour=9, age=100, index=2)
    for events in ([first, second], [second, first]):
        [u] = build_report(events, NO_IGNORE).unique_summary
        assert (u.morning, u.afternoon) == (1, 0)


def test_dedup_is_order_independent(event):
    events = [
        event("Maria", "Acme", hour=h, age=age, index=i)
        for i, (h, age) in enumerate([(8, 500), (14, 50), (12, 900), (9, 900), (16, 10)])
    ]
    expected = build_report(events, NO_IGNORE).unique_summary
    rng = random.Random(42)
    for _ in range(10):
        shuffled = events[:]
        rng.shuffle(shuffled)
        assert build_report(shuffled, NO_IGNORE).unique_summary == expected
    # idade empatada em 900: vence o índice 2 (12h, tarde)
    assert (expected[0].morning, expected[0].afternoon) == (0, 1)


def test_account_key_ignores_case_and_spaces_but_not_accents(event):
    events = [
        event("Maria", "Acme  Ltda", index=0),
        event("Maria", "ACME LTDA", index=1),
        event("Maria", "Açme Ltda", index=2),
    ]
    [u] = build_report(events, NO_IGNORE).unique_summary
    assert u.morning == 2


def test_owner_identity_is_normalized_and_first_spelling_shown(event):
    events = [
        event("Maria Silva", "Acme", index=0),
        event("MARIA  SÍLVA", "Beta", index=1),
    ]
    report = build_report(events, NO_IGNORE)
    assert [(u.owner, u.morning) for u in report.unique_summary] == [("Maria Silva", 2)]
    assert [a.owner for a in report.action_summary] == ["Maria Silva"]


def test_same_account_different_entity_types_count_separately(event):
    events = [
        event("Maria", "Acme", entity=LEAD, index=0),
        event("Maria", "Acme", entity=NEGOCIO, index=1),
    ]
    rows = build_report(events, NO_IGNORE).unique_summary
    assert [(r.entity_type, r.morning) for r in rows] == [(NEGOCIO, 1), (LEAD, 1)]


def test_actions_are_not_deduplicated(event):
    events = [
        event("Maria", "Acme", index=0, action="Etapa alterada"),
        event("Maria", "Acme", index=1, action="Etapa alterada"),
        event("Maria", "Acme", index=2, action="Chamada telefônica criada"),
        event("Maria", "Acme", index=3, action="Comentário"),
    ]
    report = build_report(events, NO_IGNORE)
    assert report.unique_summary[0].morning == 1
    assert report.action_summary[0].counts == {
        "ETAPA_ALTERADA": 2,
        "ATIVIDADE_CRIADA": 0,
        "STATUS_ATIVIDADE_ALTERADA": 0,
        "CHAMADA_TELEFONICA": 1,
        "OUTROS": 1,
    }
    assert report.hourly_counts == {10: 4}


def test_morning_afternoon_boundary(event):
    events = [
        event("Maria", "A", hour=11, index=0),
        event("Maria", "B", hour=12, index=1),
        event("Maria", "C", hour=0, index=2),
        event("Maria", "D", hour=23, index=3),
    ]
    [u] = build_report(events, NO_IGNORE).unique_summary
    assert (u.morning, u.afternoon) == (2, 2)


def test_sorting_by_owner_then_negocio_first(event):
    events = [
        event("bruno", "X", entity=LEAD, index=0),
        event("Carla", "X", index=1),
        event("Álvaro", "X", entity=LEAD, index=2),
        event("bruno", "Y", entity=NEGOCIO, index=3),
    ]
    report = build_report(events, NO_IGNORE)
    assert [(r.owner, r.entity_type) for r in report.unique_summary] == [
        ("Álvaro", LEAD),
        ("bruno", NEGOCIO),
        ("bruno", LEAD),
        ("Carla", NEGOCIO),
    ]
    assert [r.owner for r in report.action_summary] == ["Álvaro", "bruno", "Carla"]


def test_ignored_owners_produce_no_rows(event):
    ignored = IgnoreList(["Caio Zapelini"])
    events = [event("Caio Zapelini", f"Conta {i}", index=i) for i in range(20)]
    events += [event("caio", "Outra", index=20), event("Maria", "Acme", hour=14, index=21)]

    report = build_report(events, ignored)
    assert [r.owner for r in report.unique_summary] == ["Maria"]
    assert [r.owner for r in report.action_summary] == ["Maria"]
    assert report.hourly_counts == {14: 1}


def test_pipeline_counts_only_non_ignored_events(block):
    text = "\n".join([
        block("hoje, 08:00", "negócio", "Acme", "Rafael Kreusch"),
        block("hoje, 09:00", "negócio", "Beta", "Maria"),
    ])
    res = parse_and_build_report("10:00", text, "", ignored=IgnoreList(["Rafael Kreusch"]))
    assert res.events_count == 1
    assert "Rafael" not in res.text


def test_hourly_section_lists_nonzero_hours_ascending(event):
    events = [event("Maria", "A", hour=h, index=i) for i, h in enumerate([14, 9, 9, 7])]
    text = format_report(build_report(events, NO_IGNORE))
    assert text.splitlines()[:5] == [HOURLY_TITLE, "", "07: 1", "09: 2", "14: 1"]


def test_report_frames(event):
    events = [
        event("Maria", "A", hour=9, index=0),
        event("Maria", "B", entity=LEAD, hour=15, index=1, action="Atividade criada"),
    ]
    frames = report_frames(build_report(events, NO_IGNORE))

    assert frames["hourly"].to_dict("records") == [
        {"hora": 9, "acionamentos": 1},
        {"hora": 15, "acionamentos": 1},
    ]
    assert list(frames["unique"].columns) == ["comercial", "tipo", "manhã", "tarde", "total"]
    assert frames["unique"]["total"].tolist() == [1, 1]
    assert list(frames["actions"].columns) == ["comercial", *ACTION_CATEGORIES]
    assert frames["actions"].iloc[0]["ATIVIDADE_CRIADA"] == 1


def test_report_frames_empty():
    frames = report_frames(build_report([], NO_IGNORE))
    assert all(df.empty for df in frames.values())
