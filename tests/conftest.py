import pytest

from src.bitrix_logs import BitrixEvent, classify_action


@pytest.fixture
def block():
    """Monta o texto de um bloco da timeline do Bitrix (5 linhas)."""
    def _block(when, entity, account, owner, action="Etapa alterada"):
        return "\n".join([when, entity, account, owner, action])
    return _block


@pytest.fixture
def event():
    """Evento já extraído, para testar a agregação sem passar pelo parser."""
    def _event(owner, account, *, entity="NEGÓCIO", hour=10, age=0, index=0, action="Etapa alterada"):
        return BitrixEvent(
            entity_type=entity,
            account=account,
            owner=owner,
            action_text=action,
            category=classify_action(action),
            hhmm=f"{hour:02d}:00",
            hour=hour,
            age_seconds=age,
            index=index,
        )
    return _event
