"""Shared test fixtures for the logic flow compiler."""

from typing import Dict, List, Optional

import pytest

from logicflow import config
from logicflow.dsl.parser import ParserMode, parse_logic_text
from logicflow.llm.base import ChatClient

LOGIN_FLOW = """
INPUT: Login-Daten | Email und Passwort
PROCESS: Benutzer suchen | DB-Abfrage
DECISION: Benutzer existiert? | Prüfe DB
  YES -> Passwort prüfen
  NO -> Nicht gefunden
PROCESS: Passwort prüfen | Hash-Vergleich
DECISION: Passwort korrekt? | Vergleich
  YES -> Erfolg
  NO -> Falsches Passwort
OUTPUT: Erfolg | Login erfolgreich
OUTPUT: Nicht gefunden | 404
OUTPUT: Falsches Passwort | 401
"""


class FakeChatClient(ChatClient):
    """Records every call and answers with a canned reply or error."""

    def __init__(self, reply: str = "", error: Optional[Exception] = None):
        self.reply = reply
        self.error = error
        self.calls: List[List[Dict]] = []
        self.temperatures: List[Optional[float]] = []

    def chat(self, messages, temperature=None):
        self.calls.append(list(messages))
        self.temperatures.append(temperature)
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture(autouse=True)
def default_parser_config(monkeypatch):
    """Keep tests independent of a developer's .env parser settings."""
    monkeypatch.setattr(config, "PARSER_SYNTHESIZE_ANCHORS", False)
    monkeypatch.setattr(config, "PARSER_FALLBACK_AS_PROCESS", False)


@pytest.fixture
def strict_mode() -> ParserMode:
    return ParserMode()


@pytest.fixture
def permissive_mode() -> ParserMode:
    return ParserMode(fallback_line_as_process=True)


@pytest.fixture
def anchor_mode() -> ParserMode:
    return ParserMode(synthesize_anchors=True)


@pytest.fixture
def login_text() -> str:
    return LOGIN_FLOW


@pytest.fixture
def login_graph(strict_mode):
    return parse_logic_text(LOGIN_FLOW, strict_mode).graph


@pytest.fixture
def fake_client() -> FakeChatClient:
    return FakeChatClient()
