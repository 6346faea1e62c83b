import pytest

from voicetwin.models import Role
from voicetwin.persona import DEFAULT_PERSONA_TEXT, GREETING_TEXT, PersonaConfig, load_persona


def test_file_wins_over_inline_text(tmp_path):
    persona_file = tmp_path / "persona.txt"
    persona_file.write_text("You are Grace.\n", encoding="utf-8")

    persona = load_persona(str(persona_file), "You are someone else.")

    assert persona.persona_text == "You are Grace."


def test_inline_text_used_without_file():
    assert load_persona("", "  You are Linus.  ").persona_text == "You are Linus."


def test_placeholder_when_unconfigured():
    persona = load_persona()
    assert persona.persona_text == DEFAULT_PERSONA_TEXT.strip()
    assert persona.greeting == GREETING_TEXT


def test_empty_persona_file_is_rejected(tmp_path):
    persona_file = tmp_path / "empty.txt"
    persona_file.write_text("   ", encoding="utf-8")

    with pytest.raises(ValueError):
        load_persona(str(persona_file))


def test_priming_pair_shape():
    pair = PersonaConfig(persona_text="P").priming_pair()

    assert [t.role for t in pair] == [Role.USER, Role.MODEL]
    assert pair[0].text == "P"
