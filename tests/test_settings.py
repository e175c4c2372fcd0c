from __future__ import annotations

import pydantic
import pytest

from voicesign.core.settings import Settings, get_settings


@pytest.mark.parametrize("chunk_size", [0, -4, 30, 32770])
def test_audio_chunk_size_is_validated_at_load(chunk_size):
    with pytest.raises(pydantic.ValidationError):
        Settings(_env_file=None, AUDIO_CHUNK_SIZE=chunk_size)


def test_audio_chunk_size_from_environment(monkeypatch):
    monkeypatch.setenv("AUDIO_CHUNK_SIZE", "1024")
    assert Settings(_env_file=None).AUDIO_CHUNK_SIZE == 1024


def test_get_settings_is_loaded_once():
    assert get_settings() is get_settings()
