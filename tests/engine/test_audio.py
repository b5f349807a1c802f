from __future__ import annotations

import pytest

from jisho_harvester.engine.audio import audio_filename
from jisho_harvester.errors import FetchError
from jisho_harvester.models import Audio


@pytest.mark.parametrize(
    ("src", "expected"),
    [
        ("https://cdn.test/audio/neko.mp3", "neko.mp3"),
        ("//cdn.test/audio/a/b/inu.ogg?v=2", "inu.ogg"),
        ("/audio/tori.mp3", "tori.mp3"),
    ],
)
def test_audio_filename(src: str, expected: str) -> None:
    assert audio_filename(src) == expected


def test_download_all_keeps_found_and_drops_missing(service, engine) -> None:
    service.add("http://cdn.test/audio/inu.mp3", body=b"mp3-bytes")
    audios = {
        "audio/mpeg": Audio(src="//cdn.test/audio/inu.mp3"),
        "audio/ogg": Audio(src="//cdn.test/audio/inu.ogg"),
    }

    engine.audio.download_all(audios)

    assert list(audios) == ["audio/mpeg"]
    assert audios["audio/mpeg"].filename == "inu.mp3"
    assert audios["audio/mpeg"].src == "//cdn.test/audio/inu.mp3"
    assert (engine.audio_dir / "inu.mp3").read_bytes() == b"mp3-bytes"


def test_download_all_goes_through_the_cache(service, engine) -> None:
    address = service.add("https://cdn.test/audio/tori.mp3", body=b"tweet")

    engine.audio.download_all({"audio/mpeg": Audio(src=address)})
    engine.audio.download_all({"audio/mpeg": Audio(src=address)})

    assert service.count(address) == 1


def test_download_failure_is_fatal(service, engine) -> None:
    service.add("https://cdn.test/audio/bad.mp3", status=500)

    with pytest.raises(FetchError):
        engine.audio.download_all({"audio/mpeg": Audio(src="https://cdn.test/audio/bad.mp3")})
