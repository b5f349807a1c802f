from __future__ import annotations

import json

import pytest

from jisho_harvester.errors import FetchError
from jisho_harvester.models import Query
from jisho_harvester.orchestrator import HarvestOrchestrator, dump_entries
from jisho_harvester.ui import ProgressReporter


def run_harvest(config, service, queries):
    return HarvestOrchestrator(config, client=service.client()).run(queries)


def test_distinct_entries_are_all_emitted(harvest_config, service, entry_record) -> None:
    service.add_search("#jlpt-n5", [entry_record("猫", "ねこ")])
    service.add_search("#jlpt-n4", [entry_record("犬", "いぬ")])
    service.add_word_page("猫")
    service.add_word_page("犬")

    entries = run_harvest(harvest_config, service, [Query(5, 1), Query(4, 1)])

    assert sorted(entries) == ["犬", "猫"]
    for key, entry in entries.items():
        assert entry.canonical_key == key
        assert entry.jisho_word_page == key


def test_later_duplicate_is_discarded_unmerged(harvest_config, service, entry_record) -> None:
    service.add_search("#jlpt-n5", [entry_record("猫", "ねこ")])
    service.add_search("#jlpt-n4", [entry_record("犬", "いぬ")])
    service.add_search("#jlpt-n3", [entry_record("猫", "びょう", tags=["later"])])
    service.add_word_page("猫")
    service.add_word_page("犬")

    entries = run_harvest(harvest_config, service, [Query(5, 1), Query(4, 1), Query(3, 1)])

    assert sorted(entries) == ["犬", "猫"]
    cat = entries["猫"]
    assert cat.japanese[0].reading == "ねこ"
    assert cat.tags == ["jlpt-n5"]
    assert cat.jisho_word_page == "猫"
    assert sorted(service.word_page_requests()) == sorted(["猫", "犬"])


def test_audio_404_is_dropped_from_emitted_entry(harvest_config, service, entry_record, word_page_html) -> None:
    service.add_search("#jlpt-n5", [entry_record("猫", "ねこ")])
    service.add_word_page(
        "猫",
        body=word_page_html(
            audios=[
                ("https://cdn.test/audio/neko.mp3", "audio/mpeg"),
                ("https://cdn.test/audio/neko.ogg", "audio/ogg"),
            ]
        ),
    )
    service.add("https://cdn.test/audio/neko.mp3", body=b"mp3")
    service.add("https://cdn.test/audio/neko.ogg", status=404)

    entries = run_harvest(harvest_config, service, [Query(5, 1)])

    audios = entries["猫"].audios
    assert list(audios) == ["audio/mpeg"]
    assert audios["audio/mpeg"].src == "https://cdn.test/audio/neko.mp3"
    assert audios["audio/mpeg"].filename == "neko.mp3"


def test_unresolved_entry_is_still_emitted(harvest_config, service, entry_record) -> None:
    service.add_search("#jlpt-n5", [entry_record("", "ああ")])

    entries = run_harvest(harvest_config, service, [Query(5, 1)])

    assert list(entries) == ["ああ"]
    assert entries["ああ"].jisho_word_page == ""


def test_fatal_query_failure_aborts_the_run(harvest_config, service, entry_record) -> None:
    service.add_search("#jlpt-n5", [entry_record("猫", "ねこ")])
    service.add(service.endpoints.search("#jlpt-n4", 1), status=500)

    with pytest.raises(FetchError):
        run_harvest(harvest_config, service, [Query(5, 1), Query(4, 1)])


def test_fatal_enrichment_failure_aborts_the_run(harvest_config, service, entry_record) -> None:
    service.add_search("#jlpt-n5", [entry_record("猫", "ねこ")])
    service.add_word_page("猫", status=502)

    with pytest.raises(FetchError):
        run_harvest(harvest_config, service, [Query(5, 1)])


class AwaitFailureProgress(ProgressReporter):
    """Holds the consumer after its first submission until an enrichment has failed."""

    def __init__(self) -> None:
        super().__init__(enabled=False)
        self.orchestrator = None

    def queued(self) -> None:
        super().queued()
        if self.state.queued == 1:
            assert self.orchestrator.aborted.wait(timeout=5)


def test_enrichment_failure_stops_further_submissions(harvest_config, service, entry_record) -> None:
    service.add_search(
        "#jlpt-n5", [entry_record("猫", "ねこ"), entry_record("犬", "いぬ"), entry_record("鳥", "とり")]
    )
    service.add_word_page("猫", status=502)
    service.add_word_page("犬")
    service.add_word_page("鳥")
    progress = AwaitFailureProgress()
    orchestrator = HarvestOrchestrator(harvest_config, client=service.client(), progress=progress)
    progress.orchestrator = orchestrator

    with pytest.raises(FetchError):
        orchestrator.run([Query(5, 1)])

    assert progress.state.queued == 1
    assert service.word_page_requests() == ["猫"]


def test_run_uses_configured_query_plan(harvest_config, service, entry_record) -> None:
    harvest_config.queries.band_pages = {2: 1}
    service.add_search("#jlpt-n2", [entry_record("鳥", "とり")])

    entries = HarvestOrchestrator(harvest_config, client=service.client()).run()

    assert list(entries) == ["鳥"]


def test_dump_entries_is_one_json_object(harvest_config, service, entry_record) -> None:
    service.add_search("#jlpt-n5", [entry_record("猫", "ねこ")])
    service.add_word_page("猫")

    payload = json.loads(dump_entries(run_harvest(harvest_config, service, [Query(5, 1)])))

    assert list(payload) == ["猫"]
    assert payload["猫"]["jisho_word_page"] == "猫"
    assert payload["猫"]["japanese"] == [{"word": "猫", "reading": "ねこ"}]
    assert payload["猫"]["audios"] == {}
    assert payload["猫"]["collocations"] == []
