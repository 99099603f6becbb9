"""Service-level behaviour: blanketing alerts, task completions and journal photo analysis."""

from datetime import date

import pytest

from agents.blanketing_agent import BlanketingAgent
from agents.journal_agent import JournalAgent
from agents.task_tracker import TaskTrackerAgent
from barn_app.config import BarnConfig
from logic.errors import NotAuthorized, PhotoAnalysisError, RecordNotFound, WeatherUnavailable
from models.horse import Horse
from models.weather import WeatherSnapshot
from tools.horse_store import SQLiteHorseStore
from tools.journal_store import SQLiteJournalStore
from tools.location_provider import Coordinates, FixedLocationProvider
from tools.task_store import SQLiteTaskStore
from tools.vision import PhotoAnalyzer, extract_json_block
from tools.weather_provider import MockWeatherProvider, OpenWeatherProvider


COLD_SNAP = WeatherSnapshot(temperature=25, condition="Snow", wind_speed=18, precipitation=0.2)


class _FakeResponse:
    def __init__(self, text: str) -> None:
        self.text = text


class _FakeVisionModel:
    """Stand-in for a Gemini ``GenerativeModel``: replies are queued per call."""

    def __init__(self, *replies) -> None:
        self.replies = list(replies)
        self.calls: list = []

    def generate_content(self, contents):
        self.calls.append(contents)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return _FakeResponse(reply)


def _blanketing_agent(tmp_path, weather_provider=None) -> BlanketingAgent:
    config = BarnConfig(database_path=str(tmp_path / "barn.db"))
    store = SQLiteHorseStore(config.database_path)
    store.create_horse(Horse("h1", "user-1", "Apollo", 22, 750, "clipped"))
    store.create_horse(Horse("h2", "user-1", "Willow", 8, 1100, "long"))
    return BlanketingAgent(
        config=config,
        weather_provider=weather_provider or MockWeatherProvider(COLD_SNAP),
        location_provider=FixedLocationProvider(Coordinates(40.0, -105.0)),
        horse_store=store,
    )


def test_recommend_for_horse_explains_its_score(tmp_path) -> None:
    provider = MockWeatherProvider(COLD_SNAP)
    agent = _blanketing_agent(tmp_path, provider)

    result = agent.recommend_for_horse("user-1", "h1")

    assert result["recommendation"] == {
        "blanket_needed": True,
        "blanket_weight": "heavy",
        "score": 16,
        "factors": {"age": 3, "weight": 3, "coat": 4, "weather": 6},
    }
    assert result["debug_summary"]["inputs"]["hair_length"] == "clipped"
    assert "heavy blanket recommended" in result["user_facing_summary"]
    assert provider.calls == [(40.0, -105.0)]


def test_recommend_for_stable_fetches_weather_once(tmp_path) -> None:
    provider = MockWeatherProvider(COLD_SNAP)
    agent = _blanketing_agent(tmp_path, provider)

    alerts = agent.recommend_for_stable("user-1")

    assert [alert["horse_name"] for alert in alerts] == ["Apollo", "Willow"]
    assert alerts[1]["recommendation"]["blanket_weight"] == "medium"
    assert all(alert["current_temp"] == 25 for alert in alerts)
    assert len(provider.calls) == 1


def test_stable_without_horses_skips_weather(tmp_path) -> None:
    provider = MockWeatherProvider()
    agent = _blanketing_agent(tmp_path, provider)

    assert agent.recommend_for_stable("user-without-horses") == []
    assert provider.calls == []


def test_weather_failure_propagates_without_fallback(tmp_path) -> None:
    agent = _blanketing_agent(tmp_path, OpenWeatherProvider(api_key=None))

    with pytest.raises(WeatherUnavailable):
        agent.recommend_for_horse("user-1", "h1")


def test_unknown_or_foreign_horse(tmp_path) -> None:
    agent = _blanketing_agent(tmp_path)

    with pytest.raises(RecordNotFound):
        agent.recommend_for_horse("user-1", "missing")
    with pytest.raises(NotAuthorized):
        agent.recommend_for_horse("user-2", "h1")


def _tracker(tmp_path, restore: bool = True, today: date = date(2024, 6, 3)) -> TaskTrackerAgent:
    config = BarnConfig(database_path=str(tmp_path / "barn.db"), restore_streak_on_revert=restore)
    return TaskTrackerAgent(
        config=config,
        task_store=SQLiteTaskStore(config.database_path),
        today=lambda: today,
        clock=lambda: 1_700_000_000.0,
    )


def test_toggle_completion_builds_and_reverts_streak(tmp_path) -> None:
    tracker = _tracker(tmp_path)
    task = tracker.create_task("user-1", {"title": "Turn out", "category": "maintenance"})

    tracker.toggle_completion("user-1", task.task_id, True, on_date="2024-06-01")
    tracker.toggle_completion("user-1", task.task_id, True, on_date=date(2024, 6, 2))
    done = tracker.toggle_completion("user-1", task.task_id, True)
    assert (done.current_streak, done.best_streak) == (3, 3)
    assert done.last_completed_date == date(2024, 6, 3)

    undone = tracker.toggle_completion("user-1", task.task_id, False)
    assert undone.completed is False
    assert (undone.current_streak, undone.best_streak) == (2, 2)
    assert undone.last_completed_date == date(2024, 6, 2)
    assert len(tracker.task_history("user-1", task.task_id)) == 2


def test_toggle_completion_legacy_revert_keeps_counters(tmp_path) -> None:
    tracker = _tracker(tmp_path, restore=False)
    task = tracker.create_task("user-1", {"title": "Turn out"})

    tracker.toggle_completion("user-1", task.task_id, True)
    undone = tracker.toggle_completion("user-1", task.task_id, False)

    assert undone.completed is False
    assert undone.current_streak == 1
    assert len(undone.completion_history) == 1


def test_streak_report_includes_longest_recorded_run(tmp_path) -> None:
    tracker = _tracker(tmp_path)
    task = tracker.create_task("user-1", {"title": "Evening feed"})
    for day in ("2024-05-01", "2024-05-02", "2024-05-03", "2024-05-10"):
        tracker.toggle_completion("user-1", task.task_id, True, on_date=day)

    [report] = tracker.streak_report("user-1")

    assert report["current_streak"] == 1
    assert report["best_streak"] == 3
    assert report["longest_recorded_run"] == 3
    assert report["completions"] == 4


def test_get_task_missing(tmp_path) -> None:
    tracker = _tracker(tmp_path)

    with pytest.raises(RecordNotFound):
        tracker.get_task("user-1", "nope")


def test_extract_json_block_handles_surrounding_text() -> None:
    assert extract_json_block('Sure! ```json\n{"description": "hay"}\n```') == {"description": "hay"}
    assert extract_json_block("no json here") is None
    assert extract_json_block("{not valid}") is None


def test_horse_analysis_parses_model_json() -> None:
    model = _FakeVisionModel(
        '{"horseDetected": true, "blanketStatus": "blanketed", "blanketType": "medium",'
        ' "horseCondition": {"visible": true, "coatCondition": "clipped"}, "confidence": 0.9}'
    )
    analyzer = PhotoAnalyzer(model=model)

    analysis = analyzer.analyze(image_bytes=b"jpeg", analysis_type="horse")

    assert analysis.horse_detected is True
    assert analysis.blanket_type == "medium"
    assert analysis.horse_condition.coat_condition == "clipped"
    assert model.calls[0][1] == {"mime_type": "image/jpeg", "data": b"jpeg"}


def test_reply_without_json_keeps_text_and_marks_not_detected() -> None:
    analyzer = PhotoAnalyzer(model=_FakeVisionModel("A bucket of oats."))

    analysis = analyzer.analyze(image_bytes=b"jpeg", analysis_type="food")

    assert analysis.description == "A bucket of oats."
    assert analysis.food_detected is False


def test_all_analysis_merges_and_skips_failures() -> None:
    model = _FakeVisionModel(
        RuntimeError("quota"),
        '{"horseDetected": true, "blanketStatus": "not_blanketed"}',
        '{"description": "Paddock at dawn", "animalsDetected": ["horse", "dog"]}',
    )
    analyzer = PhotoAnalyzer(model=model)

    analysis = analyzer.analyze(image_bytes=b"jpeg", analysis_type="all")

    assert analysis.food_detected is None
    assert analysis.horse_detected is True
    assert analysis.animals_detected == ["horse", "dog"]
    assert analysis.description == "Paddock at dawn"


def test_analyzer_requires_api_key_without_model() -> None:
    with pytest.raises(PhotoAnalysisError):
        PhotoAnalyzer(config=BarnConfig(google_api_key=None))


def test_empty_image_is_rejected() -> None:
    analyzer = PhotoAnalyzer(model=_FakeVisionModel())

    with pytest.raises(ValueError):
        analyzer.analyze(image_bytes=b"", analysis_type="general")


def _journal(tmp_path, analyzer) -> JournalAgent:
    config = BarnConfig(database_path=str(tmp_path / "barn.db"))
    return JournalAgent(config=config, journal_store=SQLiteJournalStore(config.database_path), analyzer=analyzer)


def test_journal_photo_analysis_is_stored_on_entry(tmp_path) -> None:
    analyzer = PhotoAnalyzer(model=_FakeVisionModel('{"description": "Clean stalls", "confidence": 0.8}'))
    journal = _journal(tmp_path, analyzer)
    entry = journal.create_entry(
        "user-1", {"title": "Morning check", "category": "observation", "photo_urls": ["https://x/1.jpg"]}
    )
    photo_id = entry.photos[0].photo_id
    assert entry.photos[0].analysis_status == "pending"

    updated = journal.analyze_photo("user-1", entry.entry_id, photo_id, b"jpeg")

    photo = updated.find_photo(photo_id)
    assert photo.analysis_status == "completed"
    assert photo.analysis.description == "Clean stalls"
    assert journal.list_entries("user-1")[0].find_photo(photo_id).analysis_status == "completed"


def test_journal_records_failed_analysis(tmp_path) -> None:
    analyzer = PhotoAnalyzer(model=_FakeVisionModel(RuntimeError("model offline")))
    journal = _journal(tmp_path, analyzer)
    entry = journal.create_entry("user-1", {"photo_urls": ["https://x/1.jpg"]})
    photo_id = entry.photos[0].photo_id

    updated = journal.analyze_photo("user-1", entry.entry_id, photo_id, b"jpeg", analysis_type="horse")

    photo = updated.find_photo(photo_id)
    assert photo.analysis_status == "failed"
    assert photo.analysis_error


@pytest.mark.parametrize("image_bytes, analysis_type", [(b"", "general"), (b"jpeg", "hooves")])
def test_journal_marks_photo_failed_on_rejected_input(tmp_path, image_bytes, analysis_type) -> None:
    model = _FakeVisionModel()
    journal = _journal(tmp_path, PhotoAnalyzer(model=model))
    entry = journal.create_entry("user-1", {"photo_urls": ["https://x/1.jpg"]})
    photo_id = entry.photos[0].photo_id

    updated = journal.analyze_photo("user-1", entry.entry_id, photo_id, image_bytes, analysis_type=analysis_type)

    assert updated.find_photo(photo_id).analysis_status == "failed"
    [stored] = journal.list_entries("user-1")
    assert stored.find_photo(photo_id).analysis_status == "failed"
    assert model.calls == []


def test_journal_analysis_unavailable_without_analyzer(tmp_path) -> None:
    journal = _journal(tmp_path, analyzer=None)
    entry = journal.create_entry("user-1", {"notes": "quiet day"})

    with pytest.raises(PhotoAnalysisError):
        journal.analyze_photo("user-1", entry.entry_id, "photo", b"jpeg")
