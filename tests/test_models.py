from __future__ import annotations

import pytest

from cyclone_viewer.processing.models import (
    FALLBACK_COLOR,
    ModelKind,
    classify_model,
    get_category,
    get_model_color,
    get_model_display_name,
    group_tracks_by_init_and_model,
    is_default_model,
    is_known_model,
    list_init_times,
    models_in_category,
    select_tracks_for_display,
)
from cyclone_viewer.processing.tracks import StormTrack


def make_track(model: str, init_time: str = "2023090100") -> StormTrack:
    return StormTrack(
        id=f"AL162023_{model}_{init_time}",
        storm_id="AL162023",
        name=model,
        basin="AL",
        number="16",
        year=2023,
        model=model,
        init_time=init_time,
        cyclone_id="aal162023",
        cyclone_name="Atlantic - Cyclone 16 (2023)",
    )


def test_exact_model():
    info = classify_model("OFCL")

    assert info.kind == ModelKind.EXACT
    assert info.is_default
    assert info.color == "#FFFFFF"
    assert info.category == "track_intensity"


def test_track_only_model_category():
    assert classify_model("TVCN").category == "track_only"


def test_ensemble_member():
    info = classify_model("PH07")

    assert info.kind == ModelKind.ENSEMBLE
    assert info.is_default
    assert info.member == 7
    assert info.display_name == "Ensemble No. 7"
    assert info.hue == 285
    assert info.color == "hsl(285, 80%, 55%)"
    assert info.category == "ensemble"


def test_ensemble_hue_wraps():
    assert classify_model("PH12").hue == 0
    assert classify_model("PH00").color == "hsl(180, 80%, 55%)"


@pytest.mark.parametrize("code", ["PH7", "PH123", "XPH07", "ph07"])
def test_near_ensemble_codes_are_unknown(code):
    info = classify_model(code)

    assert info.kind == ModelKind.UNKNOWN
    assert not info.is_default
    assert info.color == FALLBACK_COLOR


def test_unknown_model_display():
    assert get_model_display_name("ZZZZ") == "ZZZZ"
    assert get_model_color("ZZZZ") == FALLBACK_COLOR
    assert not is_known_model("ZZZZ")


def test_known_but_not_default():
    assert is_known_model("NVGM")
    assert not is_default_model("NVGM")
    assert is_known_model("PH03")


def test_selection_keeps_default_models():
    tracks = [make_track("OFCL"), make_track("NVGM"), make_track("ZZZZ"), make_track("PH01")]

    selected = select_tracks_for_display(tracks)

    assert [t.model for t in selected] == ["OFCL", "PH01"]


def test_selection_falls_back_to_known_models():
    tracks = [make_track("NVGM"), make_track("ZZZZ")]

    assert [t.model for t in select_tracks_for_display(tracks)] == ["NVGM"]


def test_selection_by_category():
    tracks = [make_track("OFCL"), make_track("TVCN"), make_track("PH01")]

    assert [t.model for t in select_tracks_for_display(tracks, category="track_only")] == ["TVCN"]
    assert [t.model for t in select_tracks_for_display(tracks, category="ensemble")] == ["PH01"]
    assert len(select_tracks_for_display(tracks, category="all")) == 3


def test_selection_rejects_unknown_category():
    with pytest.raises(ValueError):
        select_tracks_for_display([make_track("OFCL")], category="nope")


def test_models_in_category():
    models = ["OFCL", "TVCN", "PH01", "PH1"]

    assert models_in_category("track_only", models) == ["TVCN"]
    assert models_in_category("track_intensity", models) == ["OFCL"]
    assert models_in_category("ensemble", models) == ["PH01"]
    assert models_in_category("all", models) == models
    assert models_in_category("ensemble", []) == []
    with pytest.raises(ValueError):
        models_in_category("nope", models)


def test_get_category():
    assert get_category("track_intensity").name == "Track & Intensity Models"
    assert get_category("nope") is None


def test_grouping_and_init_times():
    tracks = [
        make_track("OFCL", "2023090100"),
        make_track("AVNO", "2023090100"),
        make_track("OFCL", "2023090106"),
    ]

    grouped = group_tracks_by_init_and_model(tracks)

    assert sorted(grouped["2023090100"]) == ["AVNO", "OFCL"]
    assert list(grouped["2023090106"]) == ["OFCL"]
    assert list_init_times(tracks) == ["2023090106", "2023090100"]
