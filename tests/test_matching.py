from types import SimpleNamespace

import pytest

from readout_overlay.matching import build_readout, find_associations
from readout_overlay.models import Association, DataContractError, LabelSpec
from readout_overlay.taxonomy import DEFAULT_LABELS, GREEN, RED

VOLUME = LabelSpec("Volume", GREEN)
PRESSURE = LabelSpec("Pressure", RED)


def test_no_lines_yields_no_associations() -> None:
    assert find_associations([], DEFAULT_LABELS) == []


def test_value_inside_label_band_is_associated(make_line) -> None:
    label = make_line("Volume", ys=(100, 100, 200, 200), left=0, right=80)
    value = make_line("120 mL", ys=(140, 140, 160, 160), left=120, right=200)

    associations = find_associations([label, value], [VOLUME])

    assert associations == [Association(label="Volume", line=value)]
    assert associations[0].value_text == "120 mL"


@pytest.mark.parametrize("edge", [100.0, 200.0])
def test_value_centered_on_band_edge_is_excluded(make_line, edge: float) -> None:
    label = make_line("Volume", ys=(100, 100, 200, 200))
    value = make_line("120 mL", ys=(edge - 5, edge - 5, edge + 5, edge + 5))

    assert find_associations([label, value], [VOLUME]) == []


def test_value_center_is_mean_of_all_corners(make_line) -> None:
    label = make_line("Volume", ys=(100, 100, 200, 200))
    # Corners straddle the band but their mean is 201.
    skewed = make_line("120 mL", ys=(150, 150, 252, 252))

    assert find_associations([label, skewed], [VOLUME]) == []


def test_label_without_value_produces_nothing(make_line) -> None:
    label = make_line("Volume", 100, 200)
    far_away = make_line("120 mL", 300, 320)

    assert find_associations([label, far_away], [VOLUME]) == []


def test_missing_label_does_not_affect_other_labels(make_line) -> None:
    pressure = make_line("Pressure", 300, 340)
    pressure_value = make_line("22 cmH2O", 310, 330, left=200, right=300)

    associations = find_associations(
        [pressure, pressure_value],
        [VOLUME, PRESSURE],
    )

    assert associations == [Association(label="Pressure", line=pressure_value)]


def test_label_match_is_exact_and_case_sensitive(make_line) -> None:
    lines = [
        make_line("volume", 100, 200),
        make_line("Volume ", 100, 200),
        make_line("120 mL", 140, 160, left=200, right=300),
    ]

    assert find_associations(lines, [VOLUME]) == []


def test_repeated_label_text_is_never_the_value(make_line) -> None:
    label = make_line("Volume", 100, 200)
    repeat = make_line("Volume", 140, 160, left=300, right=380)
    value = make_line("450 mL", 130, 170, left=120, right=200)

    associations = find_associations([label, repeat, value], [VOLUME])

    assert associations == [Association(label="Volume", line=value)]


def test_other_label_text_can_be_the_value(make_line) -> None:
    volume = make_line("Volume", 100, 200)
    pressure = make_line("Pressure", 140, 160, left=200, right=300)

    associations = find_associations([volume, pressure], [VOLUME])

    assert associations == [Association(label="Volume", line=pressure)]


def test_first_candidate_in_engine_order_wins(make_line) -> None:
    label = make_line("Volume", 100, 200, left=0, right=80)
    far = make_line("500 mL", 140, 160, left=600, right=700)
    near = make_line("450 mL", 140, 160, left=100, right=180)

    associations = find_associations([label, far, near], [VOLUME])

    assert associations[0].line is far


def test_nearest_tie_break_prefers_horizontally_closest(make_line) -> None:
    label = make_line("Volume", 100, 200, left=0, right=80)
    far = make_line("500 mL", 140, 160, left=600, right=700)
    near = make_line("450 mL", 140, 160, left=100, right=180)

    associations = find_associations(
        [label, far, near],
        [VOLUME],
        tie_break="nearest",
    )

    assert associations[0].line is near


def test_nearest_tie_break_keeps_engine_order_for_equal_gaps(make_line) -> None:
    label = make_line("Volume", 100, 200, left=100, right=180)
    right_side = make_line("450 mL", 140, 160, left=200, right=260)
    left_side = make_line("500 mL", 140, 160, left=20, right=80)

    associations = find_associations(
        [label, right_side, left_side],
        [VOLUME],
        tie_break="nearest",
    )

    assert associations[0].line is right_side


def test_unknown_tie_break_is_rejected(make_line) -> None:
    lines = [make_line("Volume", 100, 200), make_line("1", 140, 160)]

    with pytest.raises(ValueError, match="tie-break"):
        find_associations(
            lines, [VOLUME], tie_break="closest"  # type: ignore[arg-type]
        )


def test_output_follows_label_order_for_any_input_order(make_line) -> None:
    lines = [
        make_line("Gradient", 0, 40),
        make_line("12.5 mmHg", 10, 30, left=200, right=300),
        make_line("Volume", 100, 140),
        make_line("400 mL", 110, 130, left=200, right=300),
        make_line("Pressure", 200, 240),
        make_line("25 cmH2O", 210, 230, left=200, right=300),
        make_line("Compliance", 300, 340),
        make_line("40 mL/cmH2O", 310, 330, left=200, right=300),
    ]
    expected = ["Volume", "Compliance", "Pressure", "Gradient"]

    forward = find_associations(lines, DEFAULT_LABELS)
    backward = find_associations(list(reversed(lines)), DEFAULT_LABELS)
    as_set = find_associations(set(lines), DEFAULT_LABELS)

    assert [item.label for item in forward] == expected
    assert [item.label for item in backward] == expected
    assert [item.label for item in as_set] == expected
    assert [item.value_text for item in as_set] == [
        "400 mL",
        "40 mL/cmH2O",
        "25 cmH2O",
        "12.5 mmHg",
    ]


def test_lines_are_left_untouched(make_line) -> None:
    lines = (make_line("Volume", 100, 200), make_line("120 mL", 140, 160))
    snapshot = [(line.content, line.corner_points) for line in lines]

    find_associations(lines, [VOLUME])

    assert [(line.content, line.corner_points) for line in lines] == snapshot


def test_malformed_duck_typed_line_fails_fast(make_line) -> None:
    label = make_line("Volume", 100, 200)
    broken = SimpleNamespace(
        content="120 mL",
        corner_points=[(0, 140), (1, 150), (1, 160)],
    )

    with pytest.raises(DataContractError):
        find_associations([label, broken], [VOLUME])


def test_build_readout_reports_every_label(make_line) -> None:
    value = make_line("120 mL", 140, 160, left=120, right=200)
    readout = build_readout(
        [Association(label="Volume", line=value)],
        DEFAULT_LABELS,
    )

    assert [field.label for field in readout.fields] == [
        "Volume",
        "Compliance",
        "Pressure",
        "Gradient",
    ]
    assert readout.fields[0].status == "located"
    assert readout.fields[0].value == "120 mL"
    assert readout.fields[0].bbox == (120.0, 140.0, 200.0, 160.0)
    assert all(field.status == "missing" for field in readout.fields[1:])
    assert readout.all_found is False


def test_build_readout_all_found(make_line) -> None:
    associations = [
        Association(label=spec.label, line=make_line(f"{index}", 0, 10))
        for index, spec in enumerate(DEFAULT_LABELS)
    ]

    readout = build_readout(associations, DEFAULT_LABELS)

    assert readout.all_found is True


def test_build_readout_without_labels_is_not_all_found() -> None:
    readout = build_readout([], [])

    assert readout.fields == []
    assert readout.all_found is False
