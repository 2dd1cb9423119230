from __future__ import annotations

import pytest


# Raw ATCF layout: technique number at 3, forecast hour at 5, RMW at 19
ADECK_LINES = [
    "AL, 16, 2023090100, 03, OFCL,  24, 305N,  830W,  75,  975, HU,  34, NEQ,  100,   80,   60,   90, 1012,  200,  20",
    "AL, 16, 2023090100, 03, OFCL,   0, 285N,  800W,  65,  985, HU,  34, NEQ,  100,   80,   60,   90, 1012,  200,  25",
    "AL, 16, 2023090100, 03, OFCL,  12, 293N,  812W,  70,  980, HU,  34, NEQ,  100,   80,   60,   90, 1012,  200,   0",
    "AL, 16, 2023090100, 03, AVNO,   0, 286N,  801W,  60,  988, HU,  34, NEQ,   90,   70,   50,   80, 1012,  190,  30",
    "AL, 16, 2023090106, 03, OFCL,   0, 289N,  806W,  68,  982, HU,  34, NEQ,  100,   80,   60,   90, 1012,  200,  25",
]

BDECK_LINES = [
    "AL, 09, 2022092312,   , BEST,   0, 134N,  689W,  30, 1006, TD,   0,    ,    0,    0,    0,    0, 1010,  150,  40",
    "AL, 09, 2022092318,   , BEST,   0, 137N,  700W,  35, 1004, TS,  34, NEQ,   60,   40,    0,   30, 1010,  150,  30,   0,   0,   L,   0,    ,   0,   0,        IAN",
    "AL, 09, 2022092318,   , CARQ,   0, 137N,  700W,  35, 1004, TS,  34, NEQ,   60,   40,    0,   30, 1010,  150,  30,   0,   0,   L,   0,    ,   0,   0,        IAN",
    "AL, 09, 2022092400,   , BEST,   0, 140N,  712W,  40, 1002, TS,  34, NEQ,   70,   50,   20,   40, 1010,  150,  25,   0,   0,   L,   0,    ,   0,   0,        IAN",
    "AL, 10, 2022092400,   , BEST,   0, 155N,  350W,  25, 1008, TD,   0,    ,    0,    0,    0,    0, 1011,  120,  50,   0,   0,   L,   0,    ,   0,   0,     INVEST",
]


@pytest.fixture
def adeck_content() -> str:
    return "# sample a-deck\n\n" + "\n".join(ADECK_LINES) + "\n"


@pytest.fixture
def header_adeck_content() -> str:
    return (
        "BASIN,CY,YYYYMMDDHH,TAU,TECH,LAT,LON,VMAX,MSLP\n"
        "AL,16,2023090100,24,OFCL,285,-800,65,985\n"
    )


@pytest.fixture
def bdeck_content() -> str:
    return "\n".join(BDECK_LINES) + "\n"
